"""
Bebop Prelude
Library functions written in Bebop itself: HTML tag helpers for the markdown
renderer and the recursive list toolkit
"""

from environment import Environment
from interpreter import create_builtin_runtime_env, run_program


PRELUDE_SOURCE = r"""
(def [fun]
  (\ [args body]
    [def (list (head args))
      (\ (tail args) body)]))

(fun [h1 children] [concat "<h1>" children "</h1>"])
(fun [h2 children] [concat "<h2>" children "</h2>"])
(fun [h3 children] [concat "<h3>" children "</h3>"])
(fun [h4 children] [concat "<h4>" children "</h4>"])
(fun [h5 children] [concat "<h5>" children "</h5>"])
(fun [h6 children] [concat "<h6>" children "</h6>"])

(fun [code children] [concat "<code>" children "</code>"])
(fun [pre children] [concat "<pre>" children "</pre>"])
(fun [p children] [concat "<p>" children "</p>"])
(fun [i children] [concat "<i>" children "</i>"])
(fun [b children] [concat "<b>" children "</b>"])
(fun [li children] [concat "<li>" children "</li>"])
(fun [ul children] [concat "<ul>" children "</ul>"])
(fun [ol children] [concat "<ol>" children "</ol>"])

(fun [img src alt]
  [concat "<img src='" src "' alt='" alt "' />"])

(fun [a href children]
  [concat "<a href='" href "'>" children "</a>"])

(def [hr] "<hr/>")

(def [true] 1)
(def [false] 0)
(def [nil] ())

(fun [not n] [if (== n 0) [1] [0]])
(fun [is-nil n] [== n nil])
(fun [not-nil n] [not (== n nil)])
(fun [dec n] [- n 1])

(fun [cons x xs]
  [join
    (if (== x [])
      [x]
      [list x])
    xs])

(fun [empty l]
  [if (== l [])
    [true]
    [false]])

(fun [len l]
  [if (empty l)
    [0]
    [+ 1 (len (tail l))]])

(fun [rec target base step]
  [if (== 0 target)
    [base]
    [step (dec target)
      (\ [] [rec (dec target) base step])]])

(fun [rec-list target base step]
  [if (== 0 (len target))
    [base]
    [step
      (head target)
      (\ [] [rec-list (tail target) base step])]])

(fun [map target mapper]
  [rec-list target [] (\ [e es] [cons (mapper e) (es)])])

(fun [filter target filterer]
  [rec-list target [] (\ [e es] [if (filterer e) [cons e (es)] [(es)]])])
"""


PRELUDE_NAMES = [
    "fun",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "code", "pre", "p", "i", "b", "li", "ul", "ol", "img", "a", "hr",
    "true", "false", "nil",
    "not", "is-nil", "not-nil", "dec",
    "cons", "empty", "len", "rec", "rec-list", "map", "filter",
]


def load_prelude(env: Environment) -> Environment:
  """Evaluate the prelude into an environment's root frame"""
  run_program(env, PRELUDE_SOURCE)
  return env


def create_prelude_env(debug: bool = False) -> Environment:
  """Builtins plus the prelude, ready for documents and the REPL"""
  return load_prelude(create_builtin_runtime_env(debug))
