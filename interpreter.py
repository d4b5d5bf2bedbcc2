"""
Bebop Interpreter
Tree-walking evaluator over the value types, closure application with
currying, and the text-in/text-out entry point
"""

from typing import Any, List

from environment import Environment
from error_handling import BebopParseError, BebopRuntimeError, ErrorKind
from parsing import parse
from stdlib import BUILTIN_FUNCTIONS, make_builtin_function
from utilities import expect_count, expect_type
from values import UNIT, Builtin, Lambda, Num, Qexpr, Sexpr, Sym, is_callable, is_truthy


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_value(value: Any, env: Environment) -> Any:
  """
  Evaluate one value in the given environment.
  Symbols are looked up, S-Expressions are reduced, everything else evaluates
  to itself.
  """
  if env.debug:
    print(f"Evaluating: {value}")

  if isinstance(value, Sym):
    return eval_symbol(value, env)
  elif isinstance(value, Sexpr):
    return eval_sexpression(value, env)
  return value


def eval_symbol(symbol: Sym, env: Environment) -> Any:
  """Evaluate a symbol by looking it up in the environment"""
  value = env.get(symbol.name)

  if value is None:
    raise BebopRuntimeError(ErrorKind.UNBOUND_SYMBOL, f'"{symbol.name}" has not been defined')

  return value


def eval_sexpression(sexpr: Sexpr, env: Environment) -> Any:
  """
  Reduce an S-Expression: evaluate every cell left to right, then apply the
  first result to the rest.

  A single callable result is called with no arguments rather than returned,
  so `(f)` runs a zero-parameter closure.
  """
  results = [eval_value(cell, env) for cell in sexpr.cells]

  if not results:
    return UNIT

  op, operands = results[0], results[1:]

  if len(results) == 1:
    return apply_function(op, [], env) if is_callable(op) else op

  if not is_callable(op):
    raise BebopRuntimeError(ErrorKind.BAD_OP, f"{op} is not a valid operator")

  return apply_function(op, operands, env)


def apply_function(func: Any, args: List[Any], env: Environment) -> Any:
  """Dispatch a call to a builtin or a closure"""
  if env.debug:
    print(f"Calling: {func} with {len(args)} arg(s)")

  if isinstance(func, Builtin):
    return func.func(env, args)
  return call_lambda(func, args, env)


def call_lambda(func: Lambda, args: List[Any], env: Environment) -> Any:
  """
  Bind arguments to parameters one at a time.

  `:` binds the parameter after it to a Q-Expression of every remaining
  argument. With parameters left over the result is a new closure waiting
  for them; otherwise the body runs with the closure's frame pushed on top
  of the active environment.
  """
  given = len(args)
  total = len(func.params)
  params = list(func.params)
  pending = list(args)
  bindings = dict(func.env)

  while pending:
    if not params:
      raise BebopRuntimeError(
        ErrorKind.INCORRECT_PARAM_COUNT,
        f"Function needed {total} arg(s) but was given {given}"
      )

    name = params.pop(0)

    if name == ":":
      if len(params) != 1:
        raise BebopRuntimeError(
          ErrorKind.INCORRECT_PARAM_COUNT,
          ": operator needs to be followed by exactly one arg"
        )
      bindings[params.pop(0)] = Qexpr(tuple(pending))
      break

    bindings[name] = pending.pop(0)

  if params:
    return Lambda(tuple(params), func.body, bindings)

  with env.scope(bindings):
    return eval_value(Sexpr(func.body), env)


# ============================================================================
# EVALUATOR BUILTINS
# ============================================================================

def bebop_eval(env: Environment, args: List[Any]) -> Any:
  """Evaluate quoted code: a Q-Expression runs as an S-Expression"""
  expect_count("eval", args, 1)
  arg = args[0]
  if isinstance(arg, Qexpr):
    return eval_value(Sexpr(arg.cells), env)
  return eval_value(arg, env)


def bebop_if(env: Environment, args: List[Any]) -> Any:
  """Run the then or else branch depending on a numeric condition"""
  expect_count("if", args, 3)
  condition = expect_type("if", args[0], Num)
  then_branch = expect_type("if", args[1], Qexpr)
  else_branch = expect_type("if", args[2], Qexpr)

  chosen = then_branch if is_truthy(condition) else else_branch
  return eval_value(Sexpr(chosen.cells), env)


EVALUATOR_FUNCTIONS = {
    "eval": make_builtin_function("eval", bebop_eval),
    "if": make_builtin_function("if", bebop_if),
}


# ============================================================================
# ENVIRONMENT SETUP
# ============================================================================

def create_builtin_runtime_env(debug: bool = False) -> Environment:
  """Create an environment whose root frame holds every builtin"""
  env = Environment(debug=debug)
  env.push({})

  for name, builtin in {**BUILTIN_FUNCTIONS, **EVALUATOR_FUNCTIONS}.items():
    env.insert(name, builtin)

  return env


# ============================================================================
# ENTRY POINTS
# ============================================================================

def lisp(env: Environment, source: str) -> str:
  """
  Parse and evaluate source text as a single root S-Expression.
  Never raises: the result, a runtime error or a parse error all come back
  as text.
  """
  try:
    tree = parse(source)
  except BebopParseError as e:
    return f"Error: Parsing Error - Could not parse the input; {e}"

  try:
    return str(eval_value(tree, env))
  except BebopRuntimeError as e:
    return str(e)


def run_program(env: Environment, source: str) -> List[Any]:
  """
  Evaluate each top-level form of a program in order and return their values.
  Parse and runtime errors propagate to the caller.
  """
  tree = parse(source)
  return [eval_value(form, env) for form in tree.cells]


def create_interpreter(debug: bool = False):
  """Create an interpreter function bound to a fresh environment"""
  env = create_builtin_runtime_env(debug)

  def interpreter(source: str) -> str:
    return lisp(env, source)

  interpreter.env = env
  return interpreter
