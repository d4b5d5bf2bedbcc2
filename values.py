"""
Bebop Value Model
One immutable type family for both parsed forms and runtime values
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple
import math


# ============================================================================
# VALUE TYPES
# ============================================================================

def format_number(n: float) -> str:
  """Render a number the way the REPL shows it (no trailing .0 for integers)"""
  if math.isfinite(n) and n == int(n):
    return str(int(n))
  return repr(n)


def _join(cells: Tuple[Any, ...], render: Callable[[Any], str]) -> str:
  return " ".join(render(cell) for cell in cells)


@dataclass(frozen=True)
class Sym:
  """Identifier resolved against the environment at evaluation time"""
  name: str
  kind = "Symbol"

  def __str__(self) -> str:
    return self.name


@dataclass(frozen=True)
class Num:
  """The only numeric type: a 64-bit float"""
  value: float
  kind = "Number"

  def __str__(self) -> str:
    return format_number(self.value)


@dataclass(frozen=True)
class Str:
  """Immutable text"""
  text: str
  kind = "String"

  def __str__(self) -> str:
    return self.text


@dataclass(frozen=True)
class Sexpr:
  """Application form, reduced whenever it is evaluated"""
  cells: Tuple[Any, ...] = ()
  kind = "S-Expression"

  def __str__(self) -> str:
    return f"({_join(self.cells, str)})"


@dataclass(frozen=True)
class Qexpr:
  """Quoted list: same cells as an Sexpr, never evaluated on its own"""
  cells: Tuple[Any, ...] = ()
  kind = "Q-Expression"

  def __str__(self) -> str:
    return f"[{_join(self.cells, str)}]"


@dataclass(frozen=True)
class Builtin:
  """Primitive function; two builtins are equal when their names are"""
  name: str
  func: Callable = field(compare=False, repr=False)
  kind = "Builtin"

  def __str__(self) -> str:
    return self.name


@dataclass(frozen=True)
class Lambda:
  """User closure with its remaining parameters and its own captured frame

  The captured frame is a private copy, so it never takes part in equality.
  """
  params: Tuple[str, ...]
  body: Tuple[Any, ...]
  env: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
  kind = "Lambda"

  def __str__(self) -> str:
    return f"(\\ [{' '.join(self.params)}] [{_join(self.body, str)}])"


# Result of an empty form, and of anything that has nothing to return
UNIT = Sexpr(())


# ============================================================================
# HELPERS
# ============================================================================

def is_callable(value: Any) -> bool:
  """Check whether a value can sit in operator position"""
  return isinstance(value, (Builtin, Lambda))


def is_truthy(value: Num) -> bool:
  """0 is false, every other number is true"""
  return value.value != 0.0


def from_bool(flag: bool) -> Num:
  return Num(1.0) if flag else Num(0.0)


def to_source(value: Any) -> str:
  """Render a value as source text that parses back to an equal value

  Differs from str() only for strings, which are quoted here.
  """
  if isinstance(value, Str):
    return f'"{value.text}"'
  if isinstance(value, Sexpr):
    return f"({_join(value.cells, to_source)})"
  if isinstance(value, Qexpr):
    return f"[{_join(value.cells, to_source)}]"
  if isinstance(value, Lambda):
    return f"(\\ [{' '.join(value.params)}] [{_join(value.body, to_source)}])"
  return str(value)
