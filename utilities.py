"""
Utilities module for the Bebop interpreter
Argument coercion and error builders shared by the builtins
"""

from typing import Any, List, Sequence, Tuple, Type

from error_handling import BebopRuntimeError, ErrorKind
from values import Num, Qexpr, Str, Sym


# ==================== ERROR MESSAGE BUILDERS ====================

def arity_error(func_name: str, expected: str, got: int) -> BebopRuntimeError:
  """
  Generate arity mismatch error

  Args:
    func_name: Function name
    expected: Human-readable expected count ("2", ">= 1", ...)
    got: Actual number of arguments

  Returns:
    BebopRuntimeError of kind IncorrectParamCount
  """
  return BebopRuntimeError(
    ErrorKind.INCORRECT_PARAM_COUNT,
    f"Function {func_name} needed {expected} arg(s) but was given {got}"
  )


def type_mismatch_error(
  func_name: str,
  expected: str,
  actual: Any,
  kind: ErrorKind = ErrorKind.WRONG_TYPE
) -> BebopRuntimeError:
  """
  Generate type mismatch error

  Args:
    func_name: Function name
    expected: Expected type
    actual: The offending value
    kind: BadNum for numeric operands, WrongType otherwise

  Returns:
    BebopRuntimeError with formatted message
  """
  return BebopRuntimeError(
    kind,
    f"Function {func_name} needed {expected} but was given {actual.kind} {actual}"
  )


# ==================== VALIDATION UTILITIES ====================

def expect_count(func_name: str, args: Sequence[Any], count: int) -> None:
  """Raise IncorrectParamCount unless exactly `count` arguments were given"""
  if len(args) != count:
    raise arity_error(func_name, str(count), len(args))


def expect_at_least(func_name: str, args: Sequence[Any], count: int) -> None:
  """Raise IncorrectParamCount unless at least `count` arguments were given"""
  if len(args) < count:
    raise arity_error(func_name, f">= {count}", len(args))


def expect_type(func_name: str, value: Any, expected: Type, kind: ErrorKind = ErrorKind.WRONG_TYPE) -> Any:
  """Return `value` unchanged if it has the expected value type, raise otherwise"""
  if not isinstance(value, expected):
    raise type_mismatch_error(func_name, expected.kind, value, kind)
  return value


# ==================== COERCIONS ====================

def to_numbers(func_name: str, args: Sequence[Any]) -> List[float]:
  """Every argument as a float, or BadNum"""
  return [expect_type(func_name, arg, Num, ErrorKind.BAD_NUM).value for arg in args]


def to_qexpr_cells(func_name: str, value: Any) -> Tuple[Any, ...]:
  """Cells of a Q-Expression argument, or WrongType"""
  return expect_type(func_name, value, Qexpr).cells


def to_strings(func_name: str, args: Sequence[Any]) -> List[str]:
  """Every argument as text, or WrongType"""
  return [expect_type(func_name, arg, Str).text for arg in args]


def to_symbol_names(func_name: str, value: Any) -> List[str]:
  """Names from a Q-Expression whose cells must all be symbols"""
  cells = to_qexpr_cells(func_name, value)
  names = []
  for cell in cells:
    if not isinstance(cell, Sym):
      raise BebopRuntimeError(
        ErrorKind.WRONG_TYPE,
        f"Function {func_name} needed a param list of all Symbols but found {cell.kind} {cell}"
      )
    names.append(cell.name)
  return names
