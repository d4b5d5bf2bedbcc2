"""
Bebop Standard Library
Builtin functions: each takes (environment, argument list) and returns a value
"""

from typing import Any, Callable, Dict, List
import math
import operator
import time

from environment import Environment
from error_handling import BebopRuntimeError, ErrorKind
from utilities import (
  expect_at_least,
  expect_count,
  expect_type,
  to_numbers,
  to_qexpr_cells,
  to_strings,
  to_symbol_names
)
from values import Builtin, Lambda, Num, Qexpr, Str, from_bool


# ============================================================================
# ARITHMETIC FUNCTIONS
# ============================================================================

def _divide(x: float, y: float) -> float:
  if y == 0:
    raise BebopRuntimeError(ErrorKind.DIV_ZERO, f"You cannot divide {Num(x)}, or any number, by 0")
  return x / y


def _modulo(x: float, y: float) -> float:
  if y == 0:
    raise BebopRuntimeError(ErrorKind.DIV_ZERO, f"You cannot take {Num(x)}, or any number, modulo 0")
  if math.isinf(x):
    return math.nan
  return math.fmod(x, y)


ARITHMETIC_OPS: Dict[str, Callable[[float, float], float]] = {
  "+": operator.add,
  "-": operator.sub,
  "*": operator.mul,
  "/": _divide,
  "%": _modulo,
}


def arithmetic_op(sym: str) -> Callable[[Environment, List[Any]], Num]:
  """
  Factory for left-folding arithmetic builtins

  Args:
    sym: Operator symbol, a key of ARITHMETIC_OPS

  Returns:
    Builtin function; a single `-` operand is negated, any other single
    operand is returned unchanged
  """
  op = ARITHMETIC_OPS[sym]

  def arithmetic(env: Environment, args: List[Any]) -> Num:
    numbers = to_numbers(sym, args)
    expect_at_least(sym, numbers, 1)
    if len(numbers) == 1:
      return Num(-numbers[0]) if sym == "-" else Num(numbers[0])
    result = numbers[0]
    for y in numbers[1:]:
      result = op(result, y)
    return Num(result)

  return arithmetic


def bebop_not(env: Environment, args: List[Any]) -> Num:
  """Logical not: 0 becomes 1, everything else becomes 0"""
  expect_count("!", args, 1)
  (n,) = to_numbers("!", args)
  return from_bool(n == 0)


# ============================================================================
# COMPARISON FUNCTIONS
# ============================================================================

ORDERING_OPS: Dict[str, Callable[[float, float], bool]] = {
  "<": operator.lt,
  ">": operator.gt,
  "<=": operator.le,
  ">=": operator.ge,
  "&&": lambda x, y: x != 0 and y != 0,
  "||": lambda x, y: x != 0 or y != 0,
}


def ordering_op(sym: str) -> Callable[[Environment, List[Any]], Num]:
  """Factory for binary numeric comparisons returning 1 or 0"""
  op = ORDERING_OPS[sym]

  def comparison(env: Environment, args: List[Any]) -> Num:
    expect_count(sym, args, 2)
    x, y = to_numbers(sym, args)
    return from_bool(op(x, y))

  return comparison


def bebop_eq(env: Environment, args: List[Any]) -> Num:
  """Structural equality of any two values"""
  expect_count("==", args, 2)
  return from_bool(args[0] == args[1])


def bebop_ne(env: Environment, args: List[Any]) -> Num:
  """Structural inequality of any two values"""
  expect_count("!=", args, 2)
  return from_bool(args[0] != args[1])


# ============================================================================
# LIST FUNCTIONS
# ============================================================================

def bebop_head(env: Environment, args: List[Any]) -> Any:
  """First element of a Q-Expression"""
  expect_count("head", args, 1)
  cells = to_qexpr_cells("head", args[0])
  if not cells:
    raise BebopRuntimeError(ErrorKind.EMPTY_LIST, "Function head was given empty list")
  return cells[0]


def bebop_tail(env: Environment, args: List[Any]) -> Qexpr:
  """Everything but the first element of a Q-Expression"""
  expect_count("tail", args, 1)
  cells = to_qexpr_cells("tail", args[0])
  if not cells:
    raise BebopRuntimeError(ErrorKind.EMPTY_LIST, "Function tail was given empty list")
  return Qexpr(cells[1:])


def bebop_list(env: Environment, args: List[Any]) -> Qexpr:
  """Quote the arguments into a Q-Expression"""
  return Qexpr(tuple(args))


def bebop_join(env: Environment, args: List[Any]) -> Qexpr:
  """Flatten two or more Q-Expressions into one, left to right"""
  expect_at_least("join", args, 2)
  joined = []
  for arg in args:
    joined.extend(to_qexpr_cells("join", arg))
  return Qexpr(tuple(joined))


def bebop_concat(env: Environment, args: List[Any]) -> Str:
  """Concatenate one or more strings"""
  expect_at_least("concat", args, 1)
  return Str("".join(to_strings("concat", args)))


# ============================================================================
# DEFINITION FUNCTIONS
# ============================================================================

def bebop_lambda(env: Environment, args: List[Any]) -> Lambda:
  """Build a closure from a parameter list and a body, capturing the current frame"""
  expect_count("\\", args, 2)
  params = to_symbol_names("\\", args[0])
  body = to_qexpr_cells("\\", args[1])
  return Lambda(tuple(params), body, env.capture())


def assign_op(sym: str, bind: Callable[[Environment, str, Any], None]) -> Callable[[Environment, List[Any]], Str]:
  """
  Factory for the binding builtins

  Args:
    sym: Builtin name used in error messages
    bind: How each name/value pair lands in the environment

  Returns:
    Builtin function taking a Q-Expression of names and one value per name
  """
  def assign(env: Environment, args: List[Any]) -> Str:
    expect_at_least(sym, args, 2)
    names = to_symbol_names(sym, args[0])
    values = args[1:]
    if len(names) != len(values):
      raise BebopRuntimeError(
        ErrorKind.INCORRECT_PARAM_COUNT,
        f"Function {sym} needed to assign {len(names)} values but was passed {len(values)}"
      )
    for name, value in zip(names, values):
      bind(env, name, value)
    return Str("")

  return assign


bebop_def = assign_op("def", Environment.insert_global)
bebop_assign = assign_op("=", Environment.insert)


# ============================================================================
# MISCELLANEOUS FUNCTIONS
# ============================================================================

def bebop_die(env: Environment, args: List[Any]) -> Any:
  """Raise a user error carrying the given string"""
  expect_count("die", args, 1)
  message = expect_type("die", args[0], Str)
  raise BebopRuntimeError(ErrorKind.INTERRUPT, message.text)


def bebop_echo(env: Environment, args: List[Any]) -> Str:
  """Printed representation of any value, as a string"""
  expect_count("echo", args, 1)
  return Str(str(args[0]))


def bebop_rand(env: Environment, args: List[Any]) -> Num:
  """Pseudo-random number taken from the sub-second clock reading"""
  expect_count("rand", args, 0)
  return Num(float(time.time_ns() % 1_000_000_000))


# ============================================================================
# BUILT-IN FUNCTION REGISTRY
# ============================================================================

def make_builtin_function(name: str, func: Callable[[Environment, List[Any]], Any]) -> Builtin:
  """Create a built-in function value"""
  return Builtin(name, func)


# Note: eval and if live in interpreter.py since they need the evaluator
BUILTIN_FUNCTIONS: Dict[str, Builtin] = {
    # Arithmetic functions
    "!": make_builtin_function("!", bebop_not),
    "+": make_builtin_function("+", arithmetic_op("+")),
    "-": make_builtin_function("-", arithmetic_op("-")),
    "*": make_builtin_function("*", arithmetic_op("*")),
    "/": make_builtin_function("/", arithmetic_op("/")),
    "%": make_builtin_function("%", arithmetic_op("%")),

    # List functions
    "head": make_builtin_function("head", bebop_head),
    "tail": make_builtin_function("tail", bebop_tail),
    "list": make_builtin_function("list", bebop_list),
    "join": make_builtin_function("join", bebop_join),
    "concat": make_builtin_function("concat", bebop_concat),

    # Definition functions
    "\\": make_builtin_function("\\", bebop_lambda),
    "def": make_builtin_function("def", bebop_def),
    "=": make_builtin_function("=", bebop_assign),

    # Miscellaneous functions
    "echo": make_builtin_function("echo", bebop_echo),
    "rand": make_builtin_function("rand", bebop_rand),
    "die": make_builtin_function("die", bebop_die),

    # Comparison functions
    "<": make_builtin_function("<", ordering_op("<")),
    ">": make_builtin_function(">", ordering_op(">")),
    ">=": make_builtin_function(">=", ordering_op(">=")),
    "<=": make_builtin_function("<=", ordering_op("<=")),
    "==": make_builtin_function("==", bebop_eq),
    "!=": make_builtin_function("!=", bebop_ne),
    "&&": make_builtin_function("&&", ordering_op("&&")),
    "||": make_builtin_function("||", ordering_op("||")),
}


def list_builtin_functions() -> List[str]:
  """List all available built-in functions"""
  return list(BUILTIN_FUNCTIONS.keys())
