"""
Lox runtime values and built-in operators
Values are immutable dictionaries tagged Number, String, Boolean or Nil
"""

from typing import Any, Callable, Dict, Optional, TextIO
import math
import operator
import sys

from utilities import (
  numeric_operator,
  operand_error,
  same_type
)
from error_handling import TypeMismatchError


NUMBER = "Number"
STRING = "String"
BOOLEAN = "Boolean"
NIL = "Nil"


# ============================================================================
# VALUE CONSTRUCTORS
# ============================================================================

def make_value(value: Any, type_name: str) -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_number(value: float) -> Dict:
  return make_value(float(value), NUMBER)


def make_string(value: str) -> Dict:
  return make_value(value, STRING)


def make_boolean(value: bool) -> Dict:
  return make_value(bool(value), BOOLEAN)


def make_nil() -> Dict:
  return make_value(None, NIL)


# ============================================================================
# TRUTHINESS AND EQUALITY
# ============================================================================

def is_truthy(value: Dict) -> bool:
  """Nil and false are falsy, everything else is truthy"""
  if value['type'] == NIL:
    return False
  if value['type'] == BOOLEAN:
    return value['value']
  return True


def values_equal(x: Dict, y: Dict) -> bool:
  """Equality without coercion: different types are never equal"""
  if x['type'] != y['type']:
    return False
  return x['value'] == y['value']


def lox_eq(x: Dict, y: Dict) -> Dict:
  """Equality comparison"""
  return make_boolean(values_equal(x, y))


def lox_ne(x: Dict, y: Dict) -> Dict:
  """Not equal comparison"""
  return make_boolean(not values_equal(x, y))


# ============================================================================
# COMPARISON FUNCTIONS
# ============================================================================

_lox_lt_impl = numeric_operator(operator.lt, "<", BOOLEAN)
_lox_gt_impl = numeric_operator(operator.gt, ">", BOOLEAN)
_lox_le_impl = numeric_operator(operator.le, "<=", BOOLEAN)
_lox_ge_impl = numeric_operator(operator.ge, ">=", BOOLEAN)


def lox_lt(x: Dict, y: Dict) -> Dict:
  return _lox_lt_impl(x, y, make_value)


def lox_gt(x: Dict, y: Dict) -> Dict:
  return _lox_gt_impl(x, y, make_value)


def lox_le(x: Dict, y: Dict) -> Dict:
  return _lox_le_impl(x, y, make_value)


def lox_ge(x: Dict, y: Dict) -> Dict:
  return _lox_ge_impl(x, y, make_value)


# ============================================================================
# ARITHMETIC FUNCTIONS
# ============================================================================

def ieee_divide(x: float, y: float) -> float:
  """Float division with IEEE-754 results for a zero divisor"""
  if y == 0.0:
    if x == 0.0 or math.isnan(x):
      return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)
  return x / y


def lox_add(x: Dict, y: Dict) -> Dict:
  """Addition for numbers, concatenation for strings"""
  if same_type(x, y, NUMBER):
    return make_number(x['value'] + y['value'])
  if same_type(x, y, STRING):
    return make_string(x['value'] + y['value'])
  raise TypeMismatchError(
    f"Operands of '+' must be two numbers or two strings, got {x['type']} and {y['type']}."
  )


_lox_sub_impl = numeric_operator(operator.sub, "-")
_lox_mul_impl = numeric_operator(operator.mul, "*")
_lox_div_impl = numeric_operator(ieee_divide, "/")


def lox_sub(x: Dict, y: Dict) -> Dict:
  return _lox_sub_impl(x, y, make_value)


def lox_mul(x: Dict, y: Dict) -> Dict:
  return _lox_mul_impl(x, y, make_value)


def lox_div(x: Dict, y: Dict) -> Dict:
  """Division; a zero divisor gives inf or nan, never an error"""
  return _lox_div_impl(x, y, make_value)


# ============================================================================
# UNARY FUNCTIONS
# ============================================================================

def lox_negate(x: Dict) -> Dict:
  if x['type'] != NUMBER:
    raise operand_error("-", x['type'])
  return make_number(-x['value'])


def lox_not(x: Dict) -> Dict:
  return make_boolean(not is_truthy(x))


BINARY_OPERATORS: Dict[str, Callable[[Dict, Dict], Dict]] = {
    '+': lox_add,
    '-': lox_sub,
    '*': lox_mul,
    '/': lox_div,
    '==': lox_eq,
    '!=': lox_ne,
    '<': lox_lt,
    '>': lox_gt,
    '<=': lox_le,
    '>=': lox_ge,
}

UNARY_OPERATORS: Dict[str, Callable[[Dict], Dict]] = {
    '-': lox_negate,
    '!': lox_not,
}


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

def format_number(number: float) -> str:
  """Minimal-digits rendering: 3.0 -> '3', 2.5 -> '2.5'"""
  if math.isnan(number):
    return "nan"
  if math.isinf(number):
    return "inf" if number > 0 else "-inf"
  if number.is_integer() and abs(number) < 1e16:
    return str(int(number))
  return repr(number)


def stringify(value: Dict) -> str:
  """Convert a runtime value to its printed text"""
  if value['type'] == NUMBER:
    return format_number(value['value'])
  elif value['type'] == BOOLEAN:
    return "true" if value['value'] else "false"
  elif value['type'] == NIL:
    return "nil"
  elif value['type'] == STRING:
    return value['value']
  else:
    return f"<{value['type']}>"


def lox_print(value: Dict, output: Optional[TextIO] = None) -> Dict:
  """Print a value followed by a newline"""
  stream = output if output is not None else sys.stdout
  stream.write(stringify(value) + "\n")
  return make_nil()
