"""
Utilities module for the Lox interpreter
Operand checks, error builders and operator factories shared by stdlib
"""

from typing import Any, Callable, Dict, Optional

from error_handling import LoxRuntimeError, TypeMismatchError


# ==================== OPERAND CHECKS ====================

def same_type(x: Dict, y: Dict, type_name: str) -> bool:
  """True when both operands carry type_name"""
  return x['type'] == type_name and y['type'] == type_name


# ==================== TYPE MISMATCH ERRORS ====================

def operation_error(op: str, left_type: str, right_type: str) -> TypeMismatchError:
  """TypeMismatchError for a binary operator that only takes Numbers"""
  return TypeMismatchError(
    f"Operands of '{op}' must be numbers, got {left_type} and {right_type}."
  )


def operand_error(op: str, operand_type: str) -> TypeMismatchError:
  """TypeMismatchError for unary minus on a non-Number"""
  return TypeMismatchError(
    f"Operand of '{op}' must be a number, got {operand_type}."
  )


def locate_error(error: LoxRuntimeError, line: int, column: int) -> LoxRuntimeError:
  """Attach a source position to an error raised without one"""
  if not error.line:
    error.line = line
    error.column = column
  return error


# ==================== NUMERIC OPERATOR FACTORY ====================

def numeric_operator(
  op: Callable[[float, float], Any],
  lexeme: str,
  result_type: Optional[str] = None
) -> Callable[[Dict, Dict, Callable], Dict]:
  """
  Wrap a Python operation as a Lox operator on two Numbers

  Args:
    op: Operation on the raw floats (operator.lt, operator.sub, ...)
    lexeme: Operator spelling used in the error message
    result_type: Type tag of the result; None keeps Number

  Returns:
    Function (x, y, make_value) raising TypeMismatchError unless both
    operands are Numbers

  Examples:
    lt = numeric_operator(operator.lt, "<", "Boolean")
    lt({"type": "Number", "value": 1.0}, {"type": "Number", "value": 2.0}, make_value)
  """
  def apply(x: Dict, y: Dict, make_value: Callable) -> Dict:
    if not same_type(x, y, "Number"):
      raise operation_error(lexeme, x['type'], y['type'])
    return make_value(op(x['value'], y['value']), result_type or "Number")

  return apply
