"""
Lox Interpreter - tree-walking evaluator
Statements and expressions are evaluated directly against a chain of
environments; printing is the only side effect.
"""

from typing import Dict, List, Optional, TextIO, Tuple

from syntax import (
  ASTNode,
  LITERAL, VARIABLE, UNARY, BINARY, LOGICAL, GROUPING, ASSIGN,
  EXPRESSION_STMT, PRINT_STMT, VAR_DECL, BLOCK, IF, WHILE
)
from stdlib import (
  BINARY_OPERATORS,
  UNARY_OPERATORS,
  is_truthy,
  lox_print,
  make_nil
)
from environment import (
  make_runtime_env,
  make_child_env,
  env_define,
  env_get,
  env_assign,
  env_depth
)
from utilities import locate_error
from error_handling import LoxRuntimeError, NestingDepthError
from parsing import create_parser


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_execution_context(output: Optional[TextIO] = None) -> Dict:
  """Create an execution context; output None means the current sys.stdout"""
  return {
      'output': output
  }


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """
  Evaluate an AST node and return (result_value, environment).
  Statements evaluate to nil, except expression statements which yield
  the value of their expression.
  """
  if context is None:
    context = make_execution_context()

  if debug:
    print(f"Evaluating: {ast_node.type}")

  node_type = ast_node.type

  if node_type == LITERAL:
    return eval_literal(ast_node, env, debug, context)
  elif node_type == VARIABLE:
    return eval_variable(ast_node, env, debug, context)
  elif node_type == ASSIGN:
    return eval_assign(ast_node, env, debug, context)
  elif node_type == GROUPING:
    return eval_ast(ast_node.children[0], env, debug, context)
  elif node_type == UNARY:
    return eval_unary(ast_node, env, debug, context)
  elif node_type == BINARY:
    return eval_binary(ast_node, env, debug, context)
  elif node_type == LOGICAL:
    return eval_logical(ast_node, env, debug, context)
  elif node_type == EXPRESSION_STMT:
    return eval_ast(ast_node.children[0], env, debug, context)
  elif node_type == PRINT_STMT:
    return exec_print(ast_node, env, debug, context)
  elif node_type == VAR_DECL:
    return exec_var_decl(ast_node, env, debug, context)
  elif node_type == BLOCK:
    return exec_block(ast_node, env, debug, context)
  elif node_type == IF:
    return exec_if(ast_node, env, debug, context)
  elif node_type == WHILE:
    return exec_while(ast_node, env, debug, context)
  else:
    raise LoxRuntimeError(f"Unknown node type: {node_type}", ast_node.line, ast_node.column)


def eval_literal(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  return ast_node.value, env


def eval_variable(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """Evaluate identifier by looking up the environment chain"""
  return env_get(env, ast_node.value, ast_node.line, ast_node.column), env


def eval_assign(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """Evaluate the right-hand side, then overwrite the nearest binding"""
  value, env = eval_ast(ast_node.children[0], env, debug, context)
  env_assign(env, ast_node.value, value, ast_node.line, ast_node.column)
  return value, env


def eval_unary(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  operand, env = eval_ast(ast_node.children[0], env, debug, context)
  try:
    return UNARY_OPERATORS[ast_node.value](operand), env
  except LoxRuntimeError as error:
    locate_error(error, ast_node.line, ast_node.column)
    raise


def eval_binary(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """Evaluate binary operation, left operand first"""
  left_ast, right_ast = ast_node.children
  left_val, env = eval_ast(left_ast, env, debug, context)
  right_val, env = eval_ast(right_ast, env, debug, context)

  op_func = BINARY_OPERATORS.get(ast_node.value)
  if op_func is None:
    raise LoxRuntimeError(f"Unknown operation: {ast_node.value}", ast_node.line, ast_node.column)

  try:
    return op_func(left_val, right_val), env
  except LoxRuntimeError as error:
    locate_error(error, ast_node.line, ast_node.column)
    raise


def eval_logical(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """Short-circuit and/or; the result is the operand that decided it"""
  left_ast, right_ast = ast_node.children
  left_val, env = eval_ast(left_ast, env, debug, context)

  if ast_node.value == 'or':
    if is_truthy(left_val):
      return left_val, env
  elif not is_truthy(left_val):
    return left_val, env

  return eval_ast(right_ast, env, debug, context)


def exec_print(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  value, env = eval_ast(ast_node.children[0], env, debug, context)
  return lox_print(value, context['output']), env


def exec_var_decl(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """Bind the initializer's value (nil when absent) in the current scope"""
  value = make_nil()
  if ast_node.children:
    value, env = eval_ast(ast_node.children[0], env, debug, context)
  env_define(env, ast_node.value, value)
  return make_nil(), env


def exec_block(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """Run statements in a fresh child scope that is dropped afterwards"""
  block_env = make_child_env(env)
  if debug:
    print(f"Entering block (depth {env_depth(block_env)})")

  for statement in ast_node.children:
    eval_ast(statement, block_env, debug, context)

  return make_nil(), env


def exec_if(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  condition, env = eval_ast(ast_node.children[0], env, debug, context)
  if is_truthy(condition):
    eval_ast(ast_node.children[1], env, debug, context)
  elif len(ast_node.children) > 2:
    eval_ast(ast_node.children[2], env, debug, context)
  return make_nil(), env


def exec_while(ast_node: ASTNode, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  condition_ast, body = ast_node.children
  while True:
    condition, env = eval_ast(condition_ast, env, debug, context)
    if not is_truthy(condition):
      break
    eval_ast(body, env, debug, context)
  return make_nil(), env


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def execute(statements: List[ASTNode], env: Dict, debug: bool = False, context: Optional[Dict] = None) -> None:
  """
  Execute statements in order against env.
  The first runtime error stops the run; earlier bindings persist.
  """
  run(statements, env, debug, context)


def run(statements: List[ASTNode], env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Optional[Dict]:
  """
  Execute statements and return the value of a lone expression statement
  (REPL convenience), otherwise None.
  """
  value = None
  for statement in statements:
    try:
      value, env = eval_ast(statement, env, debug, context)
    except RecursionError:
      raise NestingDepthError(
        "Maximum nesting depth exceeded.", statement.line, statement.column
      ) from None

  if len(statements) == 1 and statements[0].type == EXPRESSION_STMT:
    return value
  return None


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class Interpreter:
  """Interpreter session: one root environment for a file run or REPL"""

  def __init__(self, debug: bool = False, output: Optional[TextIO] = None):
    self.debug = debug
    self.parser = create_parser(debug)
    self.global_env = make_runtime_env()
    self.context = make_execution_context(output)

  def run_statements(self, statements: List[ASTNode]) -> Optional[Dict]:
    return run(statements, self.global_env, self.debug, self.context)

  def run_source(self, source: str) -> Optional[Dict]:
    """Scan, parse and run source in this session's root environment"""
    return self.run_statements(self.parser.parse_string(source))


def create_interpreter(debug: bool = False, output: Optional[TextIO] = None) -> Interpreter:
  """Factory function returning an interpreter session"""
  return Interpreter(debug, output)


def create_debug_interpreter(output: Optional[TextIO] = None) -> Interpreter:
  """Factory function returning a debug interpreter session"""
  return create_interpreter(debug=True, output=output)
