"""
Lox abstract syntax tree
Immutable nodes for expressions and statements, their constructors and a
pretty printer for debugging
"""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field


# Expression node types
LITERAL = "LITERAL"
VARIABLE = "VARIABLE"
UNARY = "UNARY"
BINARY = "BINARY"
LOGICAL = "LOGICAL"
GROUPING = "GROUPING"
ASSIGN = "ASSIGN"

# Statement node types
EXPRESSION_STMT = "EXPRESSION_STMT"
PRINT_STMT = "PRINT_STMT"
VAR_DECL = "VAR_DECL"
BLOCK = "BLOCK"
IF = "IF"
WHILE = "WHILE"

EXPRESSION_TYPES = frozenset({LITERAL, VARIABLE, UNARY, BINARY, LOGICAL, GROUPING, ASSIGN})
STATEMENT_TYPES = frozenset({EXPRESSION_STMT, PRINT_STMT, VAR_DECL, BLOCK, IF, WHILE})


@dataclass(frozen=True)
class ASTNode:
    """Abstract syntax tree node

    `value` holds the node's own datum (literal value, variable name or
    operator lexeme); sub-trees live in `children`.
    """
    type: str
    value: Any = None
    children: Tuple['ASTNode', ...] = field(default_factory=tuple)
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.children:
            children_str = ", ".join(str(child) for child in self.children)
            return f"{self.type}({self.value}, [{children_str}])"
        return f"{self.type}({self.value})"


# ============================================================================
# EXPRESSIONS
# ============================================================================

def make_literal(value: Dict, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(LITERAL, value, (), line, column)


def make_variable(name: str, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(VARIABLE, name, (), line, column)


def make_unary(op: str, operand: ASTNode, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(UNARY, op, (operand,), line, column)


def make_binary(op: str, left: ASTNode, right: ASTNode, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(BINARY, op, (left, right), line, column)


def make_logical(op: str, left: ASTNode, right: ASTNode, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(LOGICAL, op, (left, right), line, column)


def make_grouping(inner: ASTNode, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(GROUPING, None, (inner,), line, column)


def make_assign(name: str, value: ASTNode, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(ASSIGN, name, (value,), line, column)


# ============================================================================
# STATEMENTS
# ============================================================================

def make_expression_stmt(expr: ASTNode) -> ASTNode:
    return ASTNode(EXPRESSION_STMT, None, (expr,), expr.line, expr.column)


def make_print_stmt(expr: ASTNode, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(PRINT_STMT, None, (expr,), line, column)


def make_var_decl(name: str, initializer: Optional[ASTNode] = None,
                  line: int = 0, column: int = 0) -> ASTNode:
    children = (initializer,) if initializer is not None else ()
    return ASTNode(VAR_DECL, name, children, line, column)


def make_block(statements: List[ASTNode], line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(BLOCK, None, tuple(statements), line, column)


def make_if(condition: ASTNode, then_branch: ASTNode, else_branch: Optional[ASTNode] = None,
            line: int = 0, column: int = 0) -> ASTNode:
    children = (condition, then_branch)
    if else_branch is not None:
        children += (else_branch,)
    return ASTNode(IF, None, children, line, column)


def make_while(condition: ASTNode, body: ASTNode, line: int = 0, column: int = 0) -> ASTNode:
    return ASTNode(WHILE, None, (condition, body), line, column)


# ============================================================================
# INSPECTION
# ============================================================================

def find_nodes_by_type(node: ASTNode, node_type: str) -> List[ASTNode]:
    """Find all nodes of a specific type, in pre-order"""
    results = []

    def search(n: ASTNode):
        if n.type == node_type:
            results.append(n)
        for child in n.children:
            search(child)

    search(node)
    return results


def pretty_print_ast(node: ASTNode, indent: int = 0) -> str:
    """Pretty print AST with indentation, children two spaces deeper"""
    lines = []
    pending = [(node, indent)]
    while pending:
        current, depth = pending.pop()
        if current.type == LITERAL:
            label = f"{current.type}: {current.value['type']} {current.value['value']!r}"
        elif current.value is not None:
            label = f"{current.type}: {current.value}"
        else:
            label = current.type
        lines.append(f"{'  ' * depth}{label}")
        pending.extend((child, depth + 1) for child in reversed(current.children))
    return "\n".join(lines)
