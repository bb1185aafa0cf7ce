"""
Lox parser
Recursive descent with one token of lookahead; `for` loops are desugared
into blocks and `while` loops here, so the evaluator never sees them.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from tokens import Token, EOF, IDENTIFIER, NUMBER, STRING, make_eof
from syntax import (
    ASTNode, VARIABLE,
    make_literal, make_variable, make_unary, make_binary, make_logical,
    make_grouping, make_assign, make_expression_stmt, make_print_stmt,
    make_var_decl, make_block, make_if, make_while, pretty_print_ast
)
from stdlib import make_boolean, make_nil, make_number, make_string
from error_handling import ParseError, raise_collected
from scanning import scan


class RecursiveDescentParser:
    """Parses one token sequence into statements"""

    # Tokens that start a statement; error recovery resumes at them
    SYNC_KEYWORDS = ('for', 'if', 'print', 'var', 'while')

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind != EOF:
            last = self.tokens[-1] if self.tokens else None
            self.tokens.append(make_eof(last.line if last else 1, 0))
        self.current = 0
        self.errors: List[ParseError] = []

    def parse(self) -> List[ASTNode]:
        """program → declaration* EOF"""
        statements = []
        try:
            while not self.at_end():
                statement = self.declaration()
                if statement is not None:
                    statements.append(statement)
        except RecursionError:
            # The stack has unwound to here; parsing stops at the deep token
            self.errors.append(ParseError("Expression nests too deeply.", self.peek()))
        raise_collected(self.errors)
        return statements

    # ------------------------------------------------------------------
    # Declarations and statements
    # ------------------------------------------------------------------

    def declaration(self) -> Optional[ASTNode]:
        try:
            if self.match('var'):
                return self.var_declaration()
            return self.statement()
        except ParseError as error:
            self.errors.append(error)
            self.synchronize()
            return None

    def var_declaration(self) -> ASTNode:
        keyword = self.previous()
        name = self.consume_kind(IDENTIFIER, "Expect variable name.")
        initializer = None
        if self.match('='):
            initializer = self.expression()
        self.consume(';', "Expect ';' after variable declaration.")
        return make_var_decl(name.lexeme, initializer, keyword.line, keyword.column)

    def statement(self) -> ASTNode:
        if self.match('for'):
            return self.for_statement()
        if self.match('if'):
            return self.if_statement()
        if self.match('print'):
            return self.print_statement()
        if self.match('while'):
            return self.while_statement()
        if self.match('{'):
            brace = self.previous()
            return make_block(self.block(), brace.line, brace.column)
        return self.expression_statement()

    def block(self) -> List[ASTNode]:
        statements = []
        while not self.check('}') and not self.at_end():
            statement = self.declaration()
            if statement is not None:
                statements.append(statement)
        self.consume('}', "Expect '}' after block.")
        return statements

    def for_statement(self) -> ASTNode:
        keyword = self.previous()
        self.consume('(', "Expect '(' after 'for'.")

        if self.match(';'):
            initializer = None
        elif self.match('var'):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(';'):
            condition = self.expression()
        self.consume(';', "Expect ';' after loop condition.")

        increment = None
        if not self.check(')'):
            increment = self.expression()
        self.consume(')', "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = make_block([body, make_expression_stmt(increment)], body.line, body.column)
        if condition is None:
            condition = make_literal(make_boolean(True), keyword.line, keyword.column)
        body = make_while(condition, body, keyword.line, keyword.column)
        if initializer is not None:
            body = make_block([initializer, body], keyword.line, keyword.column)
        return body

    def if_statement(self) -> ASTNode:
        keyword = self.previous()
        self.consume('(', "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(')', "Expect ')' after if condition.")
        then_branch = self.statement()
        else_branch = None
        if self.match('else'):
            else_branch = self.statement()
        return make_if(condition, then_branch, else_branch, keyword.line, keyword.column)

    def while_statement(self) -> ASTNode:
        keyword = self.previous()
        self.consume('(', "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(')', "Expect ')' after condition.")
        body = self.statement()
        return make_while(condition, body, keyword.line, keyword.column)

    def print_statement(self) -> ASTNode:
        keyword = self.previous()
        value = self.expression()
        self.consume(';', "Expect ';' after value.")
        return make_print_stmt(value, keyword.line, keyword.column)

    def expression_statement(self) -> ASTNode:
        expr = self.expression()
        self.consume(';', "Expect ';' after expression.")
        return make_expression_stmt(expr)

    # ------------------------------------------------------------------
    # Expressions, loosest binding first
    # ------------------------------------------------------------------

    def expression(self) -> ASTNode:
        return self.assignment()

    def assignment(self) -> ASTNode:
        expr = self.logic_or()

        if self.match('='):
            equals = self.previous()
            value = self.assignment()
            if expr.type == VARIABLE:
                return make_assign(expr.value, value, expr.line, expr.column)
            # Reported, but the parser is not confused: no need to synchronize
            self.errors.append(ParseError("Invalid assignment target.", equals))

        return expr

    def logic_or(self) -> ASTNode:
        return self.left_associative(self.logic_and, ('or',), make_logical)

    def logic_and(self) -> ASTNode:
        return self.left_associative(self.equality, ('and',), make_logical)

    def equality(self) -> ASTNode:
        return self.left_associative(self.comparison, ('==', '!='), make_binary)

    def comparison(self) -> ASTNode:
        return self.left_associative(self.term, ('>', '>=', '<', '<='), make_binary)

    def term(self) -> ASTNode:
        return self.left_associative(self.factor, ('+', '-'), make_binary)

    def factor(self) -> ASTNode:
        return self.left_associative(self.unary, ('*', '/'), make_binary)

    def left_associative(
        self,
        operand: Callable[[], ASTNode],
        operators: Tuple[str, ...],
        make_node: Callable[..., ASTNode]
    ) -> ASTNode:
        expr = operand()
        while self.match(*operators):
            op = self.previous()
            right = operand()
            expr = make_node(op.lexeme, expr, right, op.line, op.column)
        return expr

    def unary(self) -> ASTNode:
        if self.match('!', '-'):
            op = self.previous()
            operand = self.unary()
            return make_unary(op.lexeme, operand, op.line, op.column)
        return self.primary()

    def primary(self) -> ASTNode:
        token = self.peek()

        if self.match('false'):
            return make_literal(make_boolean(False), token.line, token.column)
        if self.match('true'):
            return make_literal(make_boolean(True), token.line, token.column)
        if self.match('nil'):
            return make_literal(make_nil(), token.line, token.column)

        if token.kind == NUMBER:
            self.advance()
            return make_literal(make_number(token.literal), token.line, token.column)
        if token.kind == STRING:
            self.advance()
            return make_literal(make_string(token.literal), token.line, token.column)
        if token.kind == IDENTIFIER:
            self.advance()
            return make_variable(token.lexeme, token.line, token.column)

        if self.match('('):
            expr = self.expression()
            self.consume(')', "Expect ')' after expression.")
            return make_grouping(expr, token.line, token.column)

        raise ParseError("Expect expression.", token)

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def match(self, *lexemes: str) -> bool:
        if self.check(*lexemes):
            self.advance()
            return True
        return False

    def check(self, *lexemes: str) -> bool:
        return self.peek().is_a(*lexemes)

    def consume(self, lexeme: str, message: str) -> Token:
        if self.check(lexeme):
            return self.advance()
        raise ParseError(message, self.peek())

    def consume_kind(self, kind: str, message: str) -> Token:
        if self.peek().kind == kind:
            return self.advance()
        raise ParseError(message, self.peek())

    def advance(self) -> Token:
        if not self.at_end():
            self.current += 1
        return self.previous()

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def at_end(self) -> bool:
        return self.peek().kind == EOF

    def synchronize(self):
        """Discard tokens until a statement boundary"""
        self.advance()
        while not self.at_end():
            if self.previous().is_a(';'):
                return
            if self.peek().is_a(*self.SYNC_KEYWORDS):
                return
            self.advance()


def parse(tokens: Sequence[Token]) -> List[ASTNode]:
    """Parse tokens into statements; raises the first ParseError"""
    return RecursiveDescentParser(tokens).parse()


class LoxParser:
    """Source-to-AST front end: scanning plus parsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def tokenize(self, text: str) -> List[Token]:
        tokens = scan(text)
        if self.debug:
            print(f"Scanned {len(tokens)} tokens")
        return tokens

    def parse_tokens(self, tokens: Sequence[Token]) -> List[ASTNode]:
        statements = parse(tokens)
        if self.debug:
            print(f"Parsed {len(statements)} statements")
        return statements

    def parse_string(self, text: str) -> List[ASTNode]:
        return self.parse_tokens(self.tokenize(text))


def create_parser(debug: bool = False) -> LoxParser:
    """Factory function returning a parser"""
    return LoxParser(debug)


def create_debug_parser() -> LoxParser:
    """Factory function returning a debug parser"""
    return LoxParser(debug=True)


def format_program(statements: List[ASTNode]) -> str:
    """Pretty print every top-level statement"""
    return "\n".join(pretty_print_ast(statement) for statement in statements)
