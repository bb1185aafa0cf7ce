"""
Lox token model
Token kinds, the keyword table and the immutable Token record
"""

from typing import Any, FrozenSet
from dataclasses import dataclass


# Token kinds
NUMBER = "NUMBER"
STRING = "STRING"
IDENTIFIER = "IDENTIFIER"
KEYWORD = "KEYWORD"
OPERATOR = "OPERATOR"  # operators and punctuation
EOF = "EOF"

TOKEN_KINDS: FrozenSet[str] = frozenset({NUMBER, STRING, IDENTIFIER, KEYWORD, OPERATOR, EOF})

KEYWORDS: FrozenSet[str] = frozenset({
    'var', 'print', 'if', 'else', 'while', 'for',
    'true', 'false', 'nil', 'and', 'or',
})

# Longest first so two-character operators win over their one-character prefix
OPERATORS = (
    '!=', '==', '<=', '>=',
    '(', ')', '{', '}', ',', '.', '-', '+', ';', '*', '/', '!', '=', '<', '>',
)


@dataclass(frozen=True)
class Token:
    """Lox token with source position"""
    kind: str
    lexeme: str
    literal: Any = None
    line: int = 1
    column: int = 1

    def is_a(self, *lexemes: str) -> bool:
        """True for an operator or keyword token spelled as one of lexemes"""
        return self.kind in (OPERATOR, KEYWORD) and self.lexeme in lexemes

    def __str__(self) -> str:
        if self.literal is not None:
            return f"{self.kind}({self.lexeme}) {self.literal!r}"
        return f"{self.kind}({self.lexeme})"


def make_eof(line: int, column: int) -> Token:
    return Token(EOF, "", None, line, column)
