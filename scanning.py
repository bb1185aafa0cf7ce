"""
Lox scanner
Single left-to-right pass over the source, one ordered set of token patterns
tried at each position. Errors are collected and the pass goes on.
"""

from typing import List, Tuple

from pyparsing import MatchFirst, ParseResults, Regex, Word, alphanums, alphas, col, one_of

from tokens import (
    Token, NUMBER, STRING, IDENTIFIER, KEYWORD, OPERATOR, KEYWORDS, OPERATORS, make_eof
)
from error_handling import LexError, raise_collected


class LoxTokenizer:
    """Lox tokenizer built from pyparsing token patterns"""

    def __init__(self):
        self._setup_token_patterns()

    def _setup_token_patterns(self):
        """Setup token patterns, in priority order"""

        # Comments run to the end of the line and produce no token
        comment = Regex(r"//[^\n]*")("comment")

        # Strings have no escape sequences and may span lines
        string = Regex(r'"[^"]*"')("string")
        unterminated_string = Regex(r'"[^"]*')("unterminated")

        # Numbers are always floats; no leading or trailing dot
        number = Regex(r"[0-9]+(?:\.[0-9]+)?")("number")

        # Identifiers and keywords, maximal munch
        identifier = Word(alphas + "_", alphanums + "_")("identifier")

        # one_of reorders so '==' is tried before '='
        operator = one_of(list(OPERATORS))("operator")

        # Anything else that is not whitespace
        unexpected = Regex(r"[^ \t\r\n]")("unexpected")

        self.token_pattern = MatchFirst([
            comment, string, unterminated_string, number, identifier, operator, unexpected
        ])
        self.token_pattern.set_whitespace_chars(" \t\r\n")
        # Keep tabs as-is so match locations index the raw source
        self.token_pattern.parse_with_tabs()

    def tokenize(self, source: str) -> Tuple[List[Token], List[LexError]]:
        """Scan source, returning the tokens and every error met on the way"""
        tokens: List[Token] = []
        errors: List[LexError] = []
        line = 1
        last = 0

        for matched, start, end in self.token_pattern.scan_string(source):
            line += source.count('\n', last, start)
            last = start
            lexeme = source[start:end]
            column = col(start, source)

            token, error = self._classify(matched, lexeme, line, column)
            if token is not None:
                tokens.append(token)
            if error is not None:
                errors.append(error)

        line += source.count('\n', last)
        tokens.append(make_eof(line, col(len(source), source) if source else 1))
        return tokens, errors

    def _classify(self, matched: ParseResults, lexeme: str, line: int, column: int):
        if "comment" in matched:
            return None, None
        if "string" in matched:
            return Token(STRING, lexeme, lexeme[1:-1], line, column), None
        if "unterminated" in matched:
            return None, LexError("Unterminated string.", line, column)
        if "number" in matched:
            return Token(NUMBER, lexeme, float(lexeme), line, column), None
        if "identifier" in matched:
            kind = KEYWORD if lexeme in KEYWORDS else IDENTIFIER
            return Token(kind, lexeme, None, line, column), None
        if "operator" in matched:
            return Token(OPERATOR, lexeme, None, line, column), None
        return None, LexError(f"Unexpected character '{lexeme}'.", line, column)


_tokenizer = LoxTokenizer()


def scan(source: str) -> List[Token]:
    """Scan source into tokens ending with EOF; raises the first LexError"""
    tokens, errors = _tokenizer.tokenize(source)
    raise_collected(errors)
    return tokens


def tokenize(source: str) -> Tuple[List[Token], List[LexError]]:
    """Scan without raising: the tokens and the collected errors"""
    return _tokenizer.tokenize(source)
