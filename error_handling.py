"""
Error handling for the Lox interpreter with source-context reports
Exception hierarchy for the three pipeline stages plus pure report helpers
"""

from typing import List, Optional, Dict


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LoxError(Exception):
    """Base class for every error the interpreter reports to the user"""
    label = "Error"

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        # Every error reported in the same pass, this one first
        self.errors: List['LoxError'] = [self]
        super().__init__(message)

    @property
    def where(self) -> str:
        return ""

    def __str__(self) -> str:
        return f"[line {self.line}] {self.label}{self.where}: {self.message}"


class LexError(LoxError):
    """Unterminated string or unrecognized character"""
    label = "LexError"


class ParseError(LoxError):
    """Unexpected token, missing terminator or invalid assignment target"""
    label = "ParseError"

    def __init__(self, message: str, token=None):
        self.token = token
        line = token.line if token is not None else 0
        column = token.column if token is not None else 0
        super().__init__(message, line, column)

    @property
    def where(self) -> str:
        if self.token is None:
            return ""
        if self.token.kind == "EOF":
            return " at end"
        return f" at '{self.token.lexeme}'"


class LoxRuntimeError(LoxError):
    """Error raised while evaluating a statement"""
    kind = "RuntimeError"

    @property
    def label(self) -> str:
        return f"RuntimeError({self.kind})"


class TypeMismatchError(LoxRuntimeError):
    kind = "TypeMismatch"


class UndefinedVariableError(LoxRuntimeError):
    kind = "UndefinedVariable"


class NestingDepthError(LoxRuntimeError):
    """Evaluation nested deeper than the Python stack allows"""
    kind = "NestingDepth"


def raise_collected(errors: List[LoxError]) -> None:
    """Raise the first of errors, carrying the whole list"""
    if not errors:
        return
    first = errors[0]
    first.errors = list(errors)
    raise first


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_error_report(
    label: str,
    message: str,
    line: int,
    column: int,
    where: str = "",
    context: Optional[str] = None
) -> Dict:
    """Create an immutable error report structure"""
    return {
        'label': label,
        'message': message,
        'line': line,
        'column': column,
        'where': where,
        'context': context
    }


def format_error_report(report: Dict) -> str:
    """Format error report as string"""
    error_msg = f"[line {report['line']}] {report['label']}{report['where']}: {report['message']}"
    if report['context']:
        error_msg += f"\n{report['context']}"
    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 1) -> str:
    """Get context lines around the error, with a caret under col_num"""
    lines = source_text.split('\n')
    if line_num < 1 or line_num > len(lines):
        return ""

    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1 and col_num > 0:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^")

    return '\n'.join(context_parts)


def error_to_report(error: LoxError, source_text: Optional[str] = None) -> Dict:
    """Convert a LoxError to a report dict, with context when source is known"""
    context = None
    if source_text is not None:
        context = get_context_lines(source_text, error.line, error.column) or None

    return make_error_report(
        label=error.label,
        message=error.message,
        line=error.line,
        column=error.column,
        where=error.where,
        context=context
    )


def describe_error(error: LoxError, source_text: Optional[str] = None) -> str:
    """Render every error collected alongside error"""
    return '\n'.join(
        format_error_report(error_to_report(each, source_text))
        for each in error.errors
    )
