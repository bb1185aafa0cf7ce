"""
Error hierarchy and report formatting tests
"""

import pytest
from tokens import Token, IDENTIFIER, make_eof
from error_handling import (
    LoxError, LexError, ParseError, LoxRuntimeError, TypeMismatchError,
    UndefinedVariableError, raise_collected, get_context_lines, describe_error
)


class TestLabels:

    def test_lex_error(self):
        error = LexError("Unterminated string.", 4, 2)
        assert str(error) == "[line 4] LexError: Unterminated string."

    def test_parse_error_at_token(self):
        error = ParseError("Expect ';' after value.", Token(IDENTIFIER, "x", None, 2, 3))
        assert str(error) == "[line 2] ParseError at 'x': Expect ';' after value."

    def test_parse_error_at_end(self):
        error = ParseError("Expect expression.", make_eof(5, 1))
        assert str(error) == "[line 5] ParseError at end: Expect expression."

    def test_runtime_kinds(self):
        assert str(TypeMismatchError("bad", 1)) == "[line 1] RuntimeError(TypeMismatch): bad"
        assert str(UndefinedVariableError("gone", 9)) == (
            "[line 9] RuntimeError(UndefinedVariable): gone"
        )

    def test_hierarchy(self):
        assert issubclass(TypeMismatchError, LoxRuntimeError)
        assert issubclass(LoxRuntimeError, LoxError)
        assert issubclass(ParseError, LoxError)


class TestCollectedErrors:

    def test_nothing_to_raise(self):
        raise_collected([])

    def test_raises_first_with_all(self):
        errors = [LexError("one", 1), LexError("two", 2)]
        with pytest.raises(LexError) as excinfo:
            raise_collected(errors)
        assert excinfo.value is errors[0]
        assert excinfo.value.errors == errors


class TestReports:

    def test_context_lines_with_caret(self):
        source = "var a = 1;\nprint b;\nprint a;"
        assert get_context_lines(source, 2, 7) == "\n".join([
            "   1: var a = 1;",
            "   2: print b;",
            "            ^",
            "   3: print a;",
        ])

    def test_context_out_of_range(self):
        assert get_context_lines("print 1;", 5, 1) == ""

    def test_describe_every_collected_error(self):
        errors = [LexError("first", 1, 1), LexError("second", 2, 1)]
        with pytest.raises(LexError) as excinfo:
            raise_collected(errors)
        text = describe_error(excinfo.value)
        assert text.splitlines() == ["[line 1] LexError: first", "[line 2] LexError: second"]

    def test_describe_with_source(self):
        error = UndefinedVariableError("Undefined variable 'b'.", 1, 7)
        text = describe_error(error, "print b;")
        assert text.splitlines()[0] == (
            "[line 1] RuntimeError(UndefinedVariable): Undefined variable 'b'."
        )
        assert text.splitlines()[1] == "   1: print b;"
        assert text.splitlines()[2].endswith("^")
