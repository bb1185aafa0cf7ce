"""
Evaluator tests
Whole programs run through a session with captured output
"""

import io

import pytest
from interpreter import create_interpreter, create_debug_interpreter, eval_ast, run
from environment import make_runtime_env, env_lookup_value
from parsing import create_parser
from stdlib import make_number, make_string, make_boolean, make_nil
from error_handling import (
    TypeMismatchError, UndefinedVariableError, NestingDepthError, ParseError
)


def printed(session):
    return session.context['output'].getvalue().splitlines()


class TestPrinting:

    @pytest.mark.parametrize("source, expected", [
        ("print 1 + 2 * 3;", ["7"]),
        ("print (1 + 2) * 3;", ["9"]),
        ("print 10 / 4;", ["2.5"]),
        ("print 1 - 2 - 3;", ["-4"]),
        ("print -(3);", ["-3"]),
        ('print "foo" + "bar";', ["foobar"]),
        ("print nil;", ["nil"]),
        ("print !nil;", ["true"]),
        ("print 1 < 2;", ["true"]),
        ("print 2 <= 1;", ["false"]),
        ("print 1 == 1.0;", ["true"]),
        ('print "a" != "a";', ["false"]),
        ("print nil == false;", ["false"]),
    ])
    def test_expressions(self, run_lox, source, expected):
        assert run_lox(source) == expected

    def test_statements_run_in_order(self, run_lox):
        assert run_lox("print 1; print 2; print 3;") == ["1", "2", "3"]

    def test_printing_is_the_only_effect(self, run_lox):
        assert run_lox("1 + 2; var a = 3; a = 4;") == []


class TestDivision:

    def test_division_by_zero(self, run_lox):
        assert run_lox("print 1 / 0; print -1 / 0; print 0 / 0;") == ["inf", "-inf", "nan"]


class TestVariables:

    def test_uninitialized_is_nil(self, run_lox):
        assert run_lox("var a; print a;") == ["nil"]

    def test_assignment_updates(self, run_lox):
        assert run_lox("var a = 1; a = a + 1; print a;") == ["2"]

    def test_assignment_is_an_expression(self, run_lox):
        assert run_lox("var a; var b; a = b = 3; print a; print b;") == ["3", "3"]

    def test_redeclaration_at_top_level(self, run_lox):
        assert run_lox('var a = 1; var a = "two"; print a;') == ["two"]

    def test_undefined_read(self, session):
        with pytest.raises(UndefinedVariableError) as excinfo:
            session.run_source("print missing;")
        assert excinfo.value.message == "Undefined variable 'missing'."
        assert excinfo.value.line == 1
        assert printed(session) == []

    def test_assign_to_undeclared(self, session):
        with pytest.raises(UndefinedVariableError):
            session.run_source("ghost = 1;")
        assert env_lookup_value(session.global_env, "ghost") is None


class TestScoping:

    def test_shadowing(self, run_lox):
        source = """
        var a = "outer";
        {
          var a = "inner";
          print a;
        }
        print a;
        """
        assert run_lox(source) == ["inner", "outer"]

    def test_assignment_reaches_enclosing_scope(self, run_lox):
        assert run_lox("var a = 1; { a = 2; } print a;") == ["2"]

    def test_block_locals_vanish(self, session):
        session.run_source("{ var local = 1; }")
        with pytest.raises(UndefinedVariableError):
            session.run_source("print local;")

    def test_shadowing_initializer_sees_outer(self, run_lox):
        assert run_lox("var a = 1; { var a = a + 1; print a; } print a;") == ["2", "1"]


class TestControlFlow:

    def test_if_else(self, run_lox):
        assert run_lox("if (1 > 2) print 1; else print 2;") == ["2"]

    def test_truthiness_of_zero_and_empty_string(self, run_lox):
        assert run_lox('if (0) print "a"; if ("") print "b";') == ["a", "b"]

    def test_while(self, run_lox):
        assert run_lox("var i = 0; while (i < 3) { print i; i = i + 1; }") == ["0", "1", "2"]

    def test_for(self, run_lox):
        assert run_lox("for (var i = 0; i < 3; i = i + 1) print i;") == ["0", "1", "2"]

    def test_for_variable_is_scoped_to_loop(self, session):
        session.run_source("for (var i = 0; i < 1; i = i + 1) {}")
        assert env_lookup_value(session.global_env, "i") is None

    def test_loop_body_does_not_run_when_false(self, run_lox):
        assert run_lox("while (false) print 1; for (;false;) print 2;") == []


class TestLogical:

    def test_returns_deciding_operand(self, run_lox):
        assert run_lox('print nil or "x"; print "y" or 2; print nil and 1; print 1 and 2;') == [
            "x", "y", "nil", "2"
        ]

    def test_short_circuit(self, run_lox):
        source = "var a = 0; false and (a = 1); true or (a = 2); print a;"
        assert run_lox(source) == ["0"]


class TestRuntimeErrors:

    def test_type_mismatch(self, session):
        with pytest.raises(TypeMismatchError) as excinfo:
            session.run_source('print 1 + "a";')
        assert "Operands of '+'" in excinfo.value.message

    def test_error_carries_operator_position(self, session):
        with pytest.raises(TypeMismatchError) as excinfo:
            session.run_source('var a = 1;\nprint a - "b";')
        assert (excinfo.value.line, excinfo.value.column) == (2, 9)

    def test_negate_string(self, session):
        with pytest.raises(TypeMismatchError) as excinfo:
            session.run_source('print -"a";')
        assert excinfo.value.message == "Operand of '-' must be a number, got String."

    def test_earlier_effects_persist(self, session):
        with pytest.raises(TypeMismatchError):
            session.run_source('var kept = 1; print kept; print kept < "x"; print 2;')
        assert printed(session) == ["1"]
        assert env_lookup_value(session.global_env, "kept") == make_number(1)

    def test_parse_error_runs_nothing(self, session):
        with pytest.raises(ParseError):
            session.run_source("print 1; print ;")
        assert printed(session) == []

    def test_left_operand_evaluated_first(self, session):
        with pytest.raises(UndefinedVariableError) as excinfo:
            session.run_source("print left + right;")
        assert "'left'" in excinfo.value.message


class TestSessions:

    def test_bindings_persist_between_runs(self, session):
        session.run_source("var a = 40;")
        session.run_source("a = a + 2;")
        session.run_source("print a;")
        assert printed(session) == ["42"]

    def test_lone_expression_value(self, session):
        assert session.run_source("3 + 4;") == make_number(7)
        assert session.run_source('"s";') == make_string("s")

    def test_statements_have_no_value(self, session):
        assert session.run_source("print 1;") is None
        assert session.run_source("1; 2;") is None

    def test_assignment_value(self, session):
        session.run_source("var a;")
        assert session.run_source("a = true;") == make_boolean(True)

    def test_separate_sessions_do_not_share(self):
        first = create_interpreter(output=io.StringIO())
        second = create_interpreter(output=io.StringIO())
        first.run_source("var only_here = 1;")
        with pytest.raises(UndefinedVariableError):
            second.run_source("only_here;")

    def test_prints_to_stdout_by_default(self, capsys):
        create_interpreter().run_source('print "to stdout";')
        assert capsys.readouterr().out == "to stdout\n"


class TestLowLevel:

    def test_eval_ast_returns_value_and_env(self):
        statement = create_parser().parse_string("1 + 1;")[0]
        env = make_runtime_env()
        value, result_env = eval_ast(statement, env)
        assert value == make_number(2)
        assert result_env is env

    def test_run_with_explicit_env(self):
        output = io.StringIO()
        env = make_runtime_env()
        statements = create_parser().parse_string("var a = 1; print a;")
        assert run(statements, env, context={'output': output}) is None
        assert output.getvalue() == "1\n"
        assert env_lookup_value(env, "a") == make_number(1)

    def test_var_decl_value_is_nil(self):
        statement = create_parser().parse_string("var a = 1;")[0]
        value, _ = eval_ast(statement, make_runtime_env())
        assert value == make_nil()


def test_debug_trace(capsys):
    output = io.StringIO()
    create_debug_interpreter(output=output).run_source("{ print 1; }")
    out = capsys.readouterr().out
    assert "Evaluating: BLOCK" in out
    assert "Entering block (depth 2)" in out
    assert "Evaluating: PRINT_STMT" in out
    assert "Evaluating: LITERAL" in out
    assert output.getvalue() == "1\n"


class TestDeepNesting:

    def test_long_sum_reports_nesting_depth(self, session):
        source = "print " + " + ".join(["1"] * 3000) + ";"
        with pytest.raises(NestingDepthError) as excinfo:
            session.run_source(source)
        assert excinfo.value.message == "Maximum nesting depth exceeded."
        assert excinfo.value.line == 1
        assert printed(session) == []

    def test_session_survives_nesting_error(self, session):
        session.run_source("var kept = 1;")
        with pytest.raises(NestingDepthError):
            session.run_source("kept = " + " + ".join(["kept"] * 3000) + ";")
        session.run_source("print kept;")
        assert printed(session) == ["1"]
