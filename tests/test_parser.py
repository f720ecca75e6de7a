"""Tests for the Lox parser and AST printer."""
import io

import pytest
from lox.ast_nodes import *
from lox.ast_printer import AstPrinter
from lox.doctor import Doctor
from lox.lexer import Lexer
from lox.parser import Parser


def make_doctor() -> Doctor:
    return Doctor(stream=io.StringIO())


def parse(source: str, doctor=None) -> list:
    doctor = doctor or make_doctor()
    tokens = Lexer(source, doctor).tokenize()
    return Parser(tokens, doctor).parse()


def parse_expr(source: str, doctor=None):
    doctor = doctor or make_doctor()
    tokens = Lexer(source, doctor).tokenize()
    return Parser(tokens, doctor).parse_single_expression()


def show(source: str) -> str:
    return AstPrinter().print(parse_expr(source))


class TestPrecedence:
    def test_factor_binds_tighter_than_term(self):
        assert show("1 + 2 * 3") == "(+ 1.0 (* 2.0 3.0))"

    def test_grouping(self):
        assert show("(1 + 2) * 3") == "(* (group (+ 1.0 2.0)) 3.0)"

    def test_left_associative(self):
        assert show("1 - 2 - 3") == "(- (- 1.0 2.0) 3.0)"

    def test_unary_nests(self):
        assert show("!!true") == "(! (! true))"
        assert show("-a * b") == "(* (- a) b)"

    def test_comparison_below_equality(self):
        assert show("1 < 2 == true") == "(== (< 1.0 2.0) true)"

    def test_and_binds_tighter_than_or(self):
        assert show("a or b and c") == "(or a (and b c))"
        assert show("a and b or c") == "(or (and a b) c)"

    def test_and_is_left_associative(self):
        assert show("a and b and c") == "(and (and a b) c)"

    def test_ternary(self):
        assert show("a ? b : c") == "(?: a b c)"

    def test_ternary_is_right_associative(self):
        assert show("a ? b : c ? d : e") == "(?: a b (?: c d e))"

    def test_assignment_is_right_associative(self):
        assert show("a = b = 1") == "(= a (= b 1.0))"

    def test_assignment_of_ternary(self):
        assert show("x = c ? 1 : 2") == "(= x (?: c 1.0 2.0))"

    def test_chained_calls(self):
        assert show("f(1)(2, 3)()") == "(call (call (call f 1.0) 2.0 3.0))"

    def test_literals(self):
        assert show("nil") == "nil"
        assert show('"hi"') == "hi"
        assert show("false") == "false"

    def test_function_literal(self):
        assert show("fun (a, b) { return a; }") == "(fun anonymous (a b) (return a))"


class TestStatements:
    def test_var_declaration(self):
        stmts = parse("var x = 5;")
        assert len(stmts) == 1
        stmt = stmts[0]
        assert isinstance(stmt, VarDeclaration)
        assert stmt.name.lexeme == "x"
        assert isinstance(stmt.initializer, Literal)

    def test_var_without_initializer(self):
        stmt = parse("var x;")[0]
        assert stmt.initializer is None

    def test_function_declaration(self):
        stmt = parse("fun add(a, b) { return a + b; }")[0]
        assert isinstance(stmt, FunctionDecl)
        assert stmt.name.lexeme == "add"
        assert [p.lexeme for p in stmt.params] == ["a", "b"]
        assert isinstance(stmt.body[0], ReturnStatement)

    def test_function_literal_statement(self):
        stmt = parse("fun () {}();")[0]
        assert isinstance(stmt, ExpressionStatement)
        assert isinstance(stmt.expression, FunctionCall)
        assert isinstance(stmt.expression.callee, FunctionLiteral)

    def test_if_else(self):
        stmt = parse("if (a) print 1; else print 2;")[0]
        assert isinstance(stmt, IfStatement)
        assert isinstance(stmt.then_branch, PrintStatement)
        assert isinstance(stmt.else_branch, PrintStatement)

    def test_if_without_else(self):
        stmt = parse("if (a) print 1;")[0]
        assert stmt.else_branch is None

    def test_while(self):
        stmt = parse("while (x) { x = x - 1; }")[0]
        assert isinstance(stmt, WhileLoop)
        assert isinstance(stmt.body, Block)

    def test_return_without_value(self):
        stmt = parse("fun f() { return; }")[0]
        assert stmt.body[0].value is None

    def test_statement_printer(self):
        stmts = parse("var a = 1; { print a; } if (a) a = 2; else return;")
        printer = AstPrinter()
        assert [printer.print(s) for s in stmts] == [
            "(var a 1.0)",
            "(block (print a))",
            "(if a (expr (= a 2.0)) (return))",
        ]


class TestForDesugaring:
    def test_full_for(self):
        stmt = parse("for (var i = 0; i < 3; i = i + 1) print i;")[0]
        assert isinstance(stmt, Block)
        init, loop = stmt.statements
        assert isinstance(init, VarDeclaration)
        assert isinstance(loop, WhileLoop)
        assert isinstance(loop.body, Block)
        body, increment = loop.body.statements
        assert isinstance(body, PrintStatement)
        assert isinstance(increment, ExpressionStatement)

    def test_empty_clauses(self):
        stmt = parse("for (;;) print 1;")[0]
        assert isinstance(stmt, WhileLoop)
        assert isinstance(stmt.condition, Literal)
        assert stmt.condition.value is True
        assert isinstance(stmt.body, PrintStatement)

    def test_printed_form(self):
        stmt = parse("for (i = 0; i < 2;) print i;")[0]
        assert AstPrinter().print(stmt) == "(block (expr (= i 0.0)) (while (< i 2.0) (print i)))"


class TestNodeIdentity:
    def test_identical_expressions_are_distinct(self):
        stmts = parse("print a; print a;")
        first, second = stmts[0].expression, stmts[1].expression
        assert first is not second
        assert first != second
        assert len({first, second}) == 2


class TestErrors:
    def test_missing_semicolon(self):
        doctor = make_doctor()
        parse("print 1", doctor)
        assert doctor.reports == ["[line 1] Error at end: Expect ';' after value."]

    def test_error_location_names_token(self):
        doctor = make_doctor()
        parse("var 1 = 2;", doctor)
        assert doctor.reports == ["[line 1] Error at '1': Expect variable name."]

    def test_two_independent_errors(self):
        doctor = make_doctor()
        stmts = parse("print ;\nprint 1;\nvar = 3;\nprint 2;", doctor)
        assert len(doctor.reports) == 2
        assert doctor.reports[0].startswith("[line 1]")
        assert doctor.reports[1].startswith("[line 3]")
        # The well-formed statements still parse
        assert len(stmts) == 2

    def test_recovery_stops_at_keyword(self):
        doctor = make_doctor()
        stmts = parse("1 + ) var a = 1;", doctor)
        assert len(doctor.reports) == 1
        assert isinstance(stmts[0], VarDeclaration)

    def test_invalid_assignment_target_is_not_fatal(self):
        doctor = make_doctor()
        stmts = parse("a + b = c; print 1;", doctor)
        assert doctor.reports == ["[line 1] Error at '=': Invalid assignment target."]
        assert len(stmts) == 2
        assert isinstance(stmts[1], PrintStatement)

    def test_unclosed_block(self):
        doctor = make_doctor()
        parse("{ print 1;", doctor)
        assert doctor.reports == ["[line 1] Error at end: Expect '}' after block."]

    def test_expression_error_returns_none(self):
        doctor = make_doctor()
        assert parse_expr("(1 +", doctor) is None
        assert doctor.had_error

    def test_too_many_arguments_reported(self):
        doctor = make_doctor()
        args = ", ".join(["1"] * 256)
        stmts = parse(f"f({args});", doctor)
        assert doctor.reports == ["[line 1] Error at '1': Can't have more than 255 arguments."]
        assert len(stmts[0].expression.arguments) == 256

    def test_too_many_parameters_reported(self):
        doctor = make_doctor()
        params = ", ".join(f"p{i}" for i in range(256))
        parse(f"fun f({params}) {{}}", doctor)
        assert doctor.reports == ["[line 1] Error at 'p255': Can't have more than 255 parameters."]

    @pytest.mark.parametrize("source", ["", ";;;", "}", "fun", "var", "((((", "a ? b"])
    def test_never_crashes(self, source):
        parse(source)

    def test_error_inside_block_also_reports_stray_brace(self):
        # Recovery resumes at top level, so the closing brace starts a new statement
        doctor = make_doctor()
        parse("{ var = 1; }", doctor)
        assert doctor.reports == [
            "[line 1] Error at '=': Expect variable name.",
            "[line 1] Error at '}': Expect expression.",
        ]


class TestNesting:
    DEPTH = 5000

    def test_excessive_nesting_is_reported(self):
        doctor = make_doctor()
        source = "print " + "(" * self.DEPTH + "1" + ")" * self.DEPTH + "; print 2;"
        stmts = parse(source, doctor)
        assert len(doctor.reports) == 1
        assert doctor.reports[0].endswith("Too much nesting.")
        assert len(stmts) == 1
        assert isinstance(stmts[0], PrintStatement)

    def test_excessive_nesting_in_single_expression(self):
        doctor = make_doctor()
        source = "(" * self.DEPTH + "1" + ")" * self.DEPTH
        assert parse_expr(source, doctor) is None
        assert doctor.reports[-1].endswith("Too much nesting.")
