"""Tests for the lox command-line entry point."""
import pytest
from lox.main import main


def invoke(tmp_path, capsys, command: str, source: str):
    """Run `lox <command> <file>` and return (exit status, stdout, stderr)."""
    path = tmp_path / "program.lox"
    path.write_text(source)
    with pytest.raises(SystemExit) as info:
        main([command, str(path)])
    captured = capsys.readouterr()
    return info.value.code, captured.out, captured.err


class TestTokenize:
    def test_prints_tokens(self, tmp_path, capsys):
        status, out, err = invoke(tmp_path, capsys, "tokenize", "var x = 1;")
        assert status == 0
        assert out.splitlines() == [
            "VAR var null",
            "IDENTIFIER x null",
            "EQUAL = null",
            "NUMBER 1 1.0",
            "SEMICOLON ; null",
            "EOF  null",
        ]
        assert err == ""

    def test_lexical_error_exit_status(self, tmp_path, capsys):
        status, out, err = invoke(tmp_path, capsys, "tokenize", "#")
        assert status == 65
        assert "Unexpected character: #" in err
        assert out.splitlines() == ["EOF  null"]


class TestParse:
    def test_prints_tree(self, tmp_path, capsys):
        status, out, _ = invoke(tmp_path, capsys, "parse", "-(1 + 2) * x")
        assert status == 0
        assert out.strip() == "(* (- (group (+ 1.0 2.0))) x)"

    def test_syntax_error(self, tmp_path, capsys):
        status, out, err = invoke(tmp_path, capsys, "parse", "(1 +")
        assert status == 65
        assert out == ""
        assert "[line 1] Error at end: Expect expression." in err


class TestEvaluate:
    def test_prints_value(self, tmp_path, capsys):
        status, out, _ = invoke(tmp_path, capsys, "evaluate", '"foo" + "bar"')
        assert status == 0
        assert out.strip() == "foobar"

    def test_runtime_error_exit_status(self, tmp_path, capsys):
        status, out, err = invoke(tmp_path, capsys, "evaluate", "1 / 0")
        assert status == 70
        assert out == ""
        assert err.splitlines() == ["Division by zero.", "[line 1]"]


class TestRun:
    def test_runs_program(self, tmp_path, capsys):
        source = "fun fact(n) { if (n <= 1) return 1; return n * fact(n - 1); }\nprint fact(5);"
        status, out, _ = invoke(tmp_path, capsys, "run", source)
        assert status == 0
        assert out.strip() == "120"

    def test_static_error_prevents_execution(self, tmp_path, capsys):
        status, out, err = invoke(tmp_path, capsys, "run", 'print "hi";\n{ var a = a; }')
        assert status == 65
        assert out == ""
        assert "own initializer" in err

    def test_runtime_error_keeps_prior_output(self, tmp_path, capsys):
        status, out, err = invoke(tmp_path, capsys, "run", 'print "hi";\nprint x;')
        assert status == 70
        assert out.strip() == "hi"
        assert "Undefined variable 'x'." in err

    def test_nested_grouping(self, tmp_path, capsys):
        depth = 200
        source = "print " + "(" * depth + "1" + ")" * depth + ";"
        status, out, err = invoke(tmp_path, capsys, "run", source)
        assert status == 0
        assert out.strip() == "1"
        assert err == ""


class TestUsage:
    def test_missing_arguments(self, capsys):
        with pytest.raises(SystemExit) as info:
            main([])
        assert info.value.code == 1

    def test_unknown_command(self, tmp_path, capsys):
        status, out, _ = invoke(tmp_path, capsys, "compile", "print 1;")
        assert status == 1
        assert out == ""

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as info:
            main(["run", str(tmp_path / "nope.lox")])
        assert info.value.code == 1
        assert "Error reading file" in capsys.readouterr().err
