"""CLI entry point for the Lox interpreter."""
from __future__ import annotations
import sys
import argparse

from .ast_printer import AstPrinter
from .doctor import Doctor
from .lexer import Lexer
from .parser import Parser
from .runtime import Interpreter, raise_recursion_limit

EXIT_USAGE = 1

COMMANDS = ("tokenize", "parse", "evaluate", "run")


class _ArgumentParser(argparse.ArgumentParser):
    """Malformed invocations exit with status 1 instead of argparse's 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(EXIT_USAGE)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="lox",
        description="Tree-walking interpreter for the Lox scripting language",
    )
    parser.add_argument("command", choices=COMMANDS, help="What to do with the source file")
    parser.add_argument("file", help="Source file")
    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)

    try:
        with open(args.file, "r") as f:
            source = f.read()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        sys.exit(EXIT_USAGE)

    raise_recursion_limit()
    doctor = Doctor()
    if args.command == "tokenize":
        tokenize(source, doctor)
    elif args.command == "parse":
        parse(source, doctor)
    elif args.command == "evaluate":
        Interpreter(doctor).run_expression(source)
    else:
        Interpreter(doctor).run(source)

    sys.exit(doctor.exit_code)


def tokenize(source: str, doctor: Doctor):
    for token in Lexer(source, doctor).tokenize():
        print(token)


def parse(source: str, doctor: Doctor):
    tokens = Lexer(source, doctor).tokenize()
    expr = Parser(tokens, doctor).parse_single_expression()
    if not doctor.had_error:
        print(AstPrinter().print(expr))


if __name__ == "__main__":
    main()
