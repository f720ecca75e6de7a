"""Diagnostics sink: collects static and runtime errors and maps them to an exit status."""
from __future__ import annotations
import sys
from typing import TYPE_CHECKING, Optional, TextIO

from .tokens import Token, TokenType

if TYPE_CHECKING:
    from .runtime import LoxRuntimeError


EXIT_OK = 0
EXIT_STATIC_ERROR = 65   # EX_DATAERR
EXIT_RUNTIME_ERROR = 70  # EX_SOFTWARE


class Doctor:
    """Reports errors for one source unit.

    Static errors (lexical, syntax, resolution) and runtime errors are tracked
    separately; the pipeline checks ``had_error`` before evaluating anything.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.had_error = False
        self.had_runtime_error = False
        self.reports: list[str] = []

    def _write(self, text: str):
        self.reports.append(text)
        print(text, file=self.stream or sys.stderr)

    def report(self, line: int, where: str, message: str):
        self._write(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def error(self, line: int, message: str):
        self.report(line, "", message)

    def error_at(self, token: Token, message: str):
        if token.type == TokenType.EOF:
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error: LoxRuntimeError):
        self._write(f"{error}\n[line {error.token.line}]")
        self.had_runtime_error = True

    @property
    def exit_code(self) -> int:
        if self.had_error:
            return EXIT_STATIC_ERROR
        if self.had_runtime_error:
            return EXIT_RUNTIME_ERROR
        return EXIT_OK
