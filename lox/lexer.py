"""Lexer for Lox: tokenizes source into a stream of Tokens."""
from __future__ import annotations
from typing import Any

from .doctor import Doctor
from .tokens import Token, TokenType, KEYWORDS


SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
    "?": TokenType.QUESTION,
    ":": TokenType.COLON,
}

# char -> (type without '=', type with trailing '=')
EQUAL_SUFFIX_TOKENS: dict[str, tuple[TokenType, TokenType]] = {
    "!": (TokenType.BANG, TokenType.BANG_EQUAL),
    "=": (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    "<": (TokenType.LESS, TokenType.LESS_EQUAL),
    ">": (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def is_alpha(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_"


class Lexer:
    def __init__(self, source: str, doctor: Doctor):
        self.source = source
        self.doctor = doctor
        self.start = 0
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []

    @property
    def current(self) -> str:
        if self.pos >= len(self.source):
            return "\0"
        return self.source[self.pos]

    def peek(self, offset: int = 1) -> str:
        p = self.pos + offset
        if p >= len(self.source):
            return "\0"
        return self.source[p]

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def advance(self) -> str:
        ch = self.current
        self.pos += 1
        return ch

    def match(self, expected: str) -> bool:
        if self.at_end() or self.source[self.pos] != expected:
            return False
        self.pos += 1
        return True

    def add_token(self, ttype: TokenType, literal: Any = None):
        text = self.source[self.start : self.pos]
        self.tokens.append(Token(ttype, text, literal, self.line))

    def skip_comment(self):
        """Skip // to end of line."""
        while not self.at_end() and self.current != "\n":
            self.advance()

    def read_string(self):
        """Read a double-quoted string literal; strings may span lines."""
        while not self.at_end() and self.current != '"':
            if self.current == "\n":
                self.line += 1
            self.advance()
        if self.at_end():
            self.doctor.error(self.line, "Unterminated string.")
            return
        self.advance()  # closing quote
        self.add_token(TokenType.STRING, self.source[self.start + 1 : self.pos - 1])

    def read_number(self):
        """Read a numeric literal. Every number is a float."""
        while is_digit(self.current):
            self.advance()
        # A trailing '.' without digits belongs to the next token
        if self.current == "." and is_digit(self.peek()):
            self.advance()
            while is_digit(self.current):
                self.advance()
        self.add_token(TokenType.NUMBER, float(self.source[self.start : self.pos]))

    def read_identifier(self):
        """Read an identifier/keyword."""
        while is_alpha(self.current) or is_digit(self.current):
            self.advance()
        text = self.source[self.start : self.pos]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def scan_token(self):
        ch = self.advance()

        if ch in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[ch])
        elif ch in EQUAL_SUFFIX_TOKENS:
            plain, with_equal = EQUAL_SUFFIX_TOKENS[ch]
            self.add_token(with_equal if self.match("=") else plain)
        elif ch == "/":
            if self.match("/"):
                self.skip_comment()
            else:
                self.add_token(TokenType.SLASH)
        elif ch in (" ", "\r", "\t"):
            pass
        elif ch == "\n":
            self.line += 1
        elif ch == '"':
            self.read_string()
        elif is_digit(ch):
            self.read_number()
        elif is_alpha(ch):
            self.read_identifier()
        else:
            self.doctor.error(self.line, f"Unexpected character: {ch}")

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source into a list of Tokens ending with EOF."""
        self.tokens = []
        while not self.at_end():
            self.start = self.pos
            self.scan_token()
        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens
