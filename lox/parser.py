"""Recursive descent parser for Lox."""
from __future__ import annotations
from typing import Callable, Optional

from .ast_nodes import *
from .doctor import Doctor
from .tokens import Token, TokenType


MAX_ARGUMENTS = 255


class ParseError(Exception):
    def __init__(self, message: str, token: Token):
        super().__init__(message)
        self.token = token


class Parser:
    # Tokens that start a new declaration or statement; recovery stops before these
    SYNC_TYPES = {
        TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
        TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
    }

    def __init__(self, tokens: list[Token], doctor: Doctor):
        self.tokens = tokens
        self.doctor = doctor
        self.pos = 0

    # ================================================
    # Utilities
    # ================================================

    @property
    def current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def peek(self, offset: int = 1) -> Token:
        p = self.pos + offset
        if p >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[p]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.current.type == TokenType.EOF

    def advance(self) -> Token:
        tok = self.current
        if not self.at_end():
            self.pos += 1
        return tok

    def check(self, ttype: TokenType) -> bool:
        return not self.at_end() and self.current.type == ttype

    def match(self, *types: TokenType) -> Optional[Token]:
        for ttype in types:
            if self.check(ttype):
                return self.advance()
        return None

    def expect(self, ttype: TokenType, msg: str) -> Token:
        if self.check(ttype):
            return self.advance()
        raise self.error(self.current, msg)

    def error(self, token: Token, msg: str) -> ParseError:
        """Report a syntax error; the caller decides whether to raise it."""
        self.doctor.error_at(token, msg)
        return ParseError(msg, token)

    def synchronize(self):
        """Discard tokens until a likely statement boundary."""
        self.advance()
        while not self.at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return
            if self.current.type in self.SYNC_TYPES:
                return
            self.advance()

    # ================================================
    # Top-level
    # ================================================

    def parse(self) -> list[Statement]:
        """Parse a whole program, recovering after each syntax error."""
        statements = []
        while not self.at_end():
            try:
                statements.append(self.parse_declaration())
            except ParseError:
                self.synchronize()
            except RecursionError:
                self.error(self.current, "Too much nesting.")
                self.synchronize()
        return statements

    def parse_single_expression(self) -> Optional[Expression]:
        """Parse one expression; returns None if it is malformed."""
        try:
            return self.parse_expression()
        except ParseError:
            self.synchronize()
            return None
        except RecursionError:
            self.error(self.current, "Too much nesting.")
            return None

    # ================================================
    # Declarations
    # ================================================

    def parse_declaration(self) -> Statement:
        # `fun (` starts a function literal, handled as an expression statement
        if self.check(TokenType.FUN) and self.peek().type == TokenType.IDENTIFIER:
            self.advance()
            return self.parse_function_decl("function")
        if self.match(TokenType.VAR):
            return self.parse_var_declaration()
        return self.parse_statement()

    def parse_function_decl(self, kind: str) -> FunctionDecl:
        name = self.expect(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.expect(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params, body = self.parse_function_rest(kind)
        return FunctionDecl(name=name, params=params, body=body)

    def parse_function_rest(self, kind: str) -> tuple[list[Token], list[Statement]]:
        """Parse `params) { body }` after the opening paren."""
        params: list[Token] = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.error(self.current, f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.expect(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.expect(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self.expect(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return params, self.parse_block()

    def parse_var_declaration(self) -> VarDeclaration:
        name = self.expect(TokenType.IDENTIFIER, "Expect variable name.")
        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.parse_expression()
        self.expect(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarDeclaration(name=name, initializer=initializer)

    # ================================================
    # Statements
    # ================================================

    def parse_statement(self) -> Statement:
        if self.match(TokenType.FOR):
            return self.parse_for()
        if self.match(TokenType.IF):
            return self.parse_if()
        if self.match(TokenType.RETURN):
            return self.parse_return()
        if self.match(TokenType.PRINT):
            return self.parse_print()
        if self.match(TokenType.WHILE):
            return self.parse_while()
        if self.match(TokenType.LEFT_BRACE):
            return Block(statements=self.parse_block())
        return self.parse_expression_statement()

    def parse_block(self) -> list[Statement]:
        """Parse declarations up to the closing brace (opening brace already consumed)."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.at_end():
            statements.append(self.parse_declaration())
        self.expect(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def parse_for(self) -> Statement:
        """Desugar `for (init; cond; incr) body` into a while loop."""
        self.expect(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.parse_var_declaration()
        else:
            initializer = self.parse_expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.parse_expression()
        self.expect(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.parse_expression()
        self.expect(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.parse_statement()

        if increment is not None:
            body = Block(statements=[body, ExpressionStatement(expression=increment)])
        if condition is None:
            condition = Literal(value=True)
        loop = WhileLoop(condition=condition, body=body)
        if initializer is not None:
            return Block(statements=[initializer, loop])
        return loop

    def parse_if(self) -> IfStatement:
        self.expect(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.parse_expression()
        self.expect(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self.parse_statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.parse_statement()
        return IfStatement(condition=condition, then_branch=then_branch, else_branch=else_branch)

    def parse_return(self) -> ReturnStatement:
        keyword = self.previous()
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.parse_expression()
        self.expect(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(keyword=keyword, value=value)

    def parse_print(self) -> PrintStatement:
        expr = self.parse_expression()
        self.expect(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(expression=expr)

    def parse_while(self) -> WhileLoop:
        self.expect(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.parse_expression()
        self.expect(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return WhileLoop(condition=condition, body=self.parse_statement())

    def parse_expression_statement(self) -> ExpressionStatement:
        expr = self.parse_expression()
        self.expect(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatement(expression=expr)

    # ================================================
    # Expressions: Precedence Climbing
    # ================================================

    def parse_expression(self) -> Expression:
        """Parse a full expression (lowest precedence)."""
        return self.parse_ternary()

    def parse_ternary(self) -> Expression:
        expr = self.parse_assignment()
        if self.match(TokenType.QUESTION):
            then_branch = self.parse_expression()
            self.expect(TokenType.COLON, "Expect ':' after then branch of ternary operator.")
            else_branch = self.parse_expression()
            expr = TernaryOp(condition=expr, then_branch=then_branch, else_branch=else_branch)
        return expr

    def parse_assignment(self) -> Expression:
        expr = self.parse_or()
        equals = self.match(TokenType.EQUAL)
        if equals:
            value = self.parse_expression()
            if isinstance(expr, VariableAccess):
                return Assignment(name=expr.name, value=value)
            # Reported but not raised: the right side has already been parsed
            self.error(equals, "Invalid assignment target.")
        return expr

    def parse_or(self) -> Expression:
        return self.parse_logical(self.parse_and, TokenType.OR)

    def parse_and(self) -> Expression:
        return self.parse_logical(self.parse_equality, TokenType.AND)

    def parse_logical(self, operand: Callable[[], Expression], ttype: TokenType) -> Expression:
        left = operand()
        while True:
            op = self.match(ttype)
            if not op:
                return left
            left = LogicalOp(left=left, operator=op, right=operand())

    def parse_equality(self) -> Expression:
        return self.parse_binary(self.parse_comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def parse_comparison(self) -> Expression:
        return self.parse_binary(
            self.parse_term,
            TokenType.GREATER, TokenType.GREATER_EQUAL,
            TokenType.LESS, TokenType.LESS_EQUAL,
        )

    def parse_term(self) -> Expression:
        return self.parse_binary(self.parse_factor, TokenType.MINUS, TokenType.PLUS)

    def parse_factor(self) -> Expression:
        return self.parse_binary(self.parse_unary, TokenType.SLASH, TokenType.STAR)

    def parse_binary(self, operand: Callable[[], Expression], *types: TokenType) -> Expression:
        """Left-associative binary level."""
        left = operand()
        while True:
            op = self.match(*types)
            if not op:
                return left
            left = BinaryOp(left=left, operator=op, right=operand())

    def parse_unary(self) -> Expression:
        op = self.match(TokenType.BANG, TokenType.MINUS)
        if op:
            return UnaryOp(operator=op, operand=self.parse_unary())
        return self.parse_call()

    def parse_call(self) -> Expression:
        expr = self.parse_primary()
        while self.match(TokenType.LEFT_PAREN):
            expr = self.finish_call(expr)
        return expr

    def finish_call(self, callee: Expression) -> FunctionCall:
        arguments: list[Expression] = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.current, f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.parse_expression())
                if not self.match(TokenType.COMMA):
                    break
        paren = self.expect(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return FunctionCall(callee=callee, paren=paren, arguments=arguments)

    def parse_primary(self) -> Expression:
        if self.match(TokenType.FALSE):
            return Literal(value=False)
        if self.match(TokenType.TRUE):
            return Literal(value=True)
        if self.match(TokenType.NIL):
            return Literal(value=None)
        tok = self.match(TokenType.NUMBER, TokenType.STRING)
        if tok:
            return Literal(value=tok.literal)
        tok = self.match(TokenType.IDENTIFIER)
        if tok:
            return VariableAccess(name=tok)
        tok = self.match(TokenType.FUN)
        if tok:
            self.expect(TokenType.LEFT_PAREN, "Expect '(' after 'fun'.")
            params, body = self.parse_function_rest("function")
            return FunctionLiteral(keyword=tok, params=params, body=body)
        if self.match(TokenType.LEFT_PAREN):
            expr = self.parse_expression()
            self.expect(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expression=expr)
        raise self.error(self.current, "Expect expression.")
