"""Static scope resolution for Lox.

A single pass over the AST that computes, for every local variable use or
assignment, how many scopes out its declaration lives. Nothing is evaluated.
Globals are left out of the table and looked up by name at runtime.
"""
from __future__ import annotations
from enum import Enum, auto
from typing import Optional

from .ast_nodes import *
from .doctor import Doctor
from .tokens import Token


class FunctionKind(Enum):
    NONE = auto()
    FUNCTION = auto()


class Resolver:
    def __init__(self, doctor: Doctor):
        self.doctor = doctor
        # Each scope maps a name to whether its initializer has finished
        self.scopes: list[dict[str, bool]] = []
        self.bindings: dict[Expression, int] = {}
        self.current_function = FunctionKind.NONE

    def resolve(self, statements: list[Statement]) -> dict[Expression, int]:
        for stmt in statements:
            self.resolve_statement(stmt)
        return self.bindings

    def resolve_expression_root(self, expr: Optional[Expression]) -> dict[Expression, int]:
        if expr is not None:
            self.resolve_expression(expr)
        return self.bindings

    # ================================================
    # Scope bookkeeping
    # ================================================

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.doctor.error_at(name, f"Variable '{name.lexeme}' already declared in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expression, name: Token):
        for depth in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[depth]:
                self.bindings[expr] = len(self.scopes) - 1 - depth
                return

    def resolve_function(self, params: list[Token], body: list[Statement]):
        enclosing = self.current_function
        self.current_function = FunctionKind.FUNCTION
        self.begin_scope()
        for param in params:
            self.declare(param)
            self.define(param)
        for stmt in body:
            self.resolve_statement(stmt)
        self.end_scope()
        self.current_function = enclosing

    # ================================================
    # Statements
    # ================================================

    def resolve_statement(self, node: Statement):
        if isinstance(node, Block):
            self.begin_scope()
            for stmt in node.statements:
                self.resolve_statement(stmt)
            self.end_scope()
        elif isinstance(node, VarDeclaration):
            self.declare(node.name)
            if node.initializer is not None:
                self.resolve_expression(node.initializer)
            self.define(node.name)
        elif isinstance(node, FunctionDecl):
            # Defined before the body so the function can call itself
            self.declare(node.name)
            self.define(node.name)
            self.resolve_function(node.params, node.body)
        elif isinstance(node, ExpressionStatement):
            self.resolve_expression(node.expression)
        elif isinstance(node, IfStatement):
            self.resolve_expression(node.condition)
            self.resolve_statement(node.then_branch)
            if node.else_branch is not None:
                self.resolve_statement(node.else_branch)
        elif isinstance(node, PrintStatement):
            self.resolve_expression(node.expression)
        elif isinstance(node, ReturnStatement):
            if self.current_function == FunctionKind.NONE:
                self.doctor.error_at(node.keyword, "Can't return from top-level code.")
            if node.value is not None:
                self.resolve_expression(node.value)
        elif isinstance(node, WhileLoop):
            self.resolve_expression(node.condition)
            self.resolve_statement(node.body)
        else:
            raise TypeError(f"Unknown statement node: {type(node).__name__}")

    # ================================================
    # Expressions
    # ================================================

    def resolve_expression(self, node: Expression):
        if isinstance(node, VariableAccess):
            self.check_initialized(node.name)
            self.resolve_local(node, node.name)
        elif isinstance(node, Assignment):
            self.resolve_expression(node.value)
            self.resolve_local(node, node.name)
        elif isinstance(node, BinaryOp):
            self.resolve_expression(node.left)
            self.resolve_expression(node.right)
        elif isinstance(node, LogicalOp):
            self.resolve_expression(node.left)
            self.resolve_expression(node.right)
        elif isinstance(node, TernaryOp):
            self.resolve_expression(node.condition)
            self.resolve_expression(node.then_branch)
            self.resolve_expression(node.else_branch)
        elif isinstance(node, UnaryOp):
            self.resolve_expression(node.operand)
        elif isinstance(node, Grouping):
            self.resolve_expression(node.expression)
        elif isinstance(node, FunctionCall):
            self.resolve_expression(node.callee)
            for arg in node.arguments:
                self.resolve_expression(arg)
        elif isinstance(node, FunctionLiteral):
            self.resolve_function(node.params, node.body)
        elif isinstance(node, Literal):
            pass
        else:
            raise TypeError(f"Unknown expression node: {type(node).__name__}")

    def check_initialized(self, name: Token):
        """Reading a name whose nearest declaration is still initializing is an error."""
        for scope in reversed(self.scopes):
            if name.lexeme in scope:
                if not scope[name.lexeme]:
                    self.doctor.error_at(name, "Can't read local variable in its own initializer.")
                return
