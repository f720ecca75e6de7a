"""AST node definitions for Lox.

Nodes are frozen and compare by identity (``eq=False``), so every node is its
own hash key. The resolver's binding table relies on this: two identical
expressions at different source positions are distinct entries.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from .tokens import Token


# ============================================================
# Base
# ============================================================

@dataclass(frozen=True, eq=False)
class ASTNode:
    """Base for all AST nodes."""


@dataclass(frozen=True, eq=False)
class Expression(ASTNode):
    """Base for expressions."""


@dataclass(frozen=True, eq=False)
class Statement(ASTNode):
    """Base for statements."""


# ============================================================
# Expressions
# ============================================================

@dataclass(frozen=True, eq=False)
class TernaryOp(Expression):
    condition: Expression
    then_branch: Expression
    else_branch: Expression


@dataclass(frozen=True, eq=False)
class Assignment(Expression):
    name: Token
    value: Expression


@dataclass(frozen=True, eq=False)
class BinaryOp(Expression):
    left: Expression
    operator: Token
    right: Expression


@dataclass(frozen=True, eq=False)
class FunctionCall(Expression):
    callee: Expression
    paren: Token  # closing paren, for error lines
    arguments: list[Expression]


@dataclass(frozen=True, eq=False)
class FunctionLiteral(Expression):
    keyword: Token
    params: list[Token]
    body: list[Statement]


@dataclass(frozen=True, eq=False)
class Grouping(Expression):
    expression: Expression


@dataclass(frozen=True, eq=False)
class LogicalOp(Expression):
    left: Expression
    operator: Token  # AND / OR
    right: Expression


@dataclass(frozen=True, eq=False)
class Literal(Expression):
    value: Any  # None, bool, float or str


@dataclass(frozen=True, eq=False)
class UnaryOp(Expression):
    operator: Token
    operand: Expression


@dataclass(frozen=True, eq=False)
class VariableAccess(Expression):
    name: Token


# ============================================================
# Statements
# ============================================================

@dataclass(frozen=True, eq=False)
class Block(Statement):
    statements: list[Statement]


@dataclass(frozen=True, eq=False)
class ExpressionStatement(Statement):
    expression: Expression


@dataclass(frozen=True, eq=False)
class FunctionDecl(Statement):
    name: Token
    params: list[Token]
    body: list[Statement]


@dataclass(frozen=True, eq=False)
class IfStatement(Statement):
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None


@dataclass(frozen=True, eq=False)
class PrintStatement(Statement):
    expression: Expression


@dataclass(frozen=True, eq=False)
class ReturnStatement(Statement):
    keyword: Token
    value: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class VarDeclaration(Statement):
    name: Token
    initializer: Optional[Expression] = None


@dataclass(frozen=True, eq=False)
class WhileLoop(Statement):
    condition: Expression
    body: Statement
