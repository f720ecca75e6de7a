"""Renders AST nodes as parenthesized prefix text, for the `parse` command and debugging."""
from __future__ import annotations
from typing import Optional

from .ast_nodes import *


class AstPrinter:
    def print(self, node: Optional[ASTNode]) -> str:
        if node is None:
            return ""
        if isinstance(node, Expression):
            return self.expression(node)
        return self.statement(node)

    def parenthesize(self, name: str, *parts: str) -> str:
        return "(" + " ".join([name, *parts]) + ")"

    def literal(self, value) -> str:
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            return repr(value)
        return str(value)

    def function(self, name: str, params: list, body: list) -> str:
        param_list = "(" + " ".join(p.lexeme for p in params) + ")"
        return self.parenthesize("fun", name, param_list, *(self.statement(s) for s in body))

    def expression(self, node: Expression) -> str:
        if isinstance(node, Literal):
            return self.literal(node.value)
        if isinstance(node, Grouping):
            return self.parenthesize("group", self.expression(node.expression))
        if isinstance(node, UnaryOp):
            return self.parenthesize(node.operator.lexeme, self.expression(node.operand))
        if isinstance(node, (BinaryOp, LogicalOp)):
            return self.parenthesize(node.operator.lexeme, self.expression(node.left), self.expression(node.right))
        if isinstance(node, VariableAccess):
            return node.name.lexeme
        if isinstance(node, Assignment):
            return self.parenthesize("=", node.name.lexeme, self.expression(node.value))
        if isinstance(node, TernaryOp):
            return self.parenthesize(
                "?:",
                self.expression(node.condition),
                self.expression(node.then_branch),
                self.expression(node.else_branch),
            )
        if isinstance(node, FunctionCall):
            return self.parenthesize("call", self.expression(node.callee),
                                     *(self.expression(a) for a in node.arguments))
        if isinstance(node, FunctionLiteral):
            return self.function("anonymous", node.params, node.body)
        raise TypeError(f"Unknown expression node: {type(node).__name__}")

    def statement(self, node: Statement) -> str:
        if isinstance(node, ExpressionStatement):
            return self.parenthesize("expr", self.expression(node.expression))
        if isinstance(node, PrintStatement):
            return self.parenthesize("print", self.expression(node.expression))
        if isinstance(node, VarDeclaration):
            if node.initializer is None:
                return self.parenthesize("var", node.name.lexeme)
            return self.parenthesize("var", node.name.lexeme, self.expression(node.initializer))
        if isinstance(node, Block):
            return self.parenthesize("block", *(self.statement(s) for s in node.statements))
        if isinstance(node, IfStatement):
            parts = [self.expression(node.condition), self.statement(node.then_branch)]
            if node.else_branch is not None:
                parts.append(self.statement(node.else_branch))
            return self.parenthesize("if", *parts)
        if isinstance(node, WhileLoop):
            return self.parenthesize("while", self.expression(node.condition), self.statement(node.body))
        if isinstance(node, FunctionDecl):
            return self.function(node.name.lexeme, node.params, node.body)
        if isinstance(node, ReturnStatement):
            if node.value is None:
                return "(return)"
            return self.parenthesize("return", self.expression(node.value))
        raise TypeError(f"Unknown statement node: {type(node).__name__}")
