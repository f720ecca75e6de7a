"""Tree-walking evaluator for Lox."""
from __future__ import annotations
import sys
from typing import Any, Optional

from .ast_nodes import *
from .callable import NATIVES, LoxCallable, LoxFunction, Returning
from .doctor import Doctor
from .environment import Environment
from .lexer import Lexer
from .parser import Parser
from .resolver import Resolver
from .tokens import Token, TokenType
from .types import is_equal, is_number, is_truthy, stringify, type_name

# Nested source and Lox calls both recurse in Python, several frames per level
RECURSION_LIMIT = 10_000


def raise_recursion_limit(limit: int = RECURSION_LIMIT):
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)


class LoxRuntimeError(Exception):
    """Runtime error in Lox, tied to the token that caused it."""
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token


class Interpreter:
    """The main Lox interpreter."""

    def __init__(self, doctor: Optional[Doctor] = None):
        self.doctor = doctor or Doctor()
        raise_recursion_limit()

        # Environment
        self.globals = Environment()
        self.environment = self.globals
        for native in NATIVES:
            self.globals.define(native.name, native)

        # Resolver output: node -> number of scopes to walk out
        self.locals: dict[Expression, int] = {}

        # Output capture (for testing)
        self.output: list[str] = []

    # ================================================
    # Main execution
    # ================================================

    def run(self, source: str):
        """Scan, parse, resolve and, if no static error occurred, execute a program."""
        tokens = Lexer(source, self.doctor).tokenize()
        statements = Parser(tokens, self.doctor).parse()
        if self.doctor.had_error:
            return
        self.resolve(Resolver(self.doctor).resolve(statements))
        if self.doctor.had_error:
            return
        self.interpret(statements)

    def run_expression(self, source: str) -> Optional[str]:
        """Evaluate a single expression and print its value."""
        tokens = Lexer(source, self.doctor).tokenize()
        expr = Parser(tokens, self.doctor).parse_single_expression()
        if self.doctor.had_error or expr is None:
            return None
        self.resolve(Resolver(self.doctor).resolve_expression_root(expr))
        if self.doctor.had_error:
            return None
        return self.interpret_expression(expr)

    def resolve(self, bindings: dict[Expression, int]):
        self.locals.update(bindings)

    def interpret(self, statements: list[Statement]):
        try:
            for stmt in statements:
                if self.execute(stmt) is not None:
                    break
        except LoxRuntimeError as e:
            self.doctor.runtime_error(e)

    def interpret_expression(self, expr: Expression) -> Optional[str]:
        try:
            text = stringify(self.evaluate(expr))
        except LoxRuntimeError as e:
            self.doctor.runtime_error(e)
            return None
        self._emit(text)
        return text

    def _emit(self, text: str):
        self.output.append(text)
        print(text)

    # ================================================
    # Statements
    # ================================================

    def execute(self, node: Statement) -> Optional[Returning]:
        """Execute a statement. Returns a Returning if a `return` is propagating."""
        if isinstance(node, ExpressionStatement):
            self.evaluate(node.expression)
            return None
        if isinstance(node, PrintStatement):
            self._emit(stringify(self.evaluate(node.expression)))
            return None
        if isinstance(node, VarDeclaration):
            value = None
            if node.initializer is not None:
                value = self.evaluate(node.initializer)
            self.environment.define(node.name.lexeme, value)
            return None
        if isinstance(node, Block):
            return self.execute_block(node.statements, self.environment.fork())
        if isinstance(node, IfStatement):
            if is_truthy(self.evaluate(node.condition)):
                return self.execute(node.then_branch)
            if node.else_branch is not None:
                return self.execute(node.else_branch)
            return None
        if isinstance(node, WhileLoop):
            while is_truthy(self.evaluate(node.condition)):
                outcome = self.execute(node.body)
                if outcome is not None:
                    return outcome
            return None
        if isinstance(node, FunctionDecl):
            function = LoxFunction(node.params, node.body, self.environment, name=node.name.lexeme)
            self.environment.define(node.name.lexeme, function)
            return None
        if isinstance(node, ReturnStatement):
            value = None
            if node.value is not None:
                value = self.evaluate(node.value)
            return Returning(value)
        raise TypeError(f"Unknown statement node: {type(node).__name__}")

    def execute_block(self, statements: list[Statement], env: Environment) -> Optional[Returning]:
        """Execute statements in the given scope, restoring the previous scope on every exit."""
        previous = self.environment
        self.environment = env
        try:
            for stmt in statements:
                outcome = self.execute(stmt)
                if outcome is not None:
                    return outcome
            return None
        finally:
            self.environment = previous

    # ================================================
    # Expression evaluation
    # ================================================

    def evaluate(self, node: Expression) -> Any:
        """Evaluate an expression node."""
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Grouping):
            return self.evaluate(node.expression)
        if isinstance(node, VariableAccess):
            return self.look_up_variable(node.name, node)
        if isinstance(node, Assignment):
            return self._eval_assignment(node)
        if isinstance(node, UnaryOp):
            return self._eval_unary(node)
        if isinstance(node, BinaryOp):
            return self._eval_binary(node)
        if isinstance(node, LogicalOp):
            return self._eval_logical(node)
        if isinstance(node, TernaryOp):
            if is_truthy(self.evaluate(node.condition)):
                return self.evaluate(node.then_branch)
            return self.evaluate(node.else_branch)
        if isinstance(node, FunctionCall):
            return self._eval_call(node)
        if isinstance(node, FunctionLiteral):
            return LoxFunction(node.params, node.body, self.environment)
        raise TypeError(f"Unknown expression node: {type(node).__name__}")

    def look_up_variable(self, name: Token, node: Expression) -> Any:
        hops = self.locals.get(node)
        if hops is None:
            return self.globals.get(name)
        return self.environment.get_at(hops, name)

    def _eval_assignment(self, node: Assignment) -> Any:
        value = self.evaluate(node.value)
        hops = self.locals.get(node)
        if hops is None:
            self.globals.assign(node.name, value)
        else:
            self.environment.assign_at(hops, node.name, value)
        return value

    def _eval_unary(self, node: UnaryOp) -> Any:
        try:
            operand = self.evaluate(node.operand)
        except RecursionError:
            raise LoxRuntimeError(node.operator, "Stack overflow.") from None
        if node.operator.type == TokenType.MINUS:
            if not is_number(operand):
                raise LoxRuntimeError(node.operator, "Operand must be a number.")
            return -operand
        if node.operator.type == TokenType.BANG:
            return not is_truthy(operand)
        raise LoxRuntimeError(node.operator, f"Unknown unary operator '{node.operator.lexeme}'.")

    def _eval_binary(self, node: BinaryOp) -> Any:
        try:
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
        except RecursionError:
            raise LoxRuntimeError(node.operator, "Stack overflow.") from None
        op = node.operator

        if op.type == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if op.type == TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if op.type == TokenType.PLUS:
            if is_number(left) and is_number(right):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(op, "Operands must be two numbers or two strings.")

        if not (is_number(left) and is_number(right)):
            raise LoxRuntimeError(
                op,
                f"Operands of '{op.lexeme}' must be numbers, "
                f"got {type_name(left)} and {type_name(right)}.",
            )

        if op.type == TokenType.MINUS:
            return left - right
        if op.type == TokenType.STAR:
            return left * right
        if op.type == TokenType.SLASH:
            if right == 0.0:
                raise LoxRuntimeError(op, "Division by zero.")
            return left / right
        if op.type == TokenType.GREATER:
            return left > right
        if op.type == TokenType.GREATER_EQUAL:
            return left >= right
        if op.type == TokenType.LESS:
            return left < right
        if op.type == TokenType.LESS_EQUAL:
            return left <= right
        raise LoxRuntimeError(op, f"Unknown binary operator '{op.lexeme}'.")

    def _eval_logical(self, node: LogicalOp) -> Any:
        """Short-circuit and return the deciding operand itself."""
        left = self.evaluate(node.left)
        if node.operator.type == TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left
        return self.evaluate(node.right)

    def _eval_call(self, node: FunctionCall) -> Any:
        callee = self.evaluate(node.callee)
        arguments = [self.evaluate(arg) for arg in node.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(node.paren, "Can only call functions.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                node.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(node.paren, "Stack overflow.") from None
