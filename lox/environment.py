"""Scoped variable storage for the Lox runtime."""
from __future__ import annotations
from typing import Any, Optional

from .tokens import Token


class Environment:
    """One scope in the chain. The global scope is the only one without a parent.

    Closures and call frames hold plain references to their defining scope, so
    a scope lives exactly as long as something reachable still points at it.
    """

    def __init__(self, parent: Optional[Environment] = None):
        self.parent = parent
        self.values: dict[str, Any] = {}

    def fork(self) -> Environment:
        return Environment(parent=self)

    def define(self, name: str, value: Any):
        self.values[name] = value

    def get(self, name: Token) -> Any:
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.parent
        raise _undefined(name)

    def assign(self, name: Token, value: Any):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.parent
        raise _undefined(name)

    def ancestor(self, hops: int) -> Environment:
        env = self
        for _ in range(hops):
            env = env.parent
        return env

    def get_at(self, hops: int, name: Token) -> Any:
        values = self.ancestor(hops).values
        if name.lexeme not in values:
            raise _undefined(name)
        return values[name.lexeme]

    def assign_at(self, hops: int, name: Token, value: Any):
        values = self.ancestor(hops).values
        if name.lexeme not in values:
            raise _undefined(name)
        values[name.lexeme] = value


def _undefined(name: Token):
    from .runtime import LoxRuntimeError
    return LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
