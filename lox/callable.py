"""Function values and the return signal."""
from __future__ import annotations
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from .ast_nodes import Statement
from .environment import Environment
from .tokens import Token

if TYPE_CHECKING:
    from .runtime import Interpreter


@dataclass(frozen=True)
class Returning:
    """Outcome of a statement that executed `return`.

    Statement execution yields ``None`` when it completes normally and a
    ``Returning`` when control must leave the enclosing call frame.
    """
    value: Any = None


class LoxCallable(ABC):
    @abstractmethod
    def arity(self) -> int:
        ...

    @abstractmethod
    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        ...


class LoxFunction(LoxCallable):
    """A user function paired with the scope it was defined in."""

    def __init__(self, params: list[Token], body: list[Statement], closure: Environment,
                 name: Optional[str] = None):
        self.params = params
        self.body = body
        self.closure = closure
        self.name = name

    def arity(self) -> int:
        return len(self.params)

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        frame = self.closure.fork()
        for param, arg in zip(self.params, arguments):
            frame.define(param.lexeme, arg)
        outcome = interpreter.execute_block(self.body, frame)
        if outcome is not None:
            return outcome.value
        return None

    def __str__(self):
        if self.name is None:
            return "<fn anonymous>"
        return f"<fn {self.name}>"


class NativeFunction(LoxCallable):
    """A function implemented in Python, exposed as a global."""

    def __init__(self, name: str, arity: int, func: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.func = func

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        return self.func(*arguments)

    def __str__(self):
        return "<native fn>"


def _clock() -> float:
    return float(time.time())


NATIVES: list[NativeFunction] = [
    NativeFunction("clock", 0, _clock),
]
