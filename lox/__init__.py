# Lox Interpreter
__version__ = "0.1.0"

from .doctor import Doctor
from .runtime import Interpreter, LoxRuntimeError
