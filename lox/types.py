"""Runtime value helpers for Lox.

Lox values are plain Python objects: ``None`` (nil), ``bool``, ``float``,
``str`` and callables. ``bool`` is a subclass of ``int`` in Python, so every
check here keeps booleans and numbers apart explicitly.
"""
from __future__ import annotations
from typing import Any


def is_number(value: Any) -> bool:
    return isinstance(value, float) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """nil, false, 0 and the empty string are falsy; everything else is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0.0
    if isinstance(value, str):
        return value != ""
    return True


def is_equal(a: Any, b: Any) -> bool:
    """Value equality without cross-type coercion (true != 1, nil == nil only)."""
    if a is None or b is None:
        return a is None and b is None
    if type(a) is not type(b):
        return False
    if isinstance(a, (bool, float, str)):
        return a == b
    return a is b


def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def stringify(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    return str(value)


def type_name(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return "function"
