"""Leaf schemas: string, number, boolean, literal, enum."""
from __future__ import annotations

import math
from typing import Any, FrozenSet, Iterable, Optional

from .issues import ParseOk, ParseResult, Path, fail
from .schema import Parser, Schema


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class StringSchema(Schema):
    def __init__(self, parser: Optional[Parser] = None):
        super().__init__(parser or _parse_string)

    def min(self, length: int, message: str) -> "StringSchema":
        return StringSchema(self._check(lambda s: len(s) >= length, message))

    def max(self, length: int, message: str) -> "StringSchema":
        return StringSchema(self._check(lambda s: len(s) <= length, message))


def _parse_string(value: Any, path: Path) -> ParseResult:
    if isinstance(value, str):
        return ParseOk(value)
    return fail(path, "Expected string")


class NumberSchema(Schema):
    def __init__(self, parser: Optional[Parser] = None):
        super().__init__(parser or _parse_number)

    def nonnegative(self, message: str) -> "NumberSchema":
        return NumberSchema(self._check(lambda n: n >= 0, message))


def _is_finite(value: Any) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def _parse_number(value: Any, path: Path) -> ParseResult:
    if _is_number(value) and _is_finite(value):
        return ParseOk(value)
    return fail(path, "Expected number")


class BooleanSchema(Schema):
    def __init__(self):
        super().__init__(_parse_boolean)


def _parse_boolean(value: Any, path: Path) -> ParseResult:
    if isinstance(value, bool):
        return ParseOk(value)
    return fail(path, "Expected boolean")


def _strict_equals(value: Any, literal: Any) -> bool:
    """Equality that keeps None, booleans, numbers and strings apart."""
    if literal is None or isinstance(literal, bool):
        return value is literal
    if _is_number(literal):
        return _is_number(value) and value == literal
    return type(value) is type(literal) and value == literal


def _display(literal: Any) -> str:
    if literal is None:
        return "null"
    if isinstance(literal, bool):
        return "true" if literal else "false"
    return str(literal)


class LiteralSchema(Schema):
    def __init__(self, literal: Any):
        self.literal = literal
        message = f"Expected {_display(literal)}"

        def parser(value: Any, path: Path) -> ParseResult:
            if _strict_equals(value, literal):
                return ParseOk(literal)
            return fail(path, message)

        super().__init__(parser)


class EnumSchema(Schema):
    def __init__(self, values: Iterable[str]):
        self.values: FrozenSet[str] = frozenset(values)
        allowed = self.values

        def parser(value: Any, path: Path) -> ParseResult:
            if not isinstance(value, str):
                return fail(path, "Expected string")
            if value not in allowed:
                return fail(path, "Invalid enum value")
            return ParseOk(value)

        super().__init__(parser)
