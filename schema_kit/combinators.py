"""
combinators.py — Object, array and union schemas.

Object and array schemas validate every child before reporting, so a single
call surfaces every failing field instead of only the first one.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from .issues import MISSING, Issue, ParseFail, ParseOk, ParseResult, Path, fail
from .schema import Parser, Schema


class ObjectSchema(Schema):
    """Validates the declared keys of a mapping; unknown keys are dropped."""

    def __init__(self, shape: Mapping[str, Schema], parser: Optional[Parser] = None):
        self.shape: Dict[str, Schema] = dict(shape)
        fields = tuple(self.shape.items())

        def parse_object(value: Any, path: Path) -> ParseResult:
            if not isinstance(value, Mapping):
                return fail(path, "Expected object")

            data: Dict[str, Any] = {}
            issues: List[Issue] = []
            for key, schema in fields:
                result = schema.parse_internal(value.get(key, MISSING), path + (key,))
                if result.success:
                    data[key] = result.data
                else:
                    issues.extend(result.issues)

            if issues:
                return ParseFail(issues)
            return ParseOk(data)

        super().__init__(parser or parse_object)


class ArraySchema(Schema):
    """Validates every element of a list or tuple against one item schema."""

    def __init__(self, item_schema: Schema, parser: Optional[Parser] = None):
        self.item_schema = item_schema

        def parse_array(value: Any, path: Path) -> ParseResult:
            if not isinstance(value, (list, tuple)):
                return fail(path, "Expected array")

            items: List[Any] = []
            issues: List[Issue] = []
            for index, item in enumerate(value):
                result = item_schema.parse_internal(item, path + (index,))
                if result.success:
                    items.append(result.data)
                else:
                    issues.extend(result.issues)

            if issues:
                return ParseFail(issues)
            return ParseOk(items)

        super().__init__(parser or parse_array)

    def length(self, size: int, message: str) -> "ArraySchema":
        """Require exactly *size* elements, checked once every element parsed."""
        return ArraySchema(self.item_schema, self._check(lambda items: len(items) == size, message))


class UnionSchema(Schema):
    """First matching schema wins; otherwise every branch's issues are kept."""

    def __init__(self, schemas: Sequence[Schema]):
        self.schemas = tuple(schemas)
        branches = self.schemas

        def parse_union(value: Any, path: Path) -> ParseResult:
            issues: List[Issue] = []
            for schema in branches:
                result = schema.parse_internal(value, path)
                if result.success:
                    return result
                issues.extend(result.issues)
            return ParseFail(issues)

        super().__init__(parse_union)
