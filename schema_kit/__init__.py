# Schema Kit — composable runtime validation for untrusted payloads
from typing import Any, Iterable, Mapping, Sequence

from .combinators import ArraySchema, ObjectSchema, UnionSchema
from .issues import (
    MISSING,
    Issue,
    SafeParseFailure,
    SafeParseResult,
    SafeParseSuccess,
    ValidationError,
)
from .primitives import BooleanSchema, EnumSchema, LiteralSchema, NumberSchema, StringSchema
from .schema import RefinementContext, Schema


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def boolean() -> BooleanSchema:
    return BooleanSchema()


def literal(value: Any) -> LiteralSchema:
    return LiteralSchema(value)


def enum_(values: Iterable[str]) -> EnumSchema:
    return EnumSchema(values)


def object_(shape: Mapping[str, Schema]) -> ObjectSchema:
    return ObjectSchema(shape)


def array(item_schema: Schema) -> ArraySchema:
    return ArraySchema(item_schema)


def union(schemas: Sequence[Schema]) -> UnionSchema:
    return UnionSchema(schemas)


__all__ = [
    "MISSING",
    "Issue",
    "RefinementContext",
    "SafeParseFailure",
    "SafeParseResult",
    "SafeParseSuccess",
    "Schema",
    "ValidationError",
    "ArraySchema",
    "BooleanSchema",
    "EnumSchema",
    "LiteralSchema",
    "NumberSchema",
    "ObjectSchema",
    "StringSchema",
    "UnionSchema",
    "array",
    "boolean",
    "enum_",
    "literal",
    "number",
    "object_",
    "string",
    "union",
]
