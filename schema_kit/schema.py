"""
schema.py — Base Schema: entrypoints and the wrappers every schema shares.

A Schema owns one parser, ``(value, path) -> ParseOk | ParseFail``.  Methods
such as ``nullable`` or ``super_refine`` never touch ``self``; they build a
new Schema whose parser calls the old one, so a schema built at import time
can be shared freely between calls.
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from .issues import (
    Issue,
    ParseFail,
    ParseOk,
    ParseResult,
    Path,
    PathElement,
    SafeParseFailure,
    SafeParseResult,
    SafeParseSuccess,
    ValidationError,
)

Parser = Callable[[Any, Path], ParseResult]


class RefinementContext:
    """Handed to ``super_refine`` callbacks; collects issues they report."""

    def __init__(self, path: Path):
        self._path = path
        self.issues: List[Issue] = []

    def add_issue(self, message: str, path: Optional[Sequence[PathElement]] = None) -> None:
        """Record an issue at *path*, relative to the refined value.

        With no *path* the issue sits on the refined value itself.
        """
        full_path = self._path + tuple(path) if path is not None else self._path
        self.issues.append(Issue(full_path, message))


class Schema:
    def __init__(self, parser: Parser):
        self._parser = parser

    # ------------------------------------------------------------------
    # Entrypoints
    # ------------------------------------------------------------------

    def safe_parse(self, value: Any) -> SafeParseResult:
        """Validate *value*; never raises for invalid input."""
        result = self._parser(value, ())
        if result.success:
            return SafeParseSuccess(result.data)
        return SafeParseFailure(ValidationError(result.issues))

    def parse(self, value: Any) -> Any:
        """Validate *value* and return the parsed data.

        Raises:
            ValidationError: carrying every issue found.
        """
        result = self.safe_parse(value)
        if not result.success:
            raise result.error
        return result.data

    def parse_internal(self, value: Any, path: Path) -> ParseResult:
        return self._parser(value, path)

    # ------------------------------------------------------------------
    # Wrappers
    # ------------------------------------------------------------------

    def nullable(self) -> "Schema":
        base = self._parser

        def parser(value: Any, path: Path) -> ParseResult:
            if value is None:
                return ParseOk(None)
            return base(value, path)

        return Schema(parser)

    def or_(self, other: "Schema") -> "Schema":
        base = self._parser

        def parser(value: Any, path: Path) -> ParseResult:
            first = base(value, path)
            if first.success:
                return first
            second = other.parse_internal(value, path)
            if second.success:
                return second
            return ParseFail([*first.issues, *second.issues])

        return Schema(parser)

    __or__ = or_

    def super_refine(self, refinement: Callable[[Any, RefinementContext], None]) -> "Schema":
        """Run *refinement* on the parsed value; any issue it adds fails the parse.

        The refinement only sees values that already passed this schema.
        """
        base = self._parser

        def parser(value: Any, path: Path) -> ParseResult:
            result = base(value, path)
            if not result.success:
                return result
            ctx = RefinementContext(path)
            refinement(result.data, ctx)
            if ctx.issues:
                return ParseFail(ctx.issues)
            return result

        return Schema(parser)

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def _check(self, predicate: Callable[[Any], bool], message: str) -> Parser:
        """Wrap this schema's parser with a post-success predicate."""
        base = self._parser

        def parser(value: Any, path: Path) -> ParseResult:
            result = base(value, path)
            if not result.success:
                return result
            if not predicate(result.data):
                return ParseFail([Issue(path, message)])
            return result

        return parser
