"""
issues.py — Validation issues, the error type and parse result records.

An Issue pins one failure to a location inside the validated value:

    Issue(path=("offers", 0, "name"), message="Enter a name for this offer")

Schemas never raise for ordinary validation failures; they return issues.
ValidationError only exists so that ``Schema.safe_parse`` can hand the caller
a single object carrying every issue, and so ``Schema.parse`` has something
to raise.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

PathElement = Union[str, int]
Path = Tuple[PathElement, ...]


class _Missing:
    """Marker handed to a field schema when the key is absent from the input."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass(frozen=True)
class Issue:
    path: Path
    message: str

    @property
    def dotted_path(self) -> str:
        """``("offers", 0, "name")`` → ``"offers.0.name"``; root → ``""``."""
        return ".".join(str(p) for p in self.path)


class ValidationError(Exception):
    """Carries every issue found by one parse call."""

    def __init__(self, issues: List[Issue]):
        super().__init__("Validation error")
        self.issues = list(issues)

    def field_errors(self) -> Dict[str, str]:
        """Map dotted path → message. Later issues on the same path win."""
        errors: Dict[str, str] = {}
        for issue in self.issues:
            errors[issue.dotted_path] = issue.message
        return errors

    def __repr__(self) -> str:
        return f"ValidationError(issues={self.issues!r})"


# ---------------------------------------------------------------------------
# Internal parser results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParseOk:
    data: Any
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ParseFail:
    issues: List[Issue]
    success: bool = field(default=False, init=False)


ParseResult = Union[ParseOk, ParseFail]


# ---------------------------------------------------------------------------
# safe_parse results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SafeParseSuccess:
    data: Any
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class SafeParseFailure:
    error: ValidationError
    success: bool = field(default=False, init=False)


SafeParseResult = Union[SafeParseSuccess, SafeParseFailure]


def fail(path: Path, message: str) -> ParseFail:
    """Single-issue failure at *path*."""
    return ParseFail([Issue(path, message)])
