"""
purlkit — error taxonomy

File: src/purlkit/errors.py
Last updated: 2026-10-17

Purpose
- Define the two disjoint failure families raised by the engine: syntactic
  failures while reading text and semantic failures while enforcing
  ecosystem rules.

Functional requirements
- Every error is a ``ValueError`` so callers can catch invalid input broadly.
- Messages are rendered as ``Invalid purl: <message>``.
- Each error carries a machine-readable ``kind`` and, when known, the
  offending ``component`` and ``value``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

MESSAGE_PREFIX: Final[str] = "Invalid purl: "


class ParseErrorKind(StrEnum):
    """Why text could not be read as a package URL."""

    INVALID_SCHEME = "invalid_scheme"
    MISSING_TYPE = "missing_type"
    MISSING_NAME = "missing_name"
    MALFORMED_QUALIFIERS = "malformed_qualifiers"
    MALFORMED_ENCODING = "malformed_encoding"
    UNEXPECTED_AUTHORITY = "unexpected_authority"


class ValidationErrorKind(StrEnum):
    """Why well-formed components violate the rules of their ecosystem."""

    MISSING_QUALIFIER = "missing_qualifier"
    FORBIDDEN_QUALIFIER = "forbidden_qualifier"
    INVALID_VERSION = "invalid_version"
    SUBPATH_NOT_ALLOWED = "subpath_not_allowed"
    INVALID_TYPE = "invalid_type"
    INVALID_QUALIFIER_KEY = "invalid_qualifier_key"
    MISSING_COMPONENT = "missing_component"
    FORBIDDEN_COMPONENT = "forbidden_component"
    INVALID_NAME = "invalid_name"
    INVALID_NAMESPACE = "invalid_namespace"


def format_error_message(message: str) -> str:
    """Render ``message`` with the standard prefix.

    The first character is lowercased and a single trailing period dropped so
    that messages compose into one sentence.
    """

    text = message
    if text:
        text = text[0].lower() + text[1:]
    if text.endswith(".") and not text.endswith(".."):
        text = text[:-1]
    return f"{MESSAGE_PREFIX}{text}"


class PurlError(ValueError):
    """Base class for every package URL failure."""

    kind: ParseErrorKind | ValidationErrorKind

    def __init__(
        self,
        kind: ParseErrorKind | ValidationErrorKind,
        message: str,
        *,
        component: str | None = None,
        value: str | None = None,
    ) -> None:
        self.kind = kind
        self.detail = message
        self.component = component
        self.value = value
        super().__init__(format_error_message(message))


class ParseError(PurlError):
    """Raised when text is not a syntactically valid package URL."""

    kind: ParseErrorKind

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        *,
        component: str | None = None,
        value: str | None = None,
    ) -> None:
        super().__init__(kind, message, component=component, value=value)


class ValidationError(PurlError):
    """Raised when components break a per-type or structural rule."""

    kind: ValidationErrorKind

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        *,
        component: str | None = None,
        value: str | None = None,
    ) -> None:
        super().__init__(kind, message, component=component, value=value)


__all__ = [
    "MESSAGE_PREFIX",
    "ParseError",
    "ParseErrorKind",
    "PurlError",
    "ValidationError",
    "ValidationErrorKind",
    "format_error_message",
]
