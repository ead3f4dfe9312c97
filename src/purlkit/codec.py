"""
purlkit — percent-encoding primitives

File: src/purlkit/codec.py
Last updated: 2026-10-17

Purpose
- Encode component values for their position in the package URL grammar and
  decode them strictly.

What should be included in this file
- Position-specific encoders built on ``urllib.parse.quote``.
- A strict decoder that refuses dangling ``%`` escapes and non UTF-8 bytes.
- The minimal query splitter and the ``QueryParser`` callable type the parser
  receives.

Functional requirements
- Unreserved characters (``A-Z a-z 0-9 - . _ ~``) are never escaped.
- ``+`` is a literal plus sign everywhere; it is never read as a space.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Final
from urllib.parse import quote, unquote

from purlkit.errors import ParseError, ParseErrorKind

QueryPair = tuple[str, str]
QueryParser = Callable[[str], Sequence[QueryPair]]

_NAME_SAFE: Final[str] = ":"
_NAMESPACE_SAFE: Final[str] = ":/"
_SUBPATH_SAFE: Final[str] = "/"
_QUALIFIER_VALUE_SAFE: Final[str] = ":/"

_INVALID_ESCAPE_RE: Final[re.Pattern[str]] = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_component(value: str, *, safe: str = "") -> str:
    """Percent-encode ``value`` as UTF-8, keeping unreserved characters and ``safe``."""

    return quote(value, safe=safe, encoding="utf-8", errors="strict")


def encode_namespace(namespace: str) -> str:
    return encode_component(namespace, safe=_NAMESPACE_SAFE)


def encode_name(name: str) -> str:
    return encode_component(name, safe=_NAME_SAFE)


def encode_version(version: str) -> str:
    return encode_component(version, safe=_NAME_SAFE)


def encode_subpath(subpath: str) -> str:
    return encode_component(subpath, safe=_SUBPATH_SAFE)


def encode_qualifier_key(key: str) -> str:
    return encode_component(key)


def encode_qualifier_value(value: str) -> str:
    return encode_component(value, safe=_QUALIFIER_VALUE_SAFE)


def decode_component(component: str, value: str) -> str:
    """Decode percent-escapes in ``value``.

    Raises ``ParseError`` with kind ``MALFORMED_ENCODING`` naming ``component``
    when an escape is incomplete or the decoded bytes are not UTF-8.
    """

    if "%" not in value:
        return value
    if _INVALID_ESCAPE_RE.search(value) is not None:
        raise ParseError(
            ParseErrorKind.MALFORMED_ENCODING,
            f'unable to decode "{component}" component',
            component=component,
            value=value,
        )
    try:
        return unquote(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise ParseError(
            ParseErrorKind.MALFORMED_ENCODING,
            f'unable to decode "{component}" component',
            component=component,
            value=value,
        ) from exc


def split_query(query: str) -> list[QueryPair]:
    """Split ``query`` into undecoded ``(key, value)`` pairs.

    Entries are separated by ``&``; each splits on its first ``=``. A bare
    key yields an empty value and empty entries are skipped.
    """

    pairs: list[QueryPair] = []
    if not query:
        return pairs
    for entry in query.split("&"):
        if not entry:
            continue
        key, _, value = entry.partition("=")
        pairs.append((key, value))
    return pairs


__all__ = [
    "QueryPair",
    "QueryParser",
    "decode_component",
    "encode_component",
    "encode_name",
    "encode_namespace",
    "encode_qualifier_key",
    "encode_qualifier_value",
    "encode_subpath",
    "encode_version",
    "split_query",
]
