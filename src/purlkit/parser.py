"""
purlkit — package URL parser

File: src/purlkit/parser.py
Last updated: 2026-10-17

Purpose
- Split package URL text into decoded but unvalidated components.

What should be included in this file
- ``RawIdentifier``, the parser's output record.
- ``parse`` implementing scheme detection, right-to-left component splitting
  and strict percent-decoding.

Functional requirements
- Scan order is fixed: subpath, qualifiers, version, then namespace/name.
- The query splitter is an injected capability and is always invoked.
- A fault raised inside the splitter surfaces as ``MALFORMED_QUALIFIERS``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from purlkit.codec import QueryParser, decode_component, split_query
from purlkit.constants import SCHEME, TYPE_PATTERN, URL_SCHEME_PATTERN
from purlkit.errors import ParseError, ParseErrorKind, PurlError
from purlkit.rules import RuleTable, VersionSplit

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawIdentifier:
    """Components exactly as read from text, percent-decoded."""

    type: str
    namespace: str | None
    name: str
    version: str | None = None
    qualifiers: tuple[tuple[str, str], ...] = ()
    subpath: str | None = None


def parse(
    text: str,
    *,
    rules: RuleTable | None = None,
    query_parser: QueryParser = split_query,
) -> RawIdentifier:
    """Parse ``text`` into a ``RawIdentifier``.

    ``rules`` selects how the version separator is located for the type;
    the default table is used when omitted.
    """

    if not isinstance(text, str):
        raise TypeError(f"package URL must be a string, got {type(text).__name__}")
    if rules is None:
        from purlkit.ecosystems import default_rule_table

        rules = default_rule_table()

    remainder = _strip_scheme(text.strip())

    stripped = remainder.lstrip("/")
    if len(stripped) != len(remainder):
        authority = stripped.split("/", 1)[0]
        if "@" in authority:
            raise ParseError(
                ParseErrorKind.UNEXPECTED_AUTHORITY,
                'cannot contain a "user:pass@host:port"',
                value=text,
            )
    remainder = stripped

    remainder, hash_sep, raw_subpath = remainder.partition("#")
    subpath = decode_component("subpath", raw_subpath) if hash_sep else None

    remainder, _, raw_query = remainder.partition("?")
    qualifiers = _parse_qualifiers(raw_query, query_parser)

    purl_type, slash, path = remainder.partition("/")
    if not purl_type:
        raise ParseError(
            ParseErrorKind.MISSING_TYPE, '"type" is a required component', component="type"
        )
    if not slash:
        raise ParseError(
            ParseErrorKind.MISSING_NAME, '"name" is a required component', component="name"
        )

    split = rules.lookup(purl_type).version_split
    at_index = _version_separator_index(path, split)
    version: str | None = None
    if at_index >= 0:
        version = decode_component("version", path[at_index + 1 :])
        path = path[:at_index]

    head, _, raw_name = path.rpartition("/")
    if not raw_name:
        raise ParseError(
            ParseErrorKind.MISSING_NAME, '"name" is a required component', component="name"
        )
    name = decode_component("name", raw_name)

    segments = [decode_component("namespace", segment) for segment in head.split("/") if segment]
    namespace = "/".join(segments) if segments else None

    return RawIdentifier(
        type=purl_type,
        namespace=namespace,
        name=name,
        version=version,
        qualifiers=qualifiers,
        subpath=subpath,
    )


def _strip_scheme(text: str) -> str:
    scheme, colon, rest = text.partition(":")
    if colon and URL_SCHEME_PATTERN.match(scheme) is not None:
        if scheme.lower() != SCHEME:
            raise ParseError(
                ParseErrorKind.INVALID_SCHEME,
                'missing required "pkg" scheme component',
                value=text,
            )
        return rest
    # No scheme: only accept text that already looks like ``type/...``.
    candidate, slash, _ = text.lstrip("/").partition("/")
    if slash and TYPE_PATTERN.match(candidate.lower()) is not None:
        logger.debug("package URL without scheme accepted", extra={"purl_type": candidate})
        return text
    raise ParseError(
        ParseErrorKind.INVALID_SCHEME,
        'missing required "pkg" scheme component',
        value=text,
    )


def _version_separator_index(path: str, split: VersionSplit) -> int:
    if split is VersionSplit.FIRST:
        # Skip the first character so a leading scope "@" is never the separator.
        index = path.find("@", 1)
        while index > 0 and path[index - 1] == "/":
            index = path.find("@", index + 1)
        return index
    index = path.rfind("@")
    if index > 0 and path[index - 1] == "/":
        return -1
    return index if index > 0 else -1


def _parse_qualifiers(query: str, query_parser: QueryParser) -> tuple[tuple[str, str], ...]:
    try:
        pairs = list(query_parser(query))
    except PurlError:
        raise
    except Exception as exc:
        raise ParseError(
            ParseErrorKind.MALFORMED_QUALIFIERS,
            "failed to parse as URL",
            component="qualifiers",
            value=query,
        ) from exc
    decoded: list[tuple[str, str]] = []
    for key, value in pairs:
        try:
            decoded.append(
                (decode_component("qualifiers", key), decode_component("qualifiers", value))
            )
        except ParseError as exc:
            raise ParseError(
                ParseErrorKind.MALFORMED_QUALIFIERS,
                exc.detail,
                component="qualifiers",
                value=exc.value,
            ) from exc
    return tuple(decoded)


__all__ = ["RawIdentifier", "parse"]
