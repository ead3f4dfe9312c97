"""
purlkit — package URL value object

File: src/purlkit/package_url.py
Last updated: 2026-10-17

Purpose
- Provide ``PackageURL``, the immutable canonical identifier.

What should be included in this file
- Construction that always normalizes and validates.
- Text round-tripping (``from_string`` / ``to_string``), functional update and
  plain-dict conversion.

Functional requirements
- ``PackageURL.from_string(str(purl)) == purl`` for every instance.
- Instances never change after construction.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from purlkit.codec import QueryParser, split_query
from purlkit.normalizer import normalize_parts
from purlkit.parser import parse
from purlkit.rules import RuleTable
from purlkit.serializer import serialize


@dataclass(frozen=True, slots=True)
class PackageURL:
    """A canonical package URL.

    ``qualifiers`` may be given as a mapping or as ``(key, value)`` pairs; it is
    stored as a read-only mapping sorted by key, or ``None`` when empty.

    ``rules`` is the table the instance was validated against. It is reused by
    ``replace`` and ignored by equality and hashing.
    """

    type: str
    namespace: str | None
    name: str
    version: str | None = None
    qualifiers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None
    subpath: str | None = None
    rules: RuleTable | None = field(default=None, kw_only=True, compare=False, repr=False)

    def __post_init__(self) -> None:
        parts = normalize_parts(
            self.type,
            self.namespace,
            self.name,
            self.version,
            self.qualifiers,
            self.subpath,
            rules=self.rules,
        )
        object.__setattr__(self, "type", parts.type)
        object.__setattr__(self, "namespace", parts.namespace)
        object.__setattr__(self, "name", parts.name)
        object.__setattr__(self, "version", parts.version)
        object.__setattr__(self, "qualifiers", parts.qualifiers)
        object.__setattr__(self, "subpath", parts.subpath)

    def __str__(self) -> str:
        return self.to_string()

    def __hash__(self) -> int:
        return hash(self.to_string())

    @classmethod
    def from_string(
        cls,
        text: str,
        *,
        rules: RuleTable | None = None,
        query_parser: QueryParser = split_query,
    ) -> PackageURL:
        """Parse, normalize and validate ``text``."""

        raw = parse(text, rules=rules, query_parser=query_parser)
        return cls(
            raw.type,
            raw.namespace,
            raw.name,
            raw.version,
            raw.qualifiers,
            raw.subpath,
            rules=rules,
        )

    def to_string(self) -> str:
        return serialize(self)

    def replace(self, **changes: Any) -> PackageURL:
        """Return a new identifier with ``changes`` applied and re-validated.

        The rule table is carried over unless ``rules`` is among the changes.
        """

        return replace(self, **changes)

    @property
    def namespace_segments(self) -> tuple[str, ...]:
        if not self.namespace:
            return ()
        return tuple(self.namespace.split("/"))

    @property
    def subpath_segments(self) -> tuple[str, ...]:
        if not self.subpath:
            return ()
        return tuple(self.subpath.split("/"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "namespace": self.namespace,
            "name": self.name,
            "version": self.version,
            "qualifiers": None if self.qualifiers is None else dict(self.qualifiers),
            "subpath": self.subpath,
        }

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any],
        *,
        rules: RuleTable | None = None,
    ) -> PackageURL:
        return cls(
            payload.get("type"),  # type: ignore[arg-type]
            payload.get("namespace"),
            payload.get("name"),  # type: ignore[arg-type]
            payload.get("version"),
            payload.get("qualifiers"),
            payload.get("subpath"),
            rules=rules,
        )


__all__ = ["PackageURL"]
