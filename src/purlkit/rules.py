"""
purlkit — per-type rule descriptors and the rule table

File: src/purlkit/rules.py
Last updated: 2026-10-17

Purpose
- Describe every ecosystem-specific behavior as data so the parser and the
  normalizer stay free of per-type branches.

What should be included in this file
- Policy enums, the ``PurlParts`` record passed through hooks, the
  ``RuleDescriptor`` entry and the immutable ``RuleTable``.
- A tagged lookup result distinguishing registered types from the permissive
  fallback.

Functional requirements
- ``lookup`` never fails: unknown types receive permissive rules.
- Adding an ecosystem means adding one descriptor.

Non-functional requirements
- Tables and descriptors are immutable and safe to share across threads.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType

from purlkit.templates import UrlTemplate


class CasePolicy(StrEnum):
    PRESERVE = "preserve"
    LOWERCASE = "lowercase"


class ComponentPolicy(StrEnum):
    OPTIONAL = "optional"
    REQUIRED = "required"
    FORBIDDEN = "forbidden"


class SubpathPolicy(StrEnum):
    PRESERVE = "preserve"
    FORBID = "forbid"


class VersionSplit(StrEnum):
    """Which ``@`` in the path separates the version."""

    LAST = "last"
    FIRST = "first"


@dataclass(frozen=True, slots=True)
class PurlParts:
    """Normalized components flowing through per-type hooks."""

    type: str
    namespace: str | None
    name: str
    version: str | None
    qualifiers: Mapping[str, str] | None
    subpath: str | None

    def evolve(self, **changes: object) -> PurlParts:
        return replace(self, **changes)  # type: ignore[arg-type]


NormalizeHook = Callable[[PurlParts], PurlParts]
ValidateHook = Callable[[PurlParts], None]
VersionPredicate = Callable[[str], bool]
NameTransform = Callable[[str], str]


def _frozen_mapping(value: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True, slots=True)
class RuleDescriptor:
    """Everything the engine needs to know about one package type."""

    type: str
    namespace_case: CasePolicy = CasePolicy.PRESERVE
    name_case: CasePolicy = CasePolicy.PRESERVE
    version_case: CasePolicy = CasePolicy.PRESERVE
    namespace: ComponentPolicy = ComponentPolicy.OPTIONAL
    version: ComponentPolicy = ComponentPolicy.OPTIONAL
    required_qualifiers: frozenset[str] = field(default_factory=frozenset)
    forbidden_qualifiers: frozenset[str] = field(default_factory=frozenset)
    default_qualifiers: Mapping[str, str] = field(default_factory=dict)
    subpath: SubpathPolicy = SubpathPolicy.PRESERVE
    version_split: VersionSplit = VersionSplit.LAST
    version_predicate: VersionPredicate | None = None
    name_transform: NameTransform | None = None
    normalize_hook: NormalizeHook | None = None
    validate_hook: ValidateHook | None = None
    repository_url: UrlTemplate | None = None
    download_url: UrlTemplate | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type.strip():
            raise ValueError("RuleDescriptor.type must be a non-empty string")
        object.__setattr__(self, "type", self.type.strip().lower())
        object.__setattr__(self, "namespace_case", CasePolicy(self.namespace_case))
        object.__setattr__(self, "name_case", CasePolicy(self.name_case))
        object.__setattr__(self, "version_case", CasePolicy(self.version_case))
        object.__setattr__(self, "namespace", ComponentPolicy(self.namespace))
        object.__setattr__(self, "version", ComponentPolicy(self.version))
        object.__setattr__(self, "subpath", SubpathPolicy(self.subpath))
        object.__setattr__(self, "version_split", VersionSplit(self.version_split))
        object.__setattr__(
            self,
            "required_qualifiers",
            frozenset(key.lower() for key in self.required_qualifiers),
        )
        object.__setattr__(
            self,
            "forbidden_qualifiers",
            frozenset(key.lower() for key in self.forbidden_qualifiers),
        )
        object.__setattr__(
            self,
            "default_qualifiers",
            _frozen_mapping({key.lower(): value for key, value in self.default_qualifiers.items()}),
        )
        clash = self.required_qualifiers & self.forbidden_qualifiers
        if clash:
            raise ValueError(
                f"RuleDescriptor {self.type!r} both requires and forbids {sorted(clash)}"
            )

    def accepts_version(self, version: str) -> bool:
        if self.version_predicate is None:
            return True
        return self.version_predicate(version)

    def with_templates(
        self,
        *,
        repository_url: UrlTemplate | None,
        download_url: UrlTemplate | None,
    ) -> RuleDescriptor:
        return replace(self, repository_url=repository_url, download_url=download_url)


@dataclass(frozen=True, slots=True)
class KnownRules:
    """Lookup result for a registered type."""

    descriptor: RuleDescriptor


@dataclass(frozen=True, slots=True)
class DefaultRules:
    """Lookup result for an unregistered type; carries the permissive descriptor."""

    type: str

    @property
    def descriptor(self) -> RuleDescriptor:
        return RuleDescriptor(type=self.type)


RuleResolution = KnownRules | DefaultRules


class RuleTable(Mapping[str, RuleDescriptor]):
    """Immutable mapping from type token to ``RuleDescriptor``."""

    __slots__ = ("_descriptors",)

    def __init__(self, descriptors: Iterable[RuleDescriptor] = ()) -> None:
        table: dict[str, RuleDescriptor] = {}
        for descriptor in descriptors:
            if not isinstance(descriptor, RuleDescriptor):
                raise TypeError("RuleTable entries must be RuleDescriptor instances")
            table[descriptor.type] = descriptor
        self._descriptors: Mapping[str, RuleDescriptor] = MappingProxyType(table)

    def __getitem__(self, purl_type: str) -> RuleDescriptor:
        return self._descriptors[purl_type.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __repr__(self) -> str:
        return f"RuleTable({sorted(self._descriptors)!r})"

    def resolve(self, purl_type: str) -> RuleResolution:
        key = purl_type.strip().lower()
        descriptor = self._descriptors.get(key)
        if descriptor is None:
            return DefaultRules(type=key)
        return KnownRules(descriptor=descriptor)

    def lookup(self, purl_type: str) -> RuleDescriptor:
        return self.resolve(purl_type).descriptor

    def with_descriptors(self, *descriptors: RuleDescriptor) -> RuleTable:
        """Return a new table where ``descriptors`` add to or replace existing entries."""

        return RuleTable([*self._descriptors.values(), *descriptors])


__all__ = [
    "CasePolicy",
    "ComponentPolicy",
    "DefaultRules",
    "KnownRules",
    "NameTransform",
    "NormalizeHook",
    "PurlParts",
    "RuleDescriptor",
    "RuleResolution",
    "RuleTable",
    "SubpathPolicy",
    "ValidateHook",
    "VersionPredicate",
    "VersionSplit",
]
