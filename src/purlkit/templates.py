"""URL templates used to derive repository and download locations."""

from __future__ import annotations

import re
import string
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final, Protocol

from purlkit.constants import QUALIFIER_KEY_PATTERN


class RepositoryUrlKind(StrEnum):
    GIT = "git"
    HG = "hg"
    SVN = "svn"
    WEB = "web"


class DownloadUrlKind(StrEnum):
    TARBALL = "tarball"
    ZIP = "zip"
    EXE = "exe"
    WHEEL = "wheel"
    JAR = "jar"
    GEM = "gem"
    OTHER = "other"


REQUIRABLE_COMPONENTS: Final[frozenset[str]] = frozenset({"namespace", "version", "subpath"})
PLACEHOLDERS: Final[frozenset[str]] = frozenset(
    {
        "type",
        "namespace",
        "name",
        "version",
        "subpath",
        "namespace_prefix",
        "namespace_path",
        "qualifiers",
    }
)

_FIELD_ROOT_RE: Final[re.Pattern[str]] = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)")
_QUALIFIER_FIELD_RE: Final[re.Pattern[str]] = re.compile(r"^qualifiers\[([^\[\]]+)\]$")


class TemplateSource(Protocol):
    """Anything exposing package URL components as attributes."""

    @property
    def type(self) -> str: ...

    @property
    def namespace(self) -> str | None: ...

    @property
    def name(self) -> str: ...

    @property
    def version(self) -> str | None: ...

    @property
    def qualifiers(self) -> Mapping[str, str] | None: ...

    @property
    def subpath(self) -> str | None: ...


@dataclass(frozen=True, slots=True)
class UrlTemplate:
    """A ``str.format`` URL pattern plus the components it cannot do without."""

    url: str
    kind: str
    requires: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.url, str) or not self.url.strip():
            raise ValueError("UrlTemplate.url must be a non-empty string")
        object.__setattr__(self, "url", self.url.strip())
        object.__setattr__(self, "requires", frozenset(self.requires))
        unknown = sorted(self.requires - REQUIRABLE_COMPONENTS)
        if unknown:
            raise ValueError(f"UrlTemplate.requires has unsupported components: {unknown}")
        for field_name, conversion, format_spec in _fields(self.url):
            _check_field(field_name, conversion, format_spec)

    def render(self, source: TemplateSource) -> str | None:
        """Fill the template from ``source``; ``None`` when a required part is absent."""

        for component in sorted(self.requires):
            if not getattr(source, component):
                return None
        namespace = source.namespace or ""
        values: dict[str, object] = {
            "type": source.type,
            "namespace": namespace,
            "name": source.name,
            "version": source.version or "",
            "subpath": source.subpath or "",
            "namespace_prefix": f"{namespace}/" if namespace else "",
            "namespace_path": namespace.replace(".", "/"),
            "qualifiers": dict(source.qualifiers or {}),
        }
        try:
            return self.url.format_map(values)
        except (KeyError, IndexError, AttributeError, ValueError):
            # A referenced qualifier is not set, or its value is not indexable.
            return None

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, object],
        *,
        kinds: type[StrEnum],
        field_name: str,
    ) -> UrlTemplate:
        """Build a template from a catalog or config table, validating ``kind``."""

        url = payload.get("url")
        if not isinstance(url, str):
            raise ValueError(f"{field_name}.url must be a string")
        raw_kind = payload.get("kind")
        if not isinstance(raw_kind, str):
            raise ValueError(f"{field_name}.kind must be a string")
        try:
            kind = kinds(raw_kind.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(member.value for member in kinds)
            raise ValueError(f"{field_name}.kind must be one of: {allowed}") from exc
        raw_requires = payload.get("requires", ())
        if isinstance(raw_requires, str) or not isinstance(raw_requires, Sequence):
            raise ValueError(f"{field_name}.requires must be an array")
        requires: set[str] = set()
        for item in raw_requires:
            if not isinstance(item, str):
                raise ValueError(f"{field_name}.requires entries must be strings")
            requires.add(item.strip())
        try:
            return cls(url=url, kind=kind.value, requires=frozenset(requires))
        except ValueError as exc:
            raise ValueError(f"{field_name}: {exc}") from exc


def _fields(pattern: str) -> list[tuple[str, str | None, str]]:
    try:
        parsed = list(string.Formatter().parse(pattern))
    except ValueError as exc:
        raise ValueError(f"UrlTemplate.url is not a valid pattern ({exc})") from exc
    return [
        (field_name, conversion, format_spec or "")
        for _, field_name, format_spec, conversion in parsed
        if field_name is not None
    ]


def _check_field(field_name: str, conversion: str | None, format_spec: str) -> None:
    """Accept only ``{placeholder}`` and ``{qualifiers[key]}`` fields."""

    if conversion or format_spec:
        raise ValueError(
            f"UrlTemplate.url field {field_name!r} cannot use a conversion or format spec"
        )
    qualifier = _QUALIFIER_FIELD_RE.match(field_name)
    if qualifier is not None:
        if QUALIFIER_KEY_PATTERN.match(qualifier.group(1)) is None:
            raise ValueError(f"UrlTemplate.url field {field_name!r} names an invalid qualifier")
        return
    if field_name in PLACEHOLDERS and field_name != "qualifiers":
        return
    root = _FIELD_ROOT_RE.match(field_name)
    if root is not None and root.group(1) in PLACEHOLDERS:
        raise ValueError(f"UrlTemplate.url field {field_name!r} must be a plain placeholder")
    raise ValueError(f"UrlTemplate.url uses unknown placeholder {field_name!r}")


__all__ = [
    "PLACEHOLDERS",
    "REQUIRABLE_COMPONENTS",
    "DownloadUrlKind",
    "RepositoryUrlKind",
    "TemplateSource",
    "UrlTemplate",
]
