"""
purlkit — bundled ecosystem catalog

File: src/purlkit/catalog.py
Last updated: 2026-10-17

Purpose
- Load the package-shipped ``data/ecosystems.yaml`` holding URL templates and
  the npm name lists.

What should be included in this file
- File-backed loader with validation of every entry.
- Deterministic cached access to the bundled catalog.

Non-functional requirements
- Offline; the only file read is the bundled catalog or an explicit path.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Final, cast

import yaml

from purlkit.templates import DownloadUrlKind, RepositoryUrlKind, UrlTemplate

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA_VERSION: Final[int] = 1


def _as_mapping(value: object, field_name: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{field_name} must be a mapping")
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise ValueError(f"{field_name} keys must be strings")
        out[key] = item
    return out


def _as_name_set(value: object, field_name: str) -> frozenset[str]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValueError(f"{field_name} must be a sequence")
    names: set[str] = set()
    for index, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"{field_name}[{index}] must be a non-empty string")
        names.add(item.strip())
    return frozenset(names)


@dataclass(frozen=True, slots=True)
class UrlTemplates:
    """Repository and download templates registered for one type."""

    repository: UrlTemplate | None = None
    download: UrlTemplate | None = None


@dataclass(frozen=True, slots=True)
class EcosystemCatalog:
    """In-memory view of the ecosystem data file."""

    url_templates: Mapping[str, UrlTemplates]
    npm_builtin_names: frozenset[str]
    npm_legacy_names: frozenset[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "url_templates", MappingProxyType(dict(self.url_templates)))

    def templates_for(self, purl_type: str) -> UrlTemplates:
        return self.url_templates.get(purl_type, UrlTemplates())

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> EcosystemCatalog:
        root = _as_mapping(payload, "catalog")
        schema_version = root.get("schema_version")
        if schema_version != SUPPORTED_SCHEMA_VERSION:
            raise ValueError(
                f"catalog.schema_version must be {SUPPORTED_SCHEMA_VERSION}, got {schema_version!r}"
            )

        templates: dict[str, UrlTemplates] = {}
        raw_templates = _as_mapping(root.get("url_templates", {}), "catalog.url_templates")
        for purl_type in sorted(raw_templates):
            entry = _as_mapping(raw_templates[purl_type], f"catalog.url_templates.{purl_type}")
            templates[purl_type.lower()] = _parse_template_pair(
                entry, field_name=f"catalog.url_templates.{purl_type}"
            )

        npm = _as_mapping(root.get("npm", {}), "catalog.npm")
        return cls(
            url_templates=templates,
            npm_builtin_names=_as_name_set(
                npm.get("builtin_names", ()), "catalog.npm.builtin_names"
            ),
            npm_legacy_names=_as_name_set(npm.get("legacy_names", ()), "catalog.npm.legacy_names"),
        )

    @classmethod
    def from_file(cls, path: Path) -> EcosystemCatalog:
        try:
            with path.open("r", encoding="utf-8") as handle:
                loaded = cast("object", yaml.safe_load(handle))
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: invalid YAML ({exc})") from exc
        except OSError as exc:
            raise ValueError(f"{path}: unable to read catalog ({exc})") from exc

        try:
            catalog = cls.from_mapping(_as_mapping(loaded, "catalog"))
        except ValueError as exc:
            raise ValueError(f"{path}: {exc}") from exc
        logger.debug(
            "loaded ecosystem catalog",
            extra={"catalog_path": str(path), "template_types": len(catalog.url_templates)},
        )
        return catalog


def _parse_template_pair(entry: Mapping[str, object], *, field_name: str) -> UrlTemplates:
    repository = entry.get("repository")
    download = entry.get("download")
    return UrlTemplates(
        repository=(
            None
            if repository is None
            else UrlTemplate.from_mapping(
                _as_mapping(repository, f"{field_name}.repository"),
                kinds=RepositoryUrlKind,
                field_name=f"{field_name}.repository",
            )
        ),
        download=(
            None
            if download is None
            else UrlTemplate.from_mapping(
                _as_mapping(download, f"{field_name}.download"),
                kinds=DownloadUrlKind,
                field_name=f"{field_name}.download",
            )
        ),
    )


def _bundled_catalog_path() -> Path:
    return Path(__file__).resolve().parent / "data" / "ecosystems.yaml"


@lru_cache(maxsize=8)
def load_catalog(path: str | Path | None = None) -> EcosystemCatalog:
    """Load the ecosystem catalog from disk with deterministic caching."""

    resolved = _bundled_catalog_path() if path is None else Path(path).expanduser().resolve()
    return EcosystemCatalog.from_file(resolved)


__all__ = [
    "EcosystemCatalog",
    "UrlTemplates",
    "load_catalog",
]
