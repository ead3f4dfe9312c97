"""
purlkit — engine configuration loader

File: src/purlkit/config.py
Last updated: 2026-10-17

Purpose
- Load engine settings and additional ecosystem rules from a TOML file and
  environment variables.

What should be included in this file
- Precedence logic: env (PURLKIT_) > file > defaults.
- TOML loading via ``tomllib``.
- Translation of ``[purlkit.types.<type>]`` tables into ``RuleDescriptor``
  entries layered over the default rule table.

Functional requirements
- A missing default config file yields defaults; a missing explicit file is
  an error.
- Overriding a built-in type is allowed and logged.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Final

from purlkit.constants import PurlType
from purlkit.ecosystems import default_rule_table
from purlkit.errors import ValidationError
from purlkit.normalizer import normalize_qualifier_key, normalize_type
from purlkit.observability import LoggingConfig
from purlkit.rules import CasePolicy, ComponentPolicy, RuleDescriptor, RuleTable, SubpathPolicy
from purlkit.templates import DownloadUrlKind, RepositoryUrlKind, UrlTemplate

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = "purlkit.toml"
ENV_PREFIX: Final[str] = "PURLKIT_"
ENV_CONFIG_PATH: Final[str] = f"{ENV_PREFIX}CONFIG"
ENV_LOG_LEVEL: Final[str] = f"{ENV_PREFIX}LOG_LEVEL"
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

_ROOT_KEY: Final[str] = "purlkit"
_LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_TYPE_KEYS: Final[frozenset[str]] = frozenset(
    {
        "namespace_case",
        "name_case",
        "version_case",
        "namespace",
        "version",
        "required_qualifiers",
        "forbidden_qualifiers",
        "default_qualifiers",
        "subpath",
        "repository_url",
        "download_url",
    }
)


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or contains invalid values."""


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Effective engine settings."""

    log_level: str = DEFAULT_LOG_LEVEL
    rule_table: RuleTable = field(default_factory=default_rule_table)
    configured_types: tuple[str, ...] = ()
    source_path: Path | None = None

    def logging_config(
        self, *, stream: IO[str] | None = None, log_path: Path | str | None = None
    ) -> LoggingConfig:
        """Logging settings for ``setup_logging`` at the configured level."""

        return LoggingConfig(level=self.log_level, stream=stream, log_path=log_path)


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    base_rules: RuleTable | None = None,
) -> EngineConfig:
    """Load effective config with precedence: env > file > defaults."""

    env_map = dict(os.environ if environ is None else environ)
    explicit = config_path is not None or bool(env_map.get(ENV_CONFIG_PATH, "").strip())
    resolved_path = _resolve_config_path(config_path, env_map)

    payload = _load_toml_file(resolved_path, required=explicit)
    section = _as_table(payload.get(_ROOT_KEY, {}), _ROOT_KEY)
    unknown = sorted(set(section) - {"log_level", "types"})
    if unknown:
        raise ConfigLoadError(f"{_ROOT_KEY}: unknown keys {unknown}")

    log_level = _parse_log_level(
        section.get("log_level", DEFAULT_LOG_LEVEL), f"{_ROOT_KEY}.log_level"
    )
    env_level = env_map.get(ENV_LOG_LEVEL)
    if env_level is not None and env_level.strip():
        log_level = _parse_log_level(env_level, ENV_LOG_LEVEL)

    descriptors: list[RuleDescriptor] = []
    types_table = _as_table(section.get("types", {}), f"{_ROOT_KEY}.types")
    for raw_type in sorted(types_table):
        field_name = f"{_ROOT_KEY}.types.{raw_type}"
        descriptors.append(
            descriptor_from_mapping(raw_type, _as_table(types_table[raw_type], field_name))
        )

    rules = base_rules if base_rules is not None else default_rule_table()
    builtin_types = {member.value for member in PurlType}
    for descriptor in descriptors:
        if descriptor.type in builtin_types:
            logger.warning(
                "configured rules replace a built-in package type",
                extra={"purl_type": descriptor.type, "config_path": str(resolved_path)},
            )
    if descriptors:
        rules = rules.with_descriptors(*descriptors)
        logger.info(
            "loaded package type rules from config",
            extra={
                "config_path": str(resolved_path),
                "purl_types": [descriptor.type for descriptor in descriptors],
            },
        )

    return EngineConfig(
        log_level=log_level,
        rule_table=rules,
        configured_types=tuple(descriptor.type for descriptor in descriptors),
        source_path=resolved_path if resolved_path.is_file() else None,
    )


def descriptor_from_mapping(purl_type: str, table: Mapping[str, Any]) -> RuleDescriptor:
    """Translate one ``[purlkit.types.<type>]`` table into a ``RuleDescriptor``."""

    field_name = f"{_ROOT_KEY}.types.{purl_type}"
    try:
        canonical_type = normalize_type(purl_type)
    except ValidationError as exc:
        raise ConfigLoadError(f"{field_name}: {exc}") from exc

    unknown = sorted(set(table) - _TYPE_KEYS)
    if unknown:
        raise ConfigLoadError(f"{field_name}: unknown keys {unknown}")

    try:
        return RuleDescriptor(
            type=canonical_type,
            namespace_case=CasePolicy(table.get("namespace_case", CasePolicy.PRESERVE)),
            name_case=CasePolicy(table.get("name_case", CasePolicy.PRESERVE)),
            version_case=CasePolicy(table.get("version_case", CasePolicy.PRESERVE)),
            namespace=ComponentPolicy(table.get("namespace", ComponentPolicy.OPTIONAL)),
            version=ComponentPolicy(table.get("version", ComponentPolicy.OPTIONAL)),
            required_qualifiers=_qualifier_keys(
                table.get("required_qualifiers", ()), f"{field_name}.required_qualifiers"
            ),
            forbidden_qualifiers=_qualifier_keys(
                table.get("forbidden_qualifiers", ()), f"{field_name}.forbidden_qualifiers"
            ),
            default_qualifiers=_default_qualifiers(
                table.get("default_qualifiers", {}), f"{field_name}.default_qualifiers"
            ),
            subpath=SubpathPolicy(table.get("subpath", SubpathPolicy.PRESERVE)),
            repository_url=_optional_template(
                table.get("repository_url"), RepositoryUrlKind, f"{field_name}.repository_url"
            ),
            download_url=_optional_template(
                table.get("download_url"), DownloadUrlKind, f"{field_name}.download_url"
            ),
        )
    except ConfigLoadError:
        raise
    except ValueError as exc:
        raise ConfigLoadError(f"{field_name}: {exc}") from exc


# ---------------------------------------------------------------------------
# Internal helper routines
# ---------------------------------------------------------------------------


def _resolve_config_path(config_path: str | Path | None, environ: Mapping[str, str]) -> Path:
    if config_path is not None:
        return Path(config_path).expanduser().resolve()
    env_path = environ.get(ENV_CONFIG_PATH, "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()
    return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    if not path.is_file():
        raise ConfigLoadError(f"config path is not a file: {path}")

    try:
        with path.open("rb") as handle:
            loaded = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    return loaded


def _as_table(value: object, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigLoadError(f"{field_name} must be a table")
    return value


def _parse_log_level(value: object, field_name: str) -> str:
    if not isinstance(value, str) or value.strip().upper() not in _LOG_LEVELS:
        allowed = ", ".join(sorted(_LOG_LEVELS))
        raise ConfigLoadError(f"{field_name} must be one of: {allowed}")
    return value.strip().upper()


def _qualifier_keys(value: object, field_name: str) -> frozenset[str]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigLoadError(f"{field_name} must be an array of strings")
    keys: set[str] = set()
    for item in value:
        try:
            keys.add(normalize_qualifier_key(item))
        except ValidationError as exc:
            raise ConfigLoadError(f"{field_name}: {exc}") from exc
    return frozenset(keys)


def _default_qualifiers(value: object, field_name: str) -> dict[str, str]:
    table = _as_table(value, field_name)
    defaults: dict[str, str] = {}
    for key, item in table.items():
        if not isinstance(item, str) or not item.strip():
            raise ConfigLoadError(f"{field_name}.{key} must be a non-empty string")
        try:
            defaults[normalize_qualifier_key(key)] = item.strip()
        except ValidationError as exc:
            raise ConfigLoadError(f"{field_name}: {exc}") from exc
    return defaults


def _optional_template(
    value: object,
    kinds: type[RepositoryUrlKind] | type[DownloadUrlKind],
    field_name: str,
) -> UrlTemplate | None:
    if value is None:
        return None
    return UrlTemplate.from_mapping(
        _as_table(value, field_name), kinds=kinds, field_name=field_name
    )


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_LOG_LEVEL",
    "ENV_CONFIG_PATH",
    "ENV_LOG_LEVEL",
    "ENV_PREFIX",
    "ConfigLoadError",
    "EngineConfig",
    "descriptor_from_mapping",
    "load_config",
]
