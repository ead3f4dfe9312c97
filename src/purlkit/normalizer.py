"""
purlkit — canonicalization and validation

File: src/purlkit/normalizer.py
Last updated: 2026-10-17

Purpose
- Turn raw components into canonical ones and enforce the per-type rules of
  the rule table.

Functional requirements
- Normalization is idempotent.
- Failures raise ``ValidationError``; parse failures never originate here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from purlkit.constants import QUALIFIER_KEY_PATTERN, TYPE_PATTERN
from purlkit.errors import ValidationError, ValidationErrorKind
from purlkit.rules import (
    CasePolicy,
    ComponentPolicy,
    DefaultRules,
    PurlParts,
    RuleDescriptor,
    RuleTable,
    SubpathPolicy,
)

if TYPE_CHECKING:
    from purlkit.package_url import PackageURL
    from purlkit.parser import RawIdentifier

logger = logging.getLogger(__name__)

QualifierInput = Mapping[str, str] | Iterable[tuple[str, str]] | None


def normalize(raw: RawIdentifier, *, rules: RuleTable | None = None) -> PackageURL:
    """Canonicalize and validate a parsed identifier."""

    from purlkit.package_url import PackageURL

    return PackageURL(
        raw.type,
        raw.namespace,
        raw.name,
        raw.version,
        raw.qualifiers,
        raw.subpath,
        rules=rules,
    )


def normalize_parts(
    purl_type: str,
    namespace: str | None,
    name: str,
    version: str | None = None,
    qualifiers: QualifierInput = None,
    subpath: str | None = None,
    *,
    rules: RuleTable | None = None,
) -> PurlParts:
    """Return canonical components, raising ``ValidationError`` on rule violations."""

    if rules is None:
        from purlkit.ecosystems import default_rule_table

        rules = default_rule_table()

    canonical_type = normalize_type(purl_type)
    resolution = rules.resolve(canonical_type)
    if isinstance(resolution, DefaultRules):
        logger.debug(
            "unregistered package type, using permissive rules",
            extra={"purl_type": canonical_type},
        )
    descriptor = resolution.descriptor

    namespace = normalize_path(_optional_str(namespace, "namespace"))
    version = _trimmed_or_none(_optional_str(version, "version"))
    parts = PurlParts(
        type=canonical_type,
        namespace=_apply_case(namespace, descriptor.namespace_case),
        name=_normalize_name(name, descriptor),
        version=_apply_case(version, descriptor.version_case),
        qualifiers=_normalize_qualifiers(qualifiers, descriptor),
        subpath=normalize_subpath(_optional_str(subpath, "subpath")),
    )
    if descriptor.normalize_hook is not None:
        parts = descriptor.normalize_hook(parts)
    _check(parts, descriptor)
    return parts


# ---------------------------------------------------------------------------
# Component normalization
# ---------------------------------------------------------------------------


def normalize_type(purl_type: object) -> str:
    if not isinstance(purl_type, str) or not purl_type.strip():
        raise ValidationError(
            ValidationErrorKind.MISSING_COMPONENT,
            '"type" is a required component',
            component="type",
        )
    canonical = purl_type.strip().lower()
    if canonical[0].isdigit():
        raise ValidationError(
            ValidationErrorKind.INVALID_TYPE,
            f'type "{canonical}" cannot start with a number',
            component="type",
            value=purl_type,
        )
    if TYPE_PATTERN.match(canonical) is None:
        raise ValidationError(
            ValidationErrorKind.INVALID_TYPE,
            f'type "{canonical}" contains an illegal character',
            component="type",
            value=purl_type,
        )
    return canonical


def normalize_path(value: str | None) -> str | None:
    """Collapse repeated slashes and strip leading and trailing ones."""

    if value is None:
        return None
    segments = [segment for segment in value.split("/") if segment]
    return "/".join(segments) or None


def normalize_subpath(value: str | None) -> str | None:
    """Like ``normalize_path`` but also drops blank, ``.`` and ``..`` segments."""

    if value is None:
        return None
    segments = [
        segment
        for segment in value.split("/")
        if segment.strip() and segment not in {".", ".."}
    ]
    return "/".join(segments) or None


def normalize_qualifier_key(key: object) -> str:
    if not isinstance(key, str):
        raise ValidationError(
            ValidationErrorKind.INVALID_QUALIFIER_KEY,
            "qualifier keys must be strings",
            component="qualifiers",
        )
    canonical = key.strip().lower()
    if not canonical:
        raise ValidationError(
            ValidationErrorKind.INVALID_QUALIFIER_KEY,
            "qualifier key must not be empty",
            component="qualifiers",
            value=key,
        )
    if canonical[0].isdigit():
        raise ValidationError(
            ValidationErrorKind.INVALID_QUALIFIER_KEY,
            f'qualifier "{canonical}" cannot start with a number',
            component="qualifiers",
            value=key,
        )
    if QUALIFIER_KEY_PATTERN.match(canonical) is None:
        raise ValidationError(
            ValidationErrorKind.INVALID_QUALIFIER_KEY,
            f'qualifier "{canonical}" contains an illegal character',
            component="qualifiers",
            value=key,
        )
    return canonical


def _optional_str(value: object, component: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise TypeError(f"{component} must be a string or None, got {type(value).__name__}")


def _trimmed_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _apply_case(value: str | None, policy: CasePolicy) -> str | None:
    if value is None or policy is CasePolicy.PRESERVE:
        return value
    return value.lower()


def _normalize_name(name: object, descriptor: RuleDescriptor) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(
            ValidationErrorKind.MISSING_COMPONENT,
            '"name" is a required component',
            component="name",
        )
    canonical = name.strip()
    if descriptor.name_case is CasePolicy.LOWERCASE:
        canonical = canonical.lower()
    if descriptor.name_transform is not None:
        canonical = descriptor.name_transform(canonical)
    return canonical


def _iter_qualifier_pairs(qualifiers: QualifierInput) -> Iterable[tuple[object, object]]:
    if qualifiers is None:
        return ()
    if isinstance(qualifiers, Mapping):
        return qualifiers.items()
    return qualifiers


def _normalize_qualifiers(
    qualifiers: QualifierInput,
    descriptor: RuleDescriptor,
) -> Mapping[str, str] | None:
    result: dict[str, str] = {}
    for key, value in _iter_qualifier_pairs(qualifiers):
        canonical_key = normalize_qualifier_key(key)
        if value is None:
            result.pop(canonical_key, None)
            continue
        if not isinstance(value, str):
            raise TypeError(
                f"qualifier {canonical_key!r} must be a string, got {type(value).__name__}"
            )
        canonical_value = value.strip()
        if canonical_value:
            result[canonical_key] = canonical_value
        else:
            # An empty value is the same as an absent key; later duplicates win.
            result.pop(canonical_key, None)
    for key, value in descriptor.default_qualifiers.items():
        result.setdefault(key, value)
    if not result:
        return None
    return MappingProxyType(dict(sorted(result.items())))


# ---------------------------------------------------------------------------
# Rule checks
# ---------------------------------------------------------------------------


def _check(parts: PurlParts, descriptor: RuleDescriptor) -> None:
    _check_presence(descriptor.type, "namespace", parts.namespace, descriptor.namespace)
    _check_presence(descriptor.type, "version", parts.version, descriptor.version)

    keys = set(parts.qualifiers or {})
    forbidden = sorted(keys & descriptor.forbidden_qualifiers)
    if forbidden:
        raise ValidationError(
            ValidationErrorKind.FORBIDDEN_QUALIFIER,
            f'{descriptor.type} does not allow the "{forbidden[0]}" qualifier',
            component="qualifiers",
            value=forbidden[0],
        )
    missing = sorted(descriptor.required_qualifiers - keys)
    if missing:
        raise ValidationError(
            ValidationErrorKind.MISSING_QUALIFIER,
            f'{descriptor.type} requires a "{missing[0]}" qualifier',
            component="qualifiers",
            value=missing[0],
        )

    if parts.version is not None and not descriptor.accepts_version(parts.version):
        raise ValidationError(
            ValidationErrorKind.INVALID_VERSION,
            f'{descriptor.type} "version" component "{parts.version}" is not valid',
            component="version",
            value=parts.version,
        )

    if parts.subpath is not None and descriptor.subpath is SubpathPolicy.FORBID:
        raise ValidationError(
            ValidationErrorKind.SUBPATH_NOT_ALLOWED,
            f'{descriptor.type} does not allow a "subpath" component',
            component="subpath",
            value=parts.subpath,
        )

    if descriptor.validate_hook is not None:
        descriptor.validate_hook(parts)


def _check_presence(
    purl_type: str,
    component: str,
    value: str | None,
    policy: ComponentPolicy,
) -> None:
    if policy is ComponentPolicy.REQUIRED and not value:
        raise ValidationError(
            ValidationErrorKind.MISSING_COMPONENT,
            f'{purl_type} requires a "{component}" component',
            component=component,
        )
    if policy is ComponentPolicy.FORBIDDEN and value:
        raise ValidationError(
            ValidationErrorKind.FORBIDDEN_COMPONENT,
            f'{purl_type} "{component}" component must be empty',
            component=component,
            value=value,
        )


__all__ = [
    "QualifierInput",
    "normalize",
    "normalize_parts",
    "normalize_path",
    "normalize_qualifier_key",
    "normalize_subpath",
    "normalize_type",
]
