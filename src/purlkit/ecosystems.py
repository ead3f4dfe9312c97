"""
purlkit — built-in ecosystem rules

File: src/purlkit/ecosystems.py
Last updated: 2026-10-17

Purpose
- Register the canonicalization and validation rules of every supported
  package type and assemble the process-wide default rule table.

What should be included in this file
- One ``RuleDescriptor`` per ``PurlType`` member.
- Hooks for rules that do not fit the declarative policies (npm, mlflow,
  conan, pub, golang).

Functional requirements
- Unlisted behaviors stay permissive; only documented ecosystem rules apply.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Final

from purlkit.catalog import load_catalog
from purlkit.codec import encode_component
from purlkit.constants import PurlQualifierName, PurlType
from purlkit.errors import ValidationError, ValidationErrorKind
from purlkit.rules import (
    CasePolicy,
    ComponentPolicy,
    PurlParts,
    RuleDescriptor,
    RuleTable,
    VersionSplit,
)

_SEMVER_RE: Final[re.Pattern[str]] = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
_PUB_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9_]+$")
_NPM_SPECIAL_CHARS_RE: Final[re.Pattern[str]] = re.compile(r"[~'!()*]")
# encodeURIComponent leaves these unescaped in addition to the unreserved set.
_NPM_URL_SAFE_EXTRA: Final[str] = "!'()*"
NPM_MAX_ID_LENGTH: Final[int] = 214

_LOWER = CasePolicy.LOWERCASE


# ---------------------------------------------------------------------------
# Predicates and transforms
# ---------------------------------------------------------------------------


def is_semver(value: str) -> bool:
    return _SEMVER_RE.match(value) is not None


def golang_version_ok(version: str) -> bool:
    """Go versions starting with ``v`` must be semantic (pseudo-versions included)."""

    if version.startswith("v"):
        return is_semver(version[1:])
    return True


def _underscores_to_dashes(name: str) -> str:
    return name.replace("_", "-")


def _dashes_to_underscores(name: str) -> str:
    return name.replace("-", "_")


# ---------------------------------------------------------------------------
# npm
# ---------------------------------------------------------------------------


def npm_id(parts: PurlParts) -> str:
    if parts.namespace:
        return f"{parts.namespace}/{parts.name}"
    return parts.name


def is_npm_legacy_name(package_id: str) -> bool:
    return package_id in load_catalog().npm_legacy_names


def is_npm_builtin_name(package_id: str) -> bool:
    return package_id.lower() in load_catalog().npm_builtin_names


def _is_url_friendly(value: str) -> bool:
    return encode_component(value, safe=_NPM_URL_SAFE_EXTRA) == value


def _normalize_npm(parts: PurlParts) -> PurlParts:
    # Legacy names may be mixed case.
    if is_npm_legacy_name(npm_id(parts)):
        return parts
    return parts.evolve(name=parts.name.lower())


def _npm_error(
    kind: ValidationErrorKind,
    message: str,
    parts: PurlParts,
    component: str,
) -> ValidationError:
    value = parts.namespace if component == "namespace" else parts.name
    return ValidationError(kind, message, component=component, value=value)


def _validate_npm(parts: PurlParts) -> None:
    name = parts.name
    namespace = parts.namespace
    package_id = npm_id(parts)
    component = "namespace" if namespace else "name"
    kind = ValidationErrorKind.INVALID_NAMESPACE if namespace else ValidationErrorKind.INVALID_NAME

    if package_id.startswith("."):
        raise _npm_error(
            kind, f'npm "{component}" component cannot start with a period', parts, component
        )
    if package_id.startswith("_"):
        raise _npm_error(
            kind, f'npm "{component}" component cannot start with an underscore', parts, component
        )
    if name.strip() != name:
        raise _npm_error(
            ValidationErrorKind.INVALID_NAME,
            'npm "name" component cannot contain leading or trailing spaces',
            parts,
            "name",
        )
    if not _is_url_friendly(name):
        raise _npm_error(
            ValidationErrorKind.INVALID_NAME,
            'npm "name" component can only contain URL-friendly characters',
            parts,
            "name",
        )
    if namespace:
        if namespace.strip() != namespace:
            raise _npm_error(
                ValidationErrorKind.INVALID_NAMESPACE,
                'npm "namespace" component cannot contain leading or trailing spaces',
                parts,
                "namespace",
            )
        if not namespace.startswith("@"):
            raise _npm_error(
                ValidationErrorKind.INVALID_NAMESPACE,
                'npm "namespace" component must start with an "@" character',
                parts,
                "namespace",
            )
        if not _is_url_friendly(namespace[1:]):
            raise _npm_error(
                ValidationErrorKind.INVALID_NAMESPACE,
                'npm "namespace" component can only contain URL-friendly characters',
                parts,
                "namespace",
            )

    lowered_id = package_id.lower()
    if lowered_id in {"node_modules", "favicon.ico"}:
        raise _npm_error(
            kind, f'npm "{component}" component of "{lowered_id}" is not allowed', parts, component
        )

    if is_npm_legacy_name(package_id):
        return
    if len(package_id) > NPM_MAX_ID_LENGTH:
        raise _npm_error(
            ValidationErrorKind.INVALID_NAME,
            'npm "namespace" and "name" components can not collectively be more than '
            f"{NPM_MAX_ID_LENGTH} characters",
            parts,
            "name",
        )
    if lowered_id != package_id:
        raise _npm_error(
            ValidationErrorKind.INVALID_NAME,
            'npm "name" component can not contain capital letters',
            parts,
            "name",
        )
    if _NPM_SPECIAL_CHARS_RE.search(name) is not None:
        raise _npm_error(
            ValidationErrorKind.INVALID_NAME,
            'npm "name" component can not contain special characters ("~\'!()*")',
            parts,
            "name",
        )
    if is_npm_builtin_name(package_id):
        raise _npm_error(
            ValidationErrorKind.INVALID_NAME,
            'npm "name" component can not be a core module name',
            parts,
            "name",
        )


# ---------------------------------------------------------------------------
# Other hooks
# ---------------------------------------------------------------------------


def _normalize_mlflow(parts: PurlParts) -> PurlParts:
    repository_url = (parts.qualifiers or {}).get(PurlQualifierName.REPOSITORY_URL, "")
    if "databricks" in repository_url:
        return parts.evolve(name=parts.name.lower())
    return parts


def _validate_conan(parts: PurlParts) -> None:
    qualifiers = parts.qualifiers or {}
    if not parts.namespace:
        if qualifiers.get("channel"):
            raise ValidationError(
                ValidationErrorKind.MISSING_COMPONENT,
                'conan requires a "namespace" component when a "channel" qualifier is present',
                component="namespace",
            )
    elif not qualifiers:
        raise ValidationError(
            ValidationErrorKind.MISSING_QUALIFIER,
            'conan requires a "qualifiers" component when a namespace is present',
            component="qualifiers",
        )


def _validate_pub(parts: PurlParts) -> None:
    if _PUB_NAME_RE.match(parts.name) is None:
        raise ValidationError(
            ValidationErrorKind.INVALID_NAME,
            'pub "name" component may only contain [a-z0-9_] characters',
            component="name",
            value=parts.name,
        )


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


def _lower_namespace_and_name(purl_type: PurlType) -> RuleDescriptor:
    return RuleDescriptor(type=purl_type, namespace_case=_LOWER, name_case=_LOWER)


def builtin_descriptors() -> tuple[RuleDescriptor, ...]:
    """Descriptors for every ``PurlType`` member, without URL templates."""

    special: dict[str, RuleDescriptor] = {
        descriptor.type: descriptor
        for descriptor in (
            _lower_namespace_and_name(PurlType.ALPM),
            _lower_namespace_and_name(PurlType.APK),
            _lower_namespace_and_name(PurlType.BITBUCKET),
            _lower_namespace_and_name(PurlType.COMPOSER),
            _lower_namespace_and_name(PurlType.DEB),
            _lower_namespace_and_name(PurlType.GITHUB),
            _lower_namespace_and_name(PurlType.GITLAB),
            _lower_namespace_and_name(PurlType.HEX),
            RuleDescriptor(type=PurlType.BITNAMI, name_case=_LOWER),
            RuleDescriptor(type=PurlType.HUGGINGFACE, version_case=_LOWER),
            RuleDescriptor(type=PurlType.LUAROCKS, version_case=_LOWER),
            RuleDescriptor(type=PurlType.QPKG, namespace_case=_LOWER),
            RuleDescriptor(type=PurlType.RPM, namespace_case=_LOWER),
            RuleDescriptor(
                type=PurlType.PYPI,
                namespace_case=_LOWER,
                name_case=_LOWER,
                name_transform=_underscores_to_dashes,
            ),
            RuleDescriptor(
                type=PurlType.PUB,
                name_case=_LOWER,
                name_transform=_dashes_to_underscores,
                validate_hook=_validate_pub,
            ),
            RuleDescriptor(
                type=PurlType.NPM,
                namespace_case=_LOWER,
                version_split=VersionSplit.FIRST,
                normalize_hook=_normalize_npm,
                validate_hook=_validate_npm,
            ),
            RuleDescriptor(type=PurlType.MAVEN, namespace=ComponentPolicy.REQUIRED),
            RuleDescriptor(
                type=PurlType.SWIFT,
                namespace=ComponentPolicy.REQUIRED,
                version=ComponentPolicy.REQUIRED,
            ),
            RuleDescriptor(type=PurlType.CRAN, version=ComponentPolicy.REQUIRED),
            RuleDescriptor(
                type=PurlType.MLFLOW,
                namespace=ComponentPolicy.FORBIDDEN,
                normalize_hook=_normalize_mlflow,
            ),
            RuleDescriptor(
                type=PurlType.OCI,
                name_case=_LOWER,
                namespace=ComponentPolicy.FORBIDDEN,
            ),
            RuleDescriptor(type=PurlType.GOLANG, version_predicate=golang_version_ok),
            RuleDescriptor(type=PurlType.CONAN, validate_hook=_validate_conan),
            RuleDescriptor(type=PurlType.SWID, required_qualifiers=frozenset({"tag_id"})),
        )
    }
    return tuple(
        special.get(member.value, RuleDescriptor(type=member.value)) for member in PurlType
    )


@lru_cache(maxsize=1)
def default_rule_table() -> RuleTable:
    """The process-wide rule table: built-in descriptors plus catalog URL templates."""

    catalog = load_catalog()
    descriptors: list[RuleDescriptor] = []
    for descriptor in builtin_descriptors():
        templates = catalog.templates_for(descriptor.type)
        descriptors.append(
            descriptor.with_templates(
                repository_url=templates.repository,
                download_url=templates.download,
            )
        )
    return RuleTable(descriptors)


__all__ = [
    "NPM_MAX_ID_LENGTH",
    "builtin_descriptors",
    "default_rule_table",
    "golang_version_ok",
    "is_npm_builtin_name",
    "is_npm_legacy_name",
    "is_semver",
    "npm_id",
]
