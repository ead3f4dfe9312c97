"""
purlkit — unit tests for canonicalization and rule checks

File: tests/unit/test_normalizer.py
Last updated: 2026-10-17

Purpose
- Validate structural normalization and the generic rule checks driven by
  descriptors (presence policies, qualifier sets, version predicates,
  subpath policy).

Functional requirements
- Offline only.
"""

from __future__ import annotations

import logging

import pytest

from purlkit.errors import ValidationError, ValidationErrorKind
from purlkit.normalizer import (
    normalize,
    normalize_parts,
    normalize_path,
    normalize_qualifier_key,
    normalize_subpath,
    normalize_type,
)
from purlkit.package_url import PackageURL
from purlkit.parser import RawIdentifier
from purlkit.rules import ComponentPolicy, RuleDescriptor, RuleTable, SubpathPolicy


def _acme_table() -> RuleTable:
    return RuleTable(
        [
            RuleDescriptor(
                type="acme",
                version=ComponentPolicy.REQUIRED,
                required_qualifiers=frozenset({"arch"}),
                forbidden_qualifiers=frozenset({"checksum"}),
                default_qualifiers={"channel": "stable"},
                subpath=SubpathPolicy.FORBID,
                version_predicate=str.isdigit,
            )
        ]
    )


def test_normalize_type_lowercases_and_trims() -> None:
    assert normalize_type("  NPM ") == "npm"
    assert normalize_type("vscode-extension") == "vscode-extension"
    assert normalize_type("c++") == "c++"


@pytest.mark.parametrize("value", ["9type", "ty pe", "ty/pe", "ty%70e"])
def test_normalize_type_rejects_invalid_tokens(value: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_type(value)

    assert excinfo.value.kind is ValidationErrorKind.INVALID_TYPE


def test_normalize_type_requires_value() -> None:
    with pytest.raises(ValidationError, match='"type" is a required component') as excinfo:
        normalize_type("  ")

    assert excinfo.value.kind is ValidationErrorKind.MISSING_COMPONENT


def test_normalize_path_collapses_slashes() -> None:
    assert normalize_path("//a//b/") == "a/b"
    assert normalize_path("///") is None
    assert normalize_path(None) is None


def test_normalize_subpath_strips_relative_segments() -> None:
    assert normalize_subpath("/a/./b/../c/") == "a/b/c"
    assert normalize_subpath("../../etc/passwd") == "etc/passwd"
    assert normalize_subpath("./..") is None


def test_normalize_qualifier_key_validates_characters() -> None:
    assert normalize_qualifier_key("Repository_URL") == "repository_url"
    for bad in ("1abc", "a b", "a=b", ""):
        with pytest.raises(ValidationError) as excinfo:
            normalize_qualifier_key(bad)
        assert excinfo.value.kind is ValidationErrorKind.INVALID_QUALIFIER_KEY


def test_normalize_parts_trims_and_drops_empty_values() -> None:
    parts = normalize_parts(
        "Generic",
        "ns",
        "  name ",
        "  ",
        [("Arch", " x86 "), ("empty", ""), ("dup", "1"), ("DUP", "2")],
        "/",
    )

    assert parts.type == "generic"
    assert parts.name == "name"
    assert parts.version is None
    assert dict(parts.qualifiers or {}) == {"arch": "x86", "dup": "2"}
    assert parts.subpath is None


def test_normalize_parts_requires_name() -> None:
    with pytest.raises(ValidationError, match='"name" is a required component') as excinfo:
        normalize_parts("generic", None, "   ")

    assert excinfo.value.kind is ValidationErrorKind.MISSING_COMPONENT


def test_normalize_parts_rejects_non_string_components() -> None:
    with pytest.raises(TypeError, match="version must be a string"):
        normalize_parts("generic", None, "name", 1)  # type: ignore[arg-type]


def test_normalize_builds_package_url_from_raw_identifier() -> None:
    purl = normalize(RawIdentifier(type="PyPI", namespace=None, name="Django_Rest", version="3.0"))

    assert isinstance(purl, PackageURL)
    assert purl.to_string() == "pkg:pypi/django-rest@3.0"


def test_unknown_type_uses_permissive_rules_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="purlkit.normalizer")

    parts = normalize_parts("unknown-eco", "NS", "Foo", "1")

    assert (parts.namespace, parts.name) == ("NS", "Foo")
    assert any("permissive rules" in record.getMessage() for record in caplog.records)


def test_default_qualifiers_are_injected_without_overriding() -> None:
    table = _acme_table()

    injected = normalize_parts("acme", None, "x", "1", {"arch": "arm"}, rules=table)
    explicit = normalize_parts(
        "acme", None, "x", "1", {"arch": "arm", "channel": "beta"}, rules=table
    )

    assert dict(injected.qualifiers or {}) == {"arch": "arm", "channel": "stable"}
    assert dict(explicit.qualifiers or {})["channel"] == "beta"


def test_required_and_forbidden_qualifiers_are_enforced() -> None:
    table = _acme_table()

    with pytest.raises(ValidationError) as missing:
        normalize_parts("acme", None, "x", "1", rules=table)
    with pytest.raises(ValidationError) as forbidden:
        normalize_parts("acme", None, "x", "1", {"arch": "arm", "checksum": "a"}, rules=table)

    assert missing.value.kind is ValidationErrorKind.MISSING_QUALIFIER
    assert missing.value.value == "arch"
    assert forbidden.value.kind is ValidationErrorKind.FORBIDDEN_QUALIFIER
    assert forbidden.value.value == "checksum"


def test_version_predicate_and_presence_are_enforced() -> None:
    table = _acme_table()

    with pytest.raises(ValidationError) as invalid:
        normalize_parts("acme", None, "x", "1.0", {"arch": "arm"}, rules=table)
    with pytest.raises(ValidationError) as absent:
        normalize_parts("acme", None, "x", None, {"arch": "arm"}, rules=table)

    assert invalid.value.kind is ValidationErrorKind.INVALID_VERSION
    assert absent.value.kind is ValidationErrorKind.MISSING_COMPONENT
    assert absent.value.component == "version"


def test_subpath_policy_forbid() -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_parts("acme", None, "x", "1", {"arch": "arm"}, "lib", rules=_acme_table())

    assert excinfo.value.kind is ValidationErrorKind.SUBPATH_NOT_ALLOWED


def test_normalization_is_idempotent() -> None:
    first = normalize_parts("NPM", "@Babel", "Core", " 7.0.0 ", {"B": "2", "a": "1"}, "./lib/")
    second = normalize_parts(
        first.type, first.namespace, first.name, first.version, first.qualifiers, first.subpath
    )

    assert first == second
