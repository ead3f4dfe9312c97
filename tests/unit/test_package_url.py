"""Unit tests for the PackageURL value object."""

from __future__ import annotations

import dataclasses

import pytest

from purlkit.errors import PurlError, ValidationError, ValidationErrorKind
from purlkit.package_url import PackageURL
from purlkit.rules import RuleDescriptor, RuleTable, SubpathPolicy


def test_from_string_normalizes_components() -> None:
    purl = PackageURL.from_string("pkg:NPM/%40Babel/Core@7.0.0")

    assert purl.type == "npm"
    assert purl.namespace == "@babel"
    assert purl.name == "core"
    assert purl.version == "7.0.0"
    assert purl.qualifiers is None
    assert purl.subpath is None


def test_constructor_serializes_scoped_namespace() -> None:
    purl = PackageURL("npm", "@babel", "runtime", "7.18.6", None, "helpers/typeof.js")

    assert str(purl) == "pkg:npm/%40babel/runtime@7.18.6#helpers/typeof.js"
    assert purl.to_string() == str(purl)


def test_qualifier_order_does_not_matter() -> None:
    first = PackageURL.from_string("pkg:npm/x@1?b=2&a=1")
    second = PackageURL.from_string("pkg:npm/x@1?a=1&b=2")

    assert first == second
    assert str(first) == "pkg:npm/x@1?a=1&b=2"
    assert hash(first) == hash(second)
    assert len({first, second}) == 1


def test_qualifiers_are_read_only_and_empty_values_dropped() -> None:
    purl = PackageURL.from_string("pkg:generic/x?a=1&a=2&empty=")

    assert purl.qualifiers == {"a": "2"}
    with pytest.raises(TypeError):
        purl.qualifiers["b"] = "3"  # type: ignore[index]
    assert PackageURL.from_string("pkg:type/name?key=").qualifiers is None


def test_subpath_traversal_segments_are_removed() -> None:
    purl = PackageURL.from_string("pkg:generic/name#../../etc/passwd")

    assert purl.subpath == "etc/passwd"
    assert purl.subpath_segments == ("etc", "passwd")


def test_namespace_segments_property() -> None:
    purl = PackageURL("type", "namespace1/namespace2", "na/me")

    assert purl.namespace_segments == ("namespace1", "namespace2")
    assert str(purl) == "pkg:type/namespace1/namespace2/na%2Fme"
    assert PackageURL("generic", None, "x").namespace_segments == ()


def test_instances_are_immutable() -> None:
    purl = PackageURL("generic", None, "x")

    with pytest.raises(dataclasses.FrozenInstanceError):
        purl.name = "y"  # type: ignore[misc]


def test_replace_returns_new_validated_instance() -> None:
    purl = PackageURL.from_string("pkg:pypi/django@1.11.1")

    updated = purl.replace(version="2.0", name="Django_Filter")

    assert purl.version == "1.11.1"
    assert str(updated) == "pkg:pypi/django-filter@2.0"
    with pytest.raises(ValidationError):
        purl.replace(name=" ")


def test_replace_keeps_the_rule_table_the_instance_was_built_with() -> None:
    table = RuleTable([RuleDescriptor(type="acme", subpath=SubpathPolicy.FORBID)])
    purl = PackageURL.from_string("pkg:acme/tool@1", rules=table)

    with pytest.raises(ValidationError) as excinfo:
        purl.replace(subpath="etc")

    assert excinfo.value.kind is ValidationErrorKind.SUBPATH_NOT_ALLOWED
    assert purl.replace(version="2").rules is table
    assert str(purl.replace(subpath="etc", rules=None)) == "pkg:acme/tool@1#etc"


def test_rule_table_is_ignored_by_equality_and_hash() -> None:
    table = RuleTable([RuleDescriptor(type="acme")])

    custom = PackageURL.from_string("pkg:acme/tool@1", rules=table)
    default = PackageURL.from_string("pkg:acme/tool@1")

    assert custom == default
    assert hash(custom) == hash(default)
    assert "rules" not in repr(custom)


def test_dict_round_trip() -> None:
    purl = PackageURL.from_string("pkg:deb/debian/curl@7.50.3-1?arch=i386&distro=jessie")

    payload = purl.to_dict()

    assert payload == {
        "type": "deb",
        "namespace": "debian",
        "name": "curl",
        "version": "7.50.3-1",
        "qualifiers": {"arch": "i386", "distro": "jessie"},
        "subpath": None,
    }
    assert PackageURL.from_dict(payload) == purl


def test_unknown_type_is_accepted() -> None:
    purl = PackageURL.from_string("pkg:unknown-eco/foo@1")

    assert str(purl) == "pkg:unknown-eco/foo@1"


def test_missing_name_surfaces_as_purl_error() -> None:
    with pytest.raises(PurlError, match='"name" is a required component'):
        PackageURL.from_string("pkg:npm")


def test_custom_rule_table_applies_to_construction() -> None:
    table = RuleTable([RuleDescriptor(type="acme", forbidden_qualifiers=frozenset({"checksum"}))])

    with pytest.raises(ValidationError) as excinfo:
        PackageURL.from_string("pkg:acme/x?checksum=sha1:abc", rules=table)

    assert excinfo.value.kind is ValidationErrorKind.FORBIDDEN_QUALIFIER
    assert PackageURL.from_string("pkg:acme/x?checksum=sha1:abc").qualifiers == {
        "checksum": "sha1:abc"
    }


def test_error_messages_use_standard_prefix() -> None:
    with pytest.raises(ValidationError) as excinfo:
        PackageURL("maven", None, "commons-lang", "2.6")

    assert str(excinfo.value) == 'Invalid purl: maven requires a "namespace" component'
