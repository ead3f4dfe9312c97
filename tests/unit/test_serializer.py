"""Unit tests for canonical text rendering."""

from __future__ import annotations

from types import MappingProxyType

from purlkit.package_url import PackageURL
from purlkit.rules import PurlParts
from purlkit.serializer import serialize


def test_serialize_minimal() -> None:
    assert serialize(PurlParts("generic", None, "name", None, None, None)) == "pkg:generic/name"


def test_serialize_all_components() -> None:
    parts = PurlParts(
        type="maven",
        namespace="org.apache.commons",
        name="io",
        version="1.3.4",
        qualifiers=MappingProxyType({"type": "jar", "classifier": "sources"}),
        subpath="META-INF/MANIFEST.MF",
    )

    assert serialize(parts) == (
        "pkg:maven/org.apache.commons/io@1.3.4?classifier=sources&type=jar#META-INF/MANIFEST.MF"
    )


def test_serialize_encodes_reserved_characters_per_component() -> None:
    parts = PurlParts(
        type="generic",
        namespace="a b/c",
        name="n@me",
        version="1.0+build",
        qualifiers={"download_url": "https://example.com/x y.tgz"},
        subpath="dir/file#1",
    )

    assert serialize(parts) == (
        "pkg:generic/a%20b/c/n%40me@1.0%2Bbuild"
        "?download_url=https://example.com/x%20y.tgz#dir/file%231"
    )


def test_package_url_uses_serializer() -> None:
    purl = PackageURL(
        "docker", "customer", "dockerimage", "sha256:244fd47e07d10", {"repository_url": "gcr.io"}
    )

    assert str(purl) == (
        "pkg:docker/customer/dockerimage@sha256:244fd47e07d10?repository_url=gcr.io"
    )
    assert serialize(purl) == str(purl)
