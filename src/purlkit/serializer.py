"""Canonical text rendering for package URLs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from purlkit.codec import (
    encode_name,
    encode_namespace,
    encode_qualifier_key,
    encode_qualifier_value,
    encode_subpath,
    encode_version,
)
from purlkit.constants import SCHEME_PREFIX

if TYPE_CHECKING:
    from purlkit.templates import TemplateSource


def serialize(purl: TemplateSource) -> str:
    """Render ``purl`` as ``pkg:type/namespace/name@version?qualifiers#subpath``.

    Qualifiers are emitted sorted by key; absent components are omitted.
    """

    chunks: list[str] = [SCHEME_PREFIX, purl.type, "/"]
    if purl.namespace:
        chunks.append(encode_namespace(purl.namespace))
        chunks.append("/")
    chunks.append(encode_name(purl.name))
    if purl.version:
        chunks.append("@")
        chunks.append(encode_version(purl.version))
    if purl.qualifiers:
        chunks.append("?")
        chunks.append(
            "&".join(
                f"{encode_qualifier_key(key)}={encode_qualifier_value(purl.qualifiers[key])}"
                for key in sorted(purl.qualifiers)
            )
        )
    if purl.subpath:
        chunks.append("#")
        chunks.append(encode_subpath(purl.subpath))
    return "".join(chunks)


__all__ = ["serialize"]
