"""Persistent fluent builder for ``PackageURL`` values."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace

from purlkit.constants import PurlType
from purlkit.normalizer import normalize
from purlkit.package_url import PackageURL
from purlkit.parser import RawIdentifier
from purlkit.rules import RuleTable


@dataclass(frozen=True, slots=True)
class PackageURLBuilder:
    """Accumulates components; every setter returns a new builder.

    Nothing is validated until ``build``. ``rules_`` is the table ``build``
    validates against when it is not given one.
    """

    type_: str | None = None
    namespace_: str | None = None
    name_: str | None = None
    version_: str | None = None
    qualifiers_: tuple[tuple[str, str], ...] = ()
    subpath_: str | None = None
    rules_: RuleTable | None = None

    @classmethod
    def create(cls) -> PackageURLBuilder:
        return cls()

    @classmethod
    def from_purl(cls, purl: PackageURL) -> PackageURLBuilder:
        return cls(
            type_=purl.type,
            namespace_=purl.namespace,
            name_=purl.name,
            version_=purl.version,
            qualifiers_=tuple((purl.qualifiers or {}).items()),
            subpath_=purl.subpath,
            rules_=purl.rules,
        )

    @classmethod
    def for_type(cls, purl_type: str, *, rules: RuleTable | None = None) -> PackageURLBuilder:
        """Start a builder for ``purl_type`` seeded with its default qualifiers."""

        table = rules
        if table is None:
            from purlkit.ecosystems import default_rule_table

            table = default_rule_table()
        descriptor = table.lookup(purl_type)
        return cls(
            type_=str(purl_type),
            qualifiers_=tuple(descriptor.default_qualifiers.items()),
            rules_=rules,
        )

    @classmethod
    def npm(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.NPM)

    @classmethod
    def pypi(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.PYPI)

    @classmethod
    def maven(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.MAVEN)

    @classmethod
    def gem(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.GEM)

    @classmethod
    def golang(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.GOLANG)

    @classmethod
    def cargo(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.CARGO)

    @classmethod
    def nuget(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.NUGET)

    @classmethod
    def composer(cls) -> PackageURLBuilder:
        return cls.for_type(PurlType.COMPOSER)

    def type(self, purl_type: str) -> PackageURLBuilder:
        return replace(self, type_=purl_type)

    def namespace(self, namespace: str | None) -> PackageURLBuilder:
        return replace(self, namespace_=namespace)

    def name(self, name: str) -> PackageURLBuilder:
        return replace(self, name_=name)

    def version(self, version: str | None) -> PackageURLBuilder:
        return replace(self, version_=version)

    def qualifier(self, key: str, value: str) -> PackageURLBuilder:
        # Later entries win during normalization.
        return replace(self, qualifiers_=(*self.qualifiers_, (key, value)))

    def qualifiers(self, qualifiers: Mapping[str, str] | None) -> PackageURLBuilder:
        """Replace every accumulated qualifier."""

        return replace(self, qualifiers_=tuple((qualifiers or {}).items()))

    def subpath(self, subpath: str | None) -> PackageURLBuilder:
        return replace(self, subpath_=subpath)

    def build(self, *, rules: RuleTable | None = None) -> PackageURL:
        """Normalize and validate the accumulated components."""

        return normalize(
            RawIdentifier(
                type=self.type_ or "",
                namespace=self.namespace_,
                name=self.name_ or "",
                version=self.version_,
                qualifiers=self.qualifiers_,
                subpath=self.subpath_,
            ),
            rules=rules if rules is not None else self.rules_,
        )


__all__ = ["PackageURLBuilder"]
