"""
purlkit — repository and download URL derivation

File: src/purlkit/url_converter.py
Last updated: 2026-10-17

Purpose
- Derive a source repository location and an artifact download location from
  a canonical ``PackageURL``.

Functional requirements
- Derivation is total: an unsupported type or a missing component yields
  ``None`` rather than an error.
- Templates are data held by the rule table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from purlkit.package_url import PackageURL
from purlkit.rules import RuleTable
from purlkit.templates import DownloadUrlKind, RepositoryUrlKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RepositoryUrl:
    url: str
    type: RepositoryUrlKind


@dataclass(frozen=True, slots=True)
class DownloadUrl:
    url: str
    type: DownloadUrlKind


@dataclass(frozen=True, slots=True)
class PackageUrls:
    repository: RepositoryUrl | None
    download: DownloadUrl | None


class UrlConverter:
    """Applies the URL templates of a rule table to package URLs."""

    __slots__ = ("_rules",)

    def __init__(self, rules: RuleTable | None = None) -> None:
        if rules is None:
            from purlkit.ecosystems import default_rule_table

            rules = default_rule_table()
        self._rules = rules

    def to_repository_url(self, purl: PackageURL) -> RepositoryUrl | None:
        template = self._rules.lookup(purl.type).repository_url
        if template is None:
            logger.debug("no repository url template", extra={"purl_type": purl.type})
            return None
        url = template.render(purl)
        if url is None:
            return None
        return RepositoryUrl(url=url, type=RepositoryUrlKind(template.kind))

    def to_download_url(self, purl: PackageURL) -> DownloadUrl | None:
        template = self._rules.lookup(purl.type).download_url
        if template is None:
            logger.debug("no download url template", extra={"purl_type": purl.type})
            return None
        url = template.render(purl)
        if url is None:
            return None
        return DownloadUrl(url=url, type=DownloadUrlKind(template.kind))

    def get_all_urls(self, purl: PackageURL) -> PackageUrls:
        return PackageUrls(
            repository=self.to_repository_url(purl),
            download=self.to_download_url(purl),
        )

    def supports_repository_url(self, purl_type: str) -> bool:
        return self._rules.lookup(purl_type).repository_url is not None

    def supports_download_url(self, purl_type: str) -> bool:
        return self._rules.lookup(purl_type).download_url is not None


__all__ = [
    "DownloadUrl",
    "PackageUrls",
    "RepositoryUrl",
    "UrlConverter",
]
