"""
purlkit — Package URL engine

File: src/purlkit/__init__.py
Last updated: 2026-10-17

Purpose
- Package root. Re-exports the public surface: parsing, canonicalization,
  serialization, building and URL derivation of package URLs.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
- Logging is opt-in: ``setup_logging(load_config().logging_config())``.
"""

from __future__ import annotations

from purlkit.builder import PackageURLBuilder
from purlkit.codec import QueryParser, decode_component, encode_component, split_query
from purlkit.config import ConfigLoadError, EngineConfig, load_config
from purlkit.constants import PurlQualifierName, PurlType
from purlkit.ecosystems import default_rule_table
from purlkit.errors import (
    ParseError,
    ParseErrorKind,
    PurlError,
    ValidationError,
    ValidationErrorKind,
)
from purlkit.normalizer import normalize
from purlkit.observability import LoggingConfig, setup_logging, shutdown_logging
from purlkit.package_url import PackageURL
from purlkit.parser import RawIdentifier, parse
from purlkit.rules import (
    CasePolicy,
    ComponentPolicy,
    DefaultRules,
    KnownRules,
    PurlParts,
    RuleDescriptor,
    RuleTable,
    SubpathPolicy,
    VersionSplit,
)
from purlkit.serializer import serialize
from purlkit.templates import DownloadUrlKind, RepositoryUrlKind, UrlTemplate
from purlkit.url_converter import DownloadUrl, PackageUrls, RepositoryUrl, UrlConverter

__version__ = "0.1.0"

__all__ = [
    "CasePolicy",
    "ComponentPolicy",
    "ConfigLoadError",
    "DefaultRules",
    "DownloadUrl",
    "DownloadUrlKind",
    "EngineConfig",
    "KnownRules",
    "LoggingConfig",
    "PackageURL",
    "PackageURLBuilder",
    "PackageUrls",
    "ParseError",
    "ParseErrorKind",
    "PurlError",
    "PurlParts",
    "PurlQualifierName",
    "PurlType",
    "QueryParser",
    "RawIdentifier",
    "RepositoryUrl",
    "RepositoryUrlKind",
    "RuleDescriptor",
    "RuleTable",
    "SubpathPolicy",
    "UrlConverter",
    "UrlTemplate",
    "ValidationError",
    "ValidationErrorKind",
    "VersionSplit",
    "__version__",
    "decode_component",
    "default_rule_table",
    "encode_component",
    "load_config",
    "normalize",
    "parse",
    "serialize",
    "setup_logging",
    "shutdown_logging",
    "split_query",
]
