"""Well-known type tokens, qualifier names and grammar constants."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Final

SCHEME: Final[str] = "pkg"
SCHEME_PREFIX: Final[str] = f"{SCHEME}:"

# Lowercase canonical form; input is matched case-insensitively.
TYPE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-z.+-][a-z0-9.+-]*$")
QUALIFIER_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-z._+-][a-z0-9._+-]*$")
URL_SCHEME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")


class PurlType(StrEnum):
    """Package types with registered ecosystem rules."""

    ALPM = "alpm"
    APK = "apk"
    BAZEL = "bazel"
    BITBUCKET = "bitbucket"
    BITNAMI = "bitnami"
    CARGO = "cargo"
    COCOAPODS = "cocoapods"
    COMPOSER = "composer"
    CONAN = "conan"
    CONDA = "conda"
    CPAN = "cpan"
    CRAN = "cran"
    DEB = "deb"
    DOCKER = "docker"
    GEM = "gem"
    GENERIC = "generic"
    GITHUB = "github"
    GITLAB = "gitlab"
    GOLANG = "golang"
    HACKAGE = "hackage"
    HEX = "hex"
    HUGGINGFACE = "huggingface"
    JULIA = "julia"
    LUAROCKS = "luarocks"
    MAVEN = "maven"
    MLFLOW = "mlflow"
    NPM = "npm"
    NUGET = "nuget"
    OCI = "oci"
    OPAM = "opam"
    OTP = "otp"
    PUB = "pub"
    PYPI = "pypi"
    QPKG = "qpkg"
    RPM = "rpm"
    SWID = "swid"
    SWIFT = "swift"
    VSCODE_EXTENSION = "vscode-extension"
    YOCTO = "yocto"


class PurlQualifierName(StrEnum):
    """Qualifier keys with a meaning shared by every type."""

    REPOSITORY_URL = "repository_url"
    DOWNLOAD_URL = "download_url"
    VCS_URL = "vcs_url"
    FILE_NAME = "file_name"
    CHECKSUM = "checksum"


__all__ = [
    "QUALIFIER_KEY_PATTERN",
    "SCHEME",
    "SCHEME_PREFIX",
    "TYPE_PATTERN",
    "URL_SCHEME_PATTERN",
    "PurlQualifierName",
    "PurlType",
]
