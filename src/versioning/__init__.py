"""NuGet version and version-range models."""

from .models import NuGetVersion, VersionRange
from .parser import (
    parse_version,
    parse_version_range,
    parse_version_range_or_all,
    try_parse_version,
)

__all__ = [
    "NuGetVersion",
    "VersionRange",
    "parse_version",
    "parse_version_range",
    "parse_version_range_or_all",
    "try_parse_version",
]
