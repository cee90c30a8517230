"""Parsing utilities for NuGet versions and version ranges."""

import re
from typing import Optional

from .models import NuGetVersion, VersionRange

_VERSION_RE = re.compile(
    r"^(?P<nums>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<labels>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<meta>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def parse_version(text: str) -> NuGetVersion:
    """Parse a NuGet version string such as ``1.0``, ``2.1.0.4`` or ``3.0.0-beta.2+sha``.

    Raises:
        ValueError: If the text is not a valid version.
    """
    if text is None:
        raise ValueError("Version string is required")
    s = text.strip()
    m = _VERSION_RE.match(s)
    if not m:
        raise ValueError(f"Invalid version string '{text}'")
    parts = [int(p) for p in m.group("nums").split(".")]
    parts += [0] * (4 - len(parts))
    labels = tuple(m.group("labels").split(".")) if m.group("labels") else ()
    return NuGetVersion(
        major=parts[0],
        minor=parts[1],
        patch=parts[2],
        revision=parts[3],
        release_labels=labels,
        metadata=m.group("meta"),
    )


def try_parse_version(text: Optional[str]) -> Optional[NuGetVersion]:
    """Parse a version, returning None instead of raising."""
    if not text:
        return None
    try:
        return parse_version(text)
    except ValueError:
        return None


def _parse_floating(s: str) -> VersionRange:
    """Parse floating notation: ``*``, ``1.*``, ``1.2.*``, ``1.2.3-*``, ``1.2.3-beta*``."""
    if s == "*":
        # a bare wildcard admits everything
        return VersionRange(original=s)
    if "-" in s:
        core, label = s.split("-", 1)
        if not label.endswith("*") or "*" in label[:-1] or "*" in core:
            raise ValueError(f"Invalid floating range '{s}'")
        prefix = label[:-1].rstrip(".") or "0"
        low = parse_version(f"{core}-{prefix}")
    else:
        if not s.endswith(".*") or "*" in s[:-2]:
            raise ValueError(f"Invalid floating range '{s}'")
        low = parse_version(s[:-2])
    return VersionRange(min_version=low, is_min_inclusive=True, float_pattern=s, original=s)


def parse_version_range(text: Optional[str]) -> VersionRange:
    """Parse NuGet range notation into a VersionRange.

    Accepted forms:
      - ``""``                  -> all versions
      - ``1.0``                 -> ``[1.0.0, )``
      - ``[1.0]``               -> exactly 1.0.0
      - ``[1.0, 2.0)`` etc.     -> interval notation, either bound optional
      - ``*``, ``1.*``, ``1.0.0-*`` -> floating

    Raises:
        ValueError: If the text cannot be parsed.
    """
    s = (text or "").strip()
    if not s:
        return VersionRange.all()

    if "*" in s and s[0] not in "[(":
        return _parse_floating(s)

    if s[0] not in "[(":
        return VersionRange(
            min_version=parse_version(s), is_min_inclusive=True, original=s
        )

    if len(s) < 3 or s[-1] not in "])":
        raise ValueError(f"Invalid version range '{text}'")

    min_inclusive = s[0] == "["
    max_inclusive = s[-1] == "]"
    inner = s[1:-1]

    if "," not in inner:
        if not (min_inclusive and max_inclusive):
            raise ValueError(f"Invalid version range '{text}'")
        exact = parse_version(inner)
        return VersionRange(
            min_version=exact,
            is_min_inclusive=True,
            max_version=exact,
            is_max_inclusive=True,
            original=s,
        )

    left, _, right = inner.partition(",")
    if "," in right:
        raise ValueError(f"Invalid version range '{text}'")
    if "*" in left and min_inclusive and not right.strip():
        return _parse_floating(left.strip())
    low = parse_version(left) if left.strip() else None
    high = parse_version(right) if right.strip() else None

    if low is not None and high is not None:
        if high < low:
            raise ValueError(f"Invalid version range '{text}': upper bound below lower bound")
        if high == low and not (min_inclusive and max_inclusive):
            raise ValueError(f"Invalid version range '{text}': empty interval")

    return VersionRange(
        min_version=low,
        is_min_inclusive=min_inclusive and low is not None,
        max_version=high,
        is_max_inclusive=max_inclusive and high is not None,
        original=s,
    )


def parse_version_range_or_all(text: Optional[str]) -> VersionRange:
    """Parse a range, falling back to the unconstrained range on bad input."""
    try:
        return parse_version_range(text)
    except ValueError:
        return VersionRange.all()
