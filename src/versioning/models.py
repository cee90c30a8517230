"""Data models for NuGet versions and version ranges."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Optional, Tuple

import semantic_version


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """A NuGet package version: up to four numeric parts, release labels and metadata.

    Equality and ordering ignore metadata and compare release labels
    case-insensitively.
    """
    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    release_labels: Tuple[str, ...] = ()
    metadata: Optional[str] = None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release_labels)

    def _normalized_labels(self) -> Tuple[str, ...]:
        return tuple(
            str(int(label)) if label.isdigit() else label.lower()
            for label in self.release_labels
        )

    def _prerelease_key(self) -> Optional[semantic_version.Version]:
        if not self.release_labels:
            return None
        return semantic_version.Version(major=0, minor=0, patch=0, prerelease=self._normalized_labels())

    def _key(self):
        return (
            self.major,
            self.minor,
            self.patch,
            self.revision,
            0 if self.release_labels else 1,
            self._prerelease_key(),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "NuGetVersion") -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key()[:5] + (self._normalized_labels(),))

    def to_normalized_string(self) -> str:
        """Render as ``major.minor.patch[.revision][-labels]``; metadata is dropped."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release_labels:
            text += "-" + ".".join(self.release_labels)
        return text

    def __str__(self) -> str:
        return self.to_normalized_string()


@dataclass(frozen=True)
class VersionRange:
    """Normalized representation of a NuGet version range.

    A range with neither bound accepts every version. ``float_pattern``
    holds the original floating notation (``1.*``, ``1.0.0-*``) when the
    range floats; its lower bound is then the lowest version the pattern
    admits.
    """
    min_version: Optional[NuGetVersion] = None
    is_min_inclusive: bool = False
    max_version: Optional[NuGetVersion] = None
    is_max_inclusive: bool = False
    float_pattern: Optional[str] = None
    original: Optional[str] = field(default=None, compare=False)

    @classmethod
    def all(cls) -> "VersionRange":
        """Return the unconstrained range."""
        return cls()

    @property
    def is_unconstrained(self) -> bool:
        return self.min_version is None and self.max_version is None and self.float_pattern is None

    @property
    def is_floating(self) -> bool:
        return self.float_pattern is not None

    def satisfies(self, version: NuGetVersion) -> bool:
        """Return True if ``version`` lies within the range bounds."""
        if self.min_version is not None:
            if self.is_min_inclusive:
                if version < self.min_version:
                    return False
            elif version <= self.min_version:
                return False
        if self.max_version is not None:
            if self.is_max_inclusive:
                if version > self.max_version:
                    return False
            elif version >= self.max_version:
                return False
        return True

    def to_normalized_string(self) -> str:
        if self.float_pattern is not None:
            return f"[{self.float_pattern}, )"
        if self.min_version is None and self.max_version is None:
            return "(, )"
        if (
            self.min_version is not None
            and self.max_version is not None
            and self.min_version == self.max_version
            and self.is_min_inclusive
            and self.is_max_inclusive
        ):
            return f"[{self.min_version}]"
        left = "[" if self.is_min_inclusive and self.min_version is not None else "("
        right = "]" if self.is_max_inclusive and self.max_version is not None else ")"
        low = str(self.min_version) if self.min_version is not None else ""
        high = str(self.max_version) if self.max_version is not None else ""
        return f"{left}{low}, {high}{right}"

    def __str__(self) -> str:
        return self.to_normalized_string()
