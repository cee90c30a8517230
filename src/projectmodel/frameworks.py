"""Target framework parsing and formatting.

Handles the two spellings a project can use: short folder names such as
``net48``, ``net6.0-windows`` or ``netstandard2.0``, and full names such as
``.NETFramework,Version=v4.8,Profile=Client``. Identifiers that are not
recognized are kept verbatim so nothing is lost on the way through.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

NET_FRAMEWORK = ".NETFramework"
NET_CORE_APP = ".NETCoreApp"
NET_STANDARD = ".NETStandard"
NET_CORE = ".NETCore"
NET_PORTABLE = ".NETPortable"
UAP = "UAP"

_SHORT_TO_FULL = {
    "net": NET_FRAMEWORK,
    "netcoreapp": NET_CORE_APP,
    "netstandard": NET_STANDARD,
    "netcore": NET_CORE,
    "uap": UAP,
    "win": "Windows",
    "wp": "WindowsPhone",
    "wpa": "WindowsPhoneApp",
    "monoandroid": "MonoAndroid",
    "xamarinios": "Xamarin.iOS",
}
_FULL_TO_SHORT = {full.lower(): short for short, full in _SHORT_TO_FULL.items()}
# Identifiers whose short names keep dots in the version ("netstandard2.0").
_DOTTED = {NET_CORE_APP, NET_STANDARD, UAP}

_SHORT_RE = re.compile(r"^(?P<id>[A-Za-z.]+?)(?P<ver>[0-9][0-9.]*)?(?:-(?P<suffix>.+))?$")


def _normalize_version(parts: Iterable[int]) -> Tuple[int, ...]:
    values = list(parts)
    while len(values) < 2:
        values.append(0)
    while len(values) > 2 and values[-1] == 0:
        values.pop()
    return tuple(values)


def _parse_version_text(ver: str) -> Tuple[int, ...]:
    if "." in ver:
        return _normalize_version(int(p) for p in ver.split(".") if p != "")
    # "48" -> 4.8, "472" -> 4.7.2; a leading "10" keeps both digits for uap10
    if ver.startswith("10") and len(ver) > 2:
        return _normalize_version([10] + [int(c) for c in ver[2:]])
    if ver == "10":
        return _normalize_version([10])
    return _normalize_version(int(c) for c in ver)


@dataclass(frozen=True)
class TargetFramework:
    """A target framework: identifier, version, and optional profile or platform."""

    framework: str
    version: Tuple[int, ...] = ()
    profile: str = ""
    platform: str = ""

    @property
    def full_name(self) -> str:
        """Render as ``Identifier,Version=vX.Y[,Profile=P]``."""
        if not self.version:
            return self.framework
        text = f"{self.framework},Version=v{'.'.join(str(p) for p in self.version)}"
        if self.profile:
            text += f",Profile={self.profile}"
        return text

    @property
    def short_folder_name(self) -> str:
        if self.framework == NET_PORTABLE:
            return f"portable-{self.profile}" if self.profile else "portable"
        if not self.version:
            return self.framework
        major = self.version[0]
        if self.framework == NET_CORE_APP and major >= 5:
            short = "net" + ".".join(str(p) for p in self.version)
            return f"{short}-{self.platform}" if self.platform else short
        short_id = _FULL_TO_SHORT.get(self.framework.lower())
        if short_id is None:
            return self.full_name
        if self.framework in _DOTTED:
            short = short_id + ".".join(str(p) for p in self.version)
        else:
            short = short_id + "".join(str(p) for p in self.version)
        if self.profile:
            short += f"-{self.profile.lower()}"
        return short

    def __str__(self) -> str:
        return self.short_folder_name


@dataclass(frozen=True)
class FallbackFramework(TargetFramework):
    """A primary framework plus an ordered list of frameworks to fall back to."""

    fallbacks: Tuple[TargetFramework, ...] = ()

    @classmethod
    def wrap(cls, primary: TargetFramework, fallbacks: Iterable[TargetFramework]) -> "FallbackFramework":
        return cls(
            framework=primary.framework,
            version=primary.version,
            profile=primary.profile,
            platform=primary.platform,
            fallbacks=tuple(fallbacks),
        )

    @property
    def primary(self) -> TargetFramework:
        return TargetFramework(self.framework, self.version, self.profile, self.platform)


def parse_framework_name(text: str) -> TargetFramework:
    """Parse a full framework name such as ``.NETFramework,Version=v4.5,Profile=Client``."""
    parts = [p.strip() for p in text.split(",")]
    identifier = parts[0]
    version: Tuple[int, ...] = ()
    profile = ""
    for part in parts[1:]:
        key, _, value = part.partition("=")
        key = key.strip().lower()
        value = value.strip()
        if key == "version":
            try:
                version = _normalize_version(int(p) for p in value.lstrip("vV").split("."))
            except ValueError:
                return TargetFramework(framework=text.strip())
        elif key == "profile":
            profile = value
    if not identifier:
        return TargetFramework(framework=text.strip())
    return TargetFramework(framework=identifier, version=version, profile=profile)


def parse_short_folder_name(text: str) -> TargetFramework:
    """Parse a short folder name such as ``net48`` or ``net6.0-windows``."""
    s = text.strip()
    lowered = s.lower()
    if lowered.startswith("portable-"):
        return TargetFramework(framework=NET_PORTABLE, profile=s[len("portable-"):])
    m = _SHORT_RE.match(lowered)
    if not m or not m.group("ver"):
        return TargetFramework(framework=s)
    short_id = m.group("id")
    full = _SHORT_TO_FULL.get(short_id)
    if full is None:
        return TargetFramework(framework=s)
    ver = m.group("ver")
    try:
        version = _parse_version_text(ver)
    except ValueError:
        return TargetFramework(framework=s)
    suffix = m.group("suffix") or ""
    if short_id == "net" and version[0] >= 5:
        # net5.0 and later are .NETCoreApp; the suffix names an OS platform
        return TargetFramework(framework=NET_CORE_APP, version=version, platform=suffix)
    return TargetFramework(framework=full, version=version, profile=suffix)


def parse_framework(text: Optional[str]) -> Optional[TargetFramework]:
    """Parse either spelling; returns None for blank input."""
    if text is None or not text.strip():
        return None
    s = text.strip()
    if "," in s or s.startswith("."):
        return parse_framework_name(s)
    return parse_short_folder_name(s)


def parse_framework_list(text: Optional[str]) -> Tuple[TargetFramework, ...]:
    """Parse a semicolon-delimited list, skipping empty entries."""
    if not text:
        return ()
    frameworks = []
    for item in text.split(";"):
        framework = parse_framework(item)
        if framework is not None:
            frameworks.append(framework)
    return tuple(frameworks)
