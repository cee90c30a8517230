"""Asset include flags for package and project references.

``IncludeAssets``/``ExcludeAssets``/``PrivateAssets`` metadata values are
semicolon-delimited flag names matched case-insensitively. Unknown names
are ignored.
"""

from __future__ import annotations

import enum
import re
from typing import Optional, Tuple


class LibraryIncludeFlags(enum.Flag):
    """Asset groups a dependency may contribute."""

    NONE = 0
    RUNTIME = enum.auto()
    COMPILE = enum.auto()
    BUILD = enum.auto()
    NATIVE = enum.auto()
    CONTENT_FILES = enum.auto()
    ANALYZERS = enum.auto()
    BUILD_TRANSITIVE = enum.auto()
    ALL = RUNTIME | COMPILE | BUILD | NATIVE | CONTENT_FILES | ANALYZERS | BUILD_TRANSITIVE


DEFAULT_SUPPRESS_PARENT = (
    LibraryIncludeFlags.CONTENT_FILES | LibraryIncludeFlags.ANALYZERS | LibraryIncludeFlags.BUILD
)

_NAMES = {
    "none": LibraryIncludeFlags.NONE,
    "all": LibraryIncludeFlags.ALL,
    "runtime": LibraryIncludeFlags.RUNTIME,
    "compile": LibraryIncludeFlags.COMPILE,
    "build": LibraryIncludeFlags.BUILD,
    "native": LibraryIncludeFlags.NATIVE,
    "contentfiles": LibraryIncludeFlags.CONTENT_FILES,
    "analyzers": LibraryIncludeFlags.ANALYZERS,
    "buildtransitive": LibraryIncludeFlags.BUILD_TRANSITIVE,
}

# Order used when rendering flags back to text.
_ORDERED = [
    ("Runtime", LibraryIncludeFlags.RUNTIME),
    ("Compile", LibraryIncludeFlags.COMPILE),
    ("Build", LibraryIncludeFlags.BUILD),
    ("Native", LibraryIncludeFlags.NATIVE),
    ("ContentFiles", LibraryIncludeFlags.CONTENT_FILES),
    ("Analyzers", LibraryIncludeFlags.ANALYZERS),
    ("BuildTransitive", LibraryIncludeFlags.BUILD_TRANSITIVE),
]


def parse_include_flags(
    text: Optional[str], default: LibraryIncludeFlags = LibraryIncludeFlags.ALL
) -> LibraryIncludeFlags:
    """Parse ``"Compile;Runtime"`` style text; blank input yields ``default``.

    Commas are accepted as separators too, as written in dependency-graph files.
    """
    if text is None or not text.strip():
        return default
    result = LibraryIncludeFlags.NONE
    for token in re.split(r"[;,]", text):
        flag = _NAMES.get(token.strip().lower())
        if flag is not None:
            result |= flag
    return result


def apply_include_flags(
    include_assets: Optional[str],
    exclude_assets: Optional[str],
    private_assets: Optional[str],
) -> Tuple[LibraryIncludeFlags, LibraryIncludeFlags]:
    """Combine the three metadata values into ``(include_type, suppress_parent)``.

    Missing include means everything, missing exclude means nothing, and
    missing private assets means the default suppress-parent set.
    """
    include = parse_include_flags(include_assets, LibraryIncludeFlags.ALL)
    exclude = parse_include_flags(exclude_assets, LibraryIncludeFlags.NONE)
    suppress_parent = parse_include_flags(private_assets, DEFAULT_SUPPRESS_PARENT)
    return include & ~exclude, suppress_parent


def format_include_flags(flags: LibraryIncludeFlags) -> str:
    """Render flags as ``All``, ``None`` or a comma-separated name list."""
    if flags == LibraryIncludeFlags.ALL:
        return "All"
    if not flags:
        return "None"
    return ", ".join(name for name, flag in _ORDERED if flag in flags)
