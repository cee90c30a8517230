"""Dependency edits applied to a PackageSpec.

These functions modify the spec they are given. Callers pass a clone,
never a spec that is shared with a dependency graph.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from versioning import VersionRange

from .frameworks import TargetFramework
from .models import LibraryDependency, PackageSpec, TargetFrameworkInfo

logger = logging.getLogger(__name__)


def _select_frameworks(
    spec: PackageSpec, frameworks: Optional[Iterable[TargetFramework]]
) -> List[TargetFrameworkInfo]:
    if frameworks is None:
        return list(spec.target_frameworks)
    wanted = {fw.short_folder_name for fw in frameworks}
    return [info for info in spec.target_frameworks if info.framework.short_folder_name in wanted]


def has_dependency(spec: PackageSpec, name: str) -> bool:
    """Return True if ``name`` is declared anywhere in the spec."""
    return any(dep.matches(name) for dep in spec.iter_dependencies())


def add_or_update_dependency(
    spec: PackageSpec,
    name: str,
    version_range: VersionRange,
    frameworks: Optional[Iterable[TargetFramework]] = None,
) -> None:
    """Add a package dependency, or update the range of an existing one.

    A dependency declared framework-independently is updated in place.
    Otherwise every selected framework (all of them when ``frameworks`` is
    None) gets the dependency updated if present or appended if not.
    """
    top_level = [dep for dep in spec.dependencies if dep.matches(name)]
    if top_level:
        for dep in top_level:
            dep.version_range = version_range
        logger.debug("Updated framework-independent dependency %s to %s", name, version_range)
        return

    for info in _select_frameworks(spec, frameworks):
        existing = [dep for dep in info.dependencies if dep.matches(name)]
        if existing:
            for dep in existing:
                dep.version_range = version_range
        else:
            info.dependencies.append(LibraryDependency(name=name, version_range=version_range))
        logger.debug("Set %s %s for %s", name, version_range, info.framework)


def remove_dependency(spec: PackageSpec, name: str) -> bool:
    """Remove every declaration of ``name``; returns True if anything was removed."""
    removed = False
    kept = [dep for dep in spec.dependencies if not dep.matches(name)]
    if len(kept) != len(spec.dependencies):
        spec.dependencies[:] = kept
        removed = True
    for info in spec.target_frameworks:
        kept = [dep for dep in info.dependencies if not dep.matches(name)]
        if len(kept) != len(info.dependencies):
            info.dependencies[:] = kept
            removed = True
    return removed
