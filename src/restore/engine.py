"""Interface of the external resolution engine and its result types."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from projectmodel.frameworks import TargetFramework
from projectmodel.models import DependencyGraphSpec


@dataclass(frozen=True)
class CompatibilityCheckResult:
    """Whether the resolved packages are compatible with one target framework."""

    framework: TargetFramework
    success: bool


@dataclass(frozen=True)
class ProjectRestoreResult:
    """Outcome of resolving one restore root.

    ``lock_file`` is whatever the engine produces for the resolved graph;
    it is handed back to the caller untouched.
    """

    project_unique_name: str
    success: bool
    compatibility_results: Tuple[CompatibilityCheckResult, ...] = ()
    lock_file: Any = None

    def failed_frameworks(self) -> List[TargetFramework]:
        """Frameworks with an unsuccessful check, distinct, in result order."""
        seen = set()
        failed: List[TargetFramework] = []
        for check in self.compatibility_results:
            key = check.framework.short_folder_name
            if not check.success and key not in seen:
                seen.add(key)
                failed.append(check.framework)
        return failed


@dataclass
class RestoreRequest:
    """A graph to resolve plus the policy for this resolution pass."""

    dg_spec: DependencyGraphSpec
    sources: List[str] = field(default_factory=list)
    preview: bool = True
    throttle: Optional[asyncio.Semaphore] = None
    no_cache: bool = False
    ignore_failed_sources: bool = True


class ResolutionEngine:
    """Base class for resolution engines.

    ``restore`` resolves every restore root of ``request.dg_spec`` and
    returns one result per root. In preview mode nothing may be written to
    disk. When ``request.throttle`` is set, network requests must be made
    while holding it.
    """

    async def restore(self, request: RestoreRequest) -> List[ProjectRestoreResult]:
        raise NotImplementedError
