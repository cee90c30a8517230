"""Restore preview for a single project.

The orchestrator never edits the spec held by the graph. It restores the
unmodified graph when no baseline is available, applies the requested
actions to a clone, restores the mutated graph and reads the per-framework
compatibility results. A single package add that fails on some frameworks
only is retried once, restricted to the frameworks that succeeded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from common.errors import DgPreviewError
from common.logging_utils import Timer, extra_context, is_debug_enabled
from projectmodel.frameworks import TargetFramework
from projectmodel.models import DependencyGraphSpec, PackageSpec
from projectmodel.operations import add_or_update_dependency, has_dependency, remove_dependency
from settings import PreviewSettings

from .actions import (
    ActionType,
    FrameworkPartition,
    InstallationDecision,
    PackageAction,
    build_installation_decision,
    consulted_sources,
)
from .engine import ProjectRestoreResult, ResolutionEngine, RestoreRequest
from .msbuild import derive_dependency_graph

logger = logging.getLogger(__name__)


def apply_actions(spec: PackageSpec, actions: Sequence[PackageAction]) -> None:
    """Apply ``actions`` in order to ``spec``, which must be a clone."""
    for action in actions:
        if action.action_type is ActionType.UNINSTALL:
            if not remove_dependency(spec, action.package_id):
                logger.debug("%s is not a dependency of %s", action.package_id, spec.name)
        else:
            add_or_update_dependency(
                spec, action.package_id, action.version_range, action.frameworks or None
            )


class RestorePreviewOrchestrator:
    """Drives restore previews against a resolution engine."""

    def __init__(self, engine: ResolutionEngine, settings: Optional[PreviewSettings] = None):
        self.engine = engine
        self.settings = settings or PreviewSettings()
        # binary gate shared by every restore of this orchestrator
        self._throttle = asyncio.Semaphore(1) if self.settings.disable_parallel else None

    async def _restore(
        self, dg_spec: DependencyGraphSpec, project_unique_name: str, sources: Sequence[str]
    ) -> ProjectRestoreResult:
        request = RestoreRequest(
            dg_spec=dg_spec.with_restore([project_unique_name]),
            sources=list(sources),
            preview=True,
            throttle=self._throttle,
            no_cache=self.settings.no_cache,
            ignore_failed_sources=self.settings.ignore_failed_sources,
        )
        results = await self.engine.restore(request)
        for result in results:
            if result.project_unique_name == project_unique_name:
                return result
        if len(results) == 1:
            return results[0]
        raise DgPreviewError(f"Resolution engine returned no result for {project_unique_name}")

    def _retry_eligible(
        self,
        original: PackageSpec,
        actions: Sequence[PackageAction],
        result: ProjectRestoreResult,
        partition: FrameworkPartition,
    ) -> bool:
        if len(actions) != 1 or actions[0].action_type is not ActionType.INSTALL:
            return False
        if has_dependency(original, actions[0].package_id):
            # upgrade of an existing dependency
            return False
        return partition.is_partial and not result.success

    async def preview(
        self,
        dg_spec: DependencyGraphSpec,
        project_unique_name: str,
        actions: Sequence[PackageAction],
        existing_lock: Any = None,
    ) -> InstallationDecision:
        """Preview ``actions`` applied to one project of ``dg_spec``.

        Args:
            dg_spec: Graph containing the project and its references.
            project_unique_name: Project to change.
            actions: Ordered changes to apply.
            existing_lock: Baseline lock state; when None the unmodified
                graph is restored first to obtain one.

        Raises:
            ValueError: If ``actions`` is empty or the project is not in the graph.
        """
        if not actions:
            raise ValueError("at least one action is required")
        original = dg_spec.get_project_spec(project_unique_name)
        if original is None:
            raise ValueError(f"project {project_unique_name} is not part of the dependency graph")

        actions = list(actions)
        sources = consulted_sources(actions, self.settings.package_sources)

        with Timer() as timer:
            original_lock = existing_lock
            if original_lock is None:
                baseline = await self._restore(dg_spec, project_unique_name, sources)
                original_lock = baseline.lock_file

            updated = original.clone()
            apply_actions(updated, actions)
            result = await self._restore(dg_spec.with_project(updated), project_unique_name, sources)

            all_frameworks = updated.frameworks
            partition = FrameworkPartition.compute(all_frameworks, result.failed_frameworks())

            retried = False
            if self._retry_eligible(original, actions, result, partition):
                action = actions[0]
                logger.info(
                    "%s is not compatible with %s; retrying with %s",
                    action.package_id,
                    ", ".join(partition.failed_names),
                    ", ".join(partition.succeeded_names),
                )
                retry_spec = original.clone()
                add_or_update_dependency(
                    retry_spec, action.package_id, action.version_range, partition.succeeded
                )
                result = await self._restore(dg_spec.with_project(retry_spec), project_unique_name, sources)
                retried = True
                still_failed: List[TargetFramework] = list(partition.failed) + result.failed_frameworks()
                partition = FrameworkPartition.compute(all_frameworks, still_failed)

        if is_debug_enabled(logger):
            logger.debug(
                "Restore preview finished",
                extra=extra_context(
                    event="preview",
                    component="orchestrator",
                    target=project_unique_name,
                    outcome="success" if result.success else "failure",
                    retried=retried,
                    duration_ms=timer.duration_ms(),
                ),
            )

        return build_installation_decision(
            original_lock_file=original_lock,
            restore_result=result,
            partition=partition,
            sources=sources,
            actions=actions,
            elapsed=timer.elapsed(),
            retried=retried,
        )

    async def preview_project(
        self,
        project_path: str,
        actions: Sequence[PackageAction],
        existing_lock: Any = None,
    ) -> Optional[InstallationDecision]:
        """Derive the graph of ``project_path`` with the build tool, then preview.

        Returns None when the derived graph has no restore roots.
        """
        dg_spec = await derive_dependency_graph(project_path, self.settings)
        if not dg_spec.restore:
            logger.warning("No restore inputs found for %s", project_path)
            return None
        return await self.preview(dg_spec, dg_spec.restore[0], actions, existing_lock)
