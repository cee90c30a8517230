"""Restore preview: resolution-engine interface, build-tool driver and orchestration."""

from .actions import (
    ActionType,
    FrameworkPartition,
    InstallationDecision,
    PackageAction,
    build_installation_decision,
    classify_actions,
    consulted_sources,
)
from .engine import (
    CompatibilityCheckResult,
    ProjectRestoreResult,
    ResolutionEngine,
    RestoreRequest,
)
from .msbuild import TempFile, build_msbuild_arguments, derive_dependency_graph
from .orchestrator import RestorePreviewOrchestrator, apply_actions

__all__ = [
    "ActionType",
    "CompatibilityCheckResult",
    "FrameworkPartition",
    "InstallationDecision",
    "PackageAction",
    "ProjectRestoreResult",
    "ResolutionEngine",
    "RestorePreviewOrchestrator",
    "RestoreRequest",
    "TempFile",
    "apply_actions",
    "build_installation_decision",
    "build_msbuild_arguments",
    "classify_actions",
    "consulted_sources",
    "derive_dependency_graph",
]
