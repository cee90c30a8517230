"""Package actions and the installation decision built from a preview."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from projectmodel.frameworks import TargetFramework
from versioning import VersionRange

from .engine import ProjectRestoreResult


class ActionType(Enum):
    """Kind of change applied to a project."""

    INSTALL = "install"
    UNINSTALL = "uninstall"


@dataclass(frozen=True)
class PackageAction:
    """One atomic change: install (add or update) or uninstall a package."""

    action_type: ActionType
    package_id: str
    version_range: VersionRange = field(default_factory=VersionRange.all)
    source: Optional[str] = None
    frameworks: Tuple[TargetFramework, ...] = ()

    @classmethod
    def install(
        cls,
        package_id: str,
        version_range: VersionRange,
        source: Optional[str] = None,
        frameworks: Iterable[TargetFramework] = (),
    ) -> "PackageAction":
        return cls(ActionType.INSTALL, package_id, version_range, source, tuple(frameworks))

    @classmethod
    def uninstall(cls, package_id: str) -> "PackageAction":
        return cls(ActionType.UNINSTALL, package_id)


@dataclass(frozen=True)
class FrameworkPartition:
    """Target frameworks split by compatibility outcome, in declaration order."""

    succeeded: Tuple[TargetFramework, ...] = ()
    failed: Tuple[TargetFramework, ...] = ()

    @classmethod
    def compute(
        cls, all_frameworks: Sequence[TargetFramework], failed: Sequence[TargetFramework]
    ) -> "FrameworkPartition":
        failed_names = {fw.short_folder_name for fw in failed}
        return cls(
            succeeded=tuple(fw for fw in all_frameworks if fw.short_folder_name not in failed_names),
            failed=tuple(fw for fw in all_frameworks if fw.short_folder_name in failed_names),
        )

    @property
    def succeeded_names(self) -> List[str]:
        return [fw.short_folder_name for fw in self.succeeded]

    @property
    def failed_names(self) -> List[str]:
        return [fw.short_folder_name for fw in self.failed]

    @property
    def is_partial(self) -> bool:
        return bool(self.succeeded) and bool(self.failed)


@dataclass(frozen=True)
class InstallationDecision:
    """Everything a later commit step needs to apply a previewed change."""

    original_lock_file: Any
    restore_result: ProjectRestoreResult
    partition: FrameworkPartition
    sources: Tuple[str, ...]
    actions: Tuple[PackageAction, ...]
    elapsed: float
    classification: ActionType
    retried: bool = False

    @property
    def success(self) -> bool:
        return self.restore_result.success


def classify_actions(actions: Sequence[PackageAction]) -> ActionType:
    """UNINSTALL only when every action is an uninstall."""
    if actions and all(a.action_type is ActionType.UNINSTALL for a in actions):
        return ActionType.UNINSTALL
    return ActionType.INSTALL


def consulted_sources(actions: Sequence[PackageAction], configured: Sequence[str]) -> Tuple[str, ...]:
    """Explicit action sources followed by configured sources, without duplicates."""
    ordered: List[str] = []
    for source in [a.source for a in actions if a.source] + list(configured):
        if source not in ordered:
            ordered.append(source)
    return tuple(ordered)


def build_installation_decision(
    original_lock_file: Any,
    restore_result: ProjectRestoreResult,
    partition: FrameworkPartition,
    sources: Sequence[str],
    actions: Sequence[PackageAction],
    elapsed: float,
    retried: bool = False,
) -> InstallationDecision:
    return InstallationDecision(
        original_lock_file=original_lock_file,
        restore_result=restore_result,
        partition=partition,
        sources=tuple(sources),
        actions=tuple(actions),
        elapsed=elapsed,
        classification=classify_actions(actions),
        retried=retried,
    )
