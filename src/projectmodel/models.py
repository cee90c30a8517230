"""Canonical project and dependency-graph model.

Every project description format is normalized into a ``PackageSpec``.
Specs are never edited in place once produced; callers that need a
modified spec take a ``clone()`` first.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from constants import ProjectFormat
from versioning import VersionRange, parse_version_range_or_all

from .frameworks import TargetFramework
from .include_flags import DEFAULT_SUPPRESS_PARENT, LibraryIncludeFlags


def project_name_from_path(path: str) -> str:
    """Display name of a project: its file name without extension."""
    return os.path.splitext(os.path.basename(path))[0]


@dataclass(frozen=True)
class ProjectDescriptor:
    """Identity of a project and the description format detected for it."""

    path: str
    name: str
    format: ProjectFormat

    @classmethod
    def for_path(cls, path: str, fmt: ProjectFormat) -> "ProjectDescriptor":
        return cls(path=os.path.abspath(path), name=project_name_from_path(path), format=fmt)


@dataclass(frozen=True)
class RawPackageRecord:
    """One ``<package>`` entry of a packages.config file, attributes as text."""

    package_id: str = ""
    version: str = ""
    target_framework: str = ""
    development_dependency: str = ""

    @property
    def is_development_dependency(self) -> bool:
        return self.development_dependency.strip().lower() == "true"


@dataclass(frozen=True)
class RawPackageReferenceRecord:
    """One ``<PackageReference>`` element of a build descriptor."""

    name: str
    version: str = ""

    @property
    def version_range(self) -> VersionRange:
        """Parsed version; absent or unparsable text means unconstrained."""
        return parse_version_range_or_all(self.version)


class LibraryDependencyTarget(Enum):
    """What kind of library a dependency may resolve to."""

    PACKAGE = "Package"
    PROJECT = "Project"


@dataclass
class LibraryDependency:
    """A dependency with a resolved version range and asset flags."""

    name: str
    version_range: VersionRange = field(default_factory=VersionRange.all)
    target: LibraryDependencyTarget = LibraryDependencyTarget.PACKAGE
    include_type: LibraryIncludeFlags = LibraryIncludeFlags.ALL
    suppress_parent: LibraryIncludeFlags = DEFAULT_SUPPRESS_PARENT

    def matches(self, name: str) -> bool:
        return self.name.lower() == name.lower()


@dataclass
class TargetFrameworkInfo:
    """Dependencies declared for a single target framework."""

    framework: TargetFramework
    dependencies: List[LibraryDependency] = field(default_factory=list)
    imports: List[TargetFramework] = field(default_factory=list)


@dataclass(frozen=True)
class RuntimeGraph:
    """Supported runtime identifiers and compatibility profiles."""

    runtimes: Tuple[str, ...] = ()
    supports: Tuple[str, ...] = ()


@dataclass
class ProjectRestoreReference:
    """Edge to another project, by resolved absolute path."""

    project_unique_name: str
    project_path: str
    include_assets: LibraryIncludeFlags = LibraryIncludeFlags.ALL
    exclude_assets: LibraryIncludeFlags = LibraryIncludeFlags.NONE
    private_assets: LibraryIncludeFlags = DEFAULT_SUPPRESS_PARENT


@dataclass
class ProjectRestoreMetadataFrameworkInfo:
    """Project references declared for one target framework."""

    framework: TargetFramework
    project_references: List[ProjectRestoreReference] = field(default_factory=list)


@dataclass
class ProjectRestoreMetadata:
    """Restore-specific facts about a project."""

    output_type: ProjectFormat
    project_unique_name: str
    project_path: str
    project_name: str
    output_path: str = ""
    project_json_path: str = ""
    target_frameworks: List[ProjectRestoreMetadataFrameworkInfo] = field(default_factory=list)
    original_target_frameworks: List[str] = field(default_factory=list)
    cross_targeting: bool = False
    sources: List[str] = field(default_factory=list)

    def project_references(self) -> Iterator[ProjectRestoreReference]:
        """All project references across frameworks, first occurrence per target path."""
        seen = set()
        for info in self.target_frameworks:
            for reference in info.project_references:
                if reference.project_unique_name in seen:
                    continue
                seen.add(reference.project_unique_name)
                yield reference


@dataclass
class PackageSpec:
    """Canonical description of one project."""

    name: str
    file_path: str
    target_frameworks: List[TargetFrameworkInfo] = field(default_factory=list)
    dependencies: List[LibraryDependency] = field(default_factory=list)
    runtime_graph: Optional[RuntimeGraph] = None
    restore_metadata: Optional[ProjectRestoreMetadata] = None
    version: str = "1.0.0"

    @property
    def unique_name(self) -> str:
        if self.restore_metadata is not None and self.restore_metadata.project_unique_name:
            return self.restore_metadata.project_unique_name
        return self.file_path

    @property
    def frameworks(self) -> List[TargetFramework]:
        """Declared target frameworks, distinct, in declaration order."""
        result: List[TargetFramework] = []
        for info in self.target_frameworks:
            if info.framework not in result:
                result.append(info.framework)
        return result

    def iter_dependencies(self) -> Iterator[LibraryDependency]:
        """Framework-independent dependencies, then each framework's."""
        yield from self.dependencies
        for info in self.target_frameworks:
            yield from info.dependencies

    def clone(self) -> "PackageSpec":
        """Deep copy; no nested list is shared with the original."""
        return copy.deepcopy(self)


CanonicalProjectSpec = PackageSpec


@dataclass(frozen=True)
class UnresolvedReference:
    """A project reference whose target is not part of the graph."""

    project_unique_name: str
    reference_path: str


@dataclass
class DependencyGraphSpec:
    """Solution-wide set of project specs plus the projects to restore."""

    projects: Dict[str, PackageSpec] = field(default_factory=dict)
    restore: List[str] = field(default_factory=list)

    def add_project(self, spec: PackageSpec) -> None:
        self.projects.setdefault(spec.unique_name, spec)

    def add_restore(self, unique_name: str) -> None:
        if unique_name not in self.restore:
            self.restore.append(unique_name)

    def get_project_spec(self, unique_name: str) -> Optional[PackageSpec]:
        return self.projects.get(unique_name)

    def with_project(self, spec: PackageSpec) -> "DependencyGraphSpec":
        """Return a new graph in which ``spec`` replaces the project of the same name.

        Other specs are shared, not copied.
        """
        projects = dict(self.projects)
        projects[spec.unique_name] = spec
        return DependencyGraphSpec(projects=projects, restore=list(self.restore))

    def with_restore(self, roots: List[str]) -> "DependencyGraphSpec":
        return DependencyGraphSpec(projects=dict(self.projects), restore=list(roots))

    def closure(self, unique_name: str) -> List[PackageSpec]:
        """The spec and every spec reachable through project references.

        References to projects that are not in the graph are skipped.
        """
        ordered: List[PackageSpec] = []
        pending = [unique_name]
        visited = set()
        while pending:
            current = pending.pop(0)
            if current in visited:
                continue
            visited.add(current)
            spec = self.projects.get(current)
            if spec is None:
                continue
            ordered.append(spec)
            if spec.restore_metadata is not None:
                for reference in spec.restore_metadata.project_references():
                    pending.append(reference.project_unique_name)
        return ordered

    def unresolved_references(self) -> List[UnresolvedReference]:
        """Project references that point at specs missing from the graph."""
        missing: List[UnresolvedReference] = []
        for unique_name, spec in self.projects.items():
            if spec.restore_metadata is None:
                continue
            for reference in spec.restore_metadata.project_references():
                if reference.project_unique_name not in self.projects:
                    missing.append(UnresolvedReference(unique_name, reference.project_unique_name))
        return missing
