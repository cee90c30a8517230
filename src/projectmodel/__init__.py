"""Canonical project model shared by the normalizers, aggregator and restore layers."""

from .dgspec import (
    dump_dependency_graph,
    load_dependency_graph,
    parse_dependency_graph,
    save_dependency_graph,
)
from .frameworks import (
    FallbackFramework,
    TargetFramework,
    parse_framework,
    parse_framework_list,
)
from .include_flags import (
    DEFAULT_SUPPRESS_PARENT,
    LibraryIncludeFlags,
    apply_include_flags,
    format_include_flags,
    parse_include_flags,
)
from .models import (
    CanonicalProjectSpec,
    DependencyGraphSpec,
    LibraryDependency,
    LibraryDependencyTarget,
    PackageSpec,
    ProjectDescriptor,
    ProjectRestoreMetadata,
    ProjectRestoreMetadataFrameworkInfo,
    ProjectRestoreReference,
    RawPackageRecord,
    RawPackageReferenceRecord,
    RuntimeGraph,
    TargetFrameworkInfo,
    UnresolvedReference,
    project_name_from_path,
)
from .operations import add_or_update_dependency, has_dependency, remove_dependency
from .project_json import read_project_json_spec

__all__ = [
    "CanonicalProjectSpec",
    "DEFAULT_SUPPRESS_PARENT",
    "DependencyGraphSpec",
    "FallbackFramework",
    "LibraryDependency",
    "LibraryDependencyTarget",
    "LibraryIncludeFlags",
    "PackageSpec",
    "ProjectDescriptor",
    "ProjectRestoreMetadata",
    "ProjectRestoreMetadataFrameworkInfo",
    "ProjectRestoreReference",
    "RawPackageRecord",
    "RawPackageReferenceRecord",
    "RuntimeGraph",
    "TargetFramework",
    "TargetFrameworkInfo",
    "UnresolvedReference",
    "add_or_update_dependency",
    "apply_include_flags",
    "dump_dependency_graph",
    "format_include_flags",
    "has_dependency",
    "load_dependency_graph",
    "parse_dependency_graph",
    "parse_framework",
    "parse_framework_list",
    "parse_include_flags",
    "project_name_from_path",
    "read_project_json_spec",
    "remove_dependency",
    "save_dependency_graph",
]
