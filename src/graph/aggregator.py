"""Graph aggregation over a set of projects.

Each project is classified by the description files next to it:
packages.config first, then project.json, then PackageReference items read
through the Project Data Provider. Projects are normalized concurrently;
results are folded into an immutable ``GraphAggregate`` in input order, so
the same inputs always produce an equal aggregate.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants, ProjectFormat
from normalizers.packages_config import read_packages_config
from normalizers.project_json import read_project_json
from projectmodel.frameworks import (
    FallbackFramework,
    TargetFramework,
    parse_framework,
    parse_framework_list,
    parse_framework_name,
)
from projectmodel.include_flags import (
    DEFAULT_SUPPRESS_PARENT,
    LibraryIncludeFlags,
    apply_include_flags,
    parse_include_flags,
)
from projectmodel.models import (
    DependencyGraphSpec,
    LibraryDependency,
    PackageSpec,
    ProjectDescriptor,
    ProjectRestoreMetadata,
    ProjectRestoreMetadataFrameworkInfo,
    ProjectRestoreReference,
    RuntimeGraph,
    TargetFrameworkInfo,
    UnresolvedReference,
    project_name_from_path,
)
from projectmodel.project_json import read_project_json_spec
from versioning import VersionRange, parse_version_range, try_parse_version

from .filesystem import resolve_reference_path
from .provider import ProjectDataProvider, ProjectItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PackageReferenceKey:
    """Reverse-index key: package id (case-insensitive) and version text."""

    package_id: str
    version: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageReferenceKey):
            return NotImplemented
        return self.package_id.lower() == other.package_id.lower() and self.version == other.version

    def __hash__(self) -> int:
        return hash((self.package_id.lower(), self.version))

    def __str__(self) -> str:
        return f"{self.package_id} {self.version}"

    @classmethod
    def for_range(cls, name: str, version_range: VersionRange) -> "PackageReferenceKey":
        return cls(name, version_range.to_normalized_string())

    @classmethod
    def for_version_text(cls, package_id: str, text: str) -> "PackageReferenceKey":
        version = try_parse_version(text)
        return cls(package_id, version.to_normalized_string() if version is not None else text.strip())


@dataclass(frozen=True)
class GraphAggregate:
    """Specs produced for a set of projects plus the package reverse index."""

    package_references: Dict[PackageReferenceKey, Tuple[str, ...]] = field(default_factory=dict)
    package_specs: Tuple[PackageSpec, ...] = ()
    unresolved_references: Tuple[UnresolvedReference, ...] = ()
    descriptors: Tuple[ProjectDescriptor, ...] = ()

    def consumers_of(self, package_id: str, version: str) -> Tuple[str, ...]:
        return self.package_references.get(PackageReferenceKey(package_id, version), ())

    def to_dependency_graph_spec(self) -> DependencyGraphSpec:
        """Graph with every aggregated project as a restore root."""
        graph = DependencyGraphSpec()
        for spec in self.package_specs:
            graph.add_project(spec)
            graph.add_restore(spec.unique_name)
        return graph


@dataclass
class _ProjectOutcome:
    descriptor: ProjectDescriptor
    spec: Optional[PackageSpec]
    keys: List[PackageReferenceKey]


async def _add_project_references(
    provider: ProjectDataProvider, metadata: ProjectRestoreMetadata, project_path: str
) -> None:
    references = await provider.get_project_references(project_path)
    for info in metadata.target_frameworks:
        for reference in references:
            info.project_references.append(ProjectRestoreReference(reference, reference))


async def _legacy_framework_string(provider: ProjectDataProvider, handle: Any) -> str:
    """TargetFrameworkMoniker, or one assembled from the legacy version properties."""
    moniker = await provider.get_property(handle, Constants.PROP_TARGET_FRAMEWORK_MONIKER)
    if moniker:
        return moniker
    version = await provider.get_property(handle, Constants.PROP_TARGET_FRAMEWORK_VERSION)
    if not version:
        return ""
    identifier = await provider.get_property(handle, Constants.PROP_TARGET_FRAMEWORK_IDENTIFIER)
    text = f"{identifier or '.NETFramework'},Version={version}"
    profile = await provider.get_property(handle, Constants.PROP_TARGET_FRAMEWORK_PROFILE)
    if profile:
        text += f",Profile={profile}"
    return text


async def _get_frameworks(provider: ProjectDataProvider, handle: Any) -> List[TargetFramework]:
    """Target frameworks of a project; the first non-empty source wins."""
    value = await provider.get_property(handle, Constants.PROP_TARGET_FRAMEWORK)
    if value:
        framework = parse_framework(value)
        return [framework] if framework is not None else []

    value = await provider.get_property(handle, Constants.PROP_TARGET_FRAMEWORKS)
    if value:
        return list(parse_framework_list(value))

    value = await provider.get_property(handle, Constants.PROP_NUGET_TARGET_FRAMEWORK)
    if value:
        return [parse_framework_name(value)]

    value = await _legacy_framework_string(provider, handle)
    framework = parse_framework(value)
    return [framework] if framework is not None else []


def _version_range_of(project_path: str, item: ProjectItem) -> VersionRange:
    text = item.get_metadata(Constants.METADATA_VERSION)
    if not text:
        return VersionRange.all()
    try:
        return parse_version_range(text)
    except ValueError as e:
        logger.warning("Ignoring invalid version of %s in %s: %s", item.evaluated_include, project_path, e)
        return VersionRange.all()


def _to_dependency(project_path: str, item: ProjectItem) -> LibraryDependency:
    include_type, suppress_parent = apply_include_flags(
        item.get_metadata(Constants.METADATA_INCLUDE_ASSETS),
        item.get_metadata(Constants.METADATA_EXCLUDE_ASSETS),
        item.get_metadata(Constants.METADATA_PRIVATE_ASSETS),
    )
    return LibraryDependency(
        name=item.evaluated_include,
        version_range=_version_range_of(project_path, item),
        include_type=include_type,
        suppress_parent=suppress_parent,
    )


def _to_project_reference(project_path: str, item: ProjectItem) -> ProjectRestoreReference:
    reference_path = resolve_reference_path(project_path, item.evaluated_include)
    return ProjectRestoreReference(
        project_unique_name=reference_path,
        project_path=reference_path,
        include_assets=parse_include_flags(
            item.get_metadata(Constants.METADATA_INCLUDE_ASSETS), LibraryIncludeFlags.ALL),
        exclude_assets=parse_include_flags(
            item.get_metadata(Constants.METADATA_EXCLUDE_ASSETS), LibraryIncludeFlags.NONE),
        private_assets=parse_include_flags(
            item.get_metadata(Constants.METADATA_PRIVATE_ASSETS), DEFAULT_SUPPRESS_PARENT),
    )


async def _get_runtime_graph(provider: ProjectDataProvider, handle: Any) -> RuntimeGraph:
    runtimes: List[str] = []
    single = await provider.get_property(handle, Constants.PROP_RUNTIME_IDENTIFIER)
    if single:
        runtimes.append(single.strip())
    many = await provider.get_property(handle, Constants.PROP_RUNTIME_IDENTIFIERS)
    for rid in many.split(";"):
        if rid.strip() and rid.strip() not in runtimes:
            runtimes.append(rid.strip())
    supports = await provider.get_property(handle, Constants.PROP_RUNTIME_SUPPORTS)
    return RuntimeGraph(
        runtimes=tuple(runtimes),
        supports=tuple(s.strip() for s in supports.split(";") if s.strip()),
    )


async def spec_for_packages_config(
    provider: ProjectDataProvider, project_path: str
) -> Optional[PackageSpec]:
    """Spec for a packages.config project; None when no target framework is known."""
    handle = await provider.get_project_data_handle(project_path)
    framework = parse_framework(await _legacy_framework_string(provider, handle))
    if framework is None:
        return None

    name = project_name_from_path(project_path)
    metadata = ProjectRestoreMetadata(
        output_type=ProjectFormat.PACKAGES_CONFIG,
        project_unique_name=project_path,
        project_path=project_path,
        project_name=name,
        target_frameworks=[ProjectRestoreMetadataFrameworkInfo(framework)],
    )
    await _add_project_references(provider, metadata, project_path)
    return PackageSpec(
        name=name,
        file_path=project_path,
        target_frameworks=[TargetFrameworkInfo(framework)],
        restore_metadata=metadata,
    )


async def spec_for_project_json(
    provider: ProjectDataProvider, project_path: str, project_json_path: str
) -> Optional[PackageSpec]:
    """Spec for a project.json project. An empty dependency set is a valid result."""
    data = await asyncio.to_thread(read_project_json, project_json_path)
    if data is None:
        return None
    spec = read_project_json_spec(project_name_from_path(project_path), project_json_path, data)
    spec.restore_metadata = ProjectRestoreMetadata(
        output_type=ProjectFormat.PROJECT_JSON,
        project_unique_name=project_path,
        project_path=project_path,
        project_name=spec.name,
        project_json_path=spec.file_path,
        target_frameworks=[ProjectRestoreMetadataFrameworkInfo(fw) for fw in spec.frameworks],
    )
    await _add_project_references(provider, spec.restore_metadata, project_path)
    return spec


async def spec_for_package_references(
    provider: ProjectDataProvider, project_path: str
) -> Optional[PackageSpec]:
    """Spec built from PackageReference items.

    Returns None when the project declares no package references or no
    target framework can be determined.
    """
    handle = await provider.get_project_data_handle(project_path)
    package_items = await provider.get_items(handle, Constants.ITEM_PACKAGE_REFERENCE)
    if not package_items:
        return None

    frameworks = await _get_frameworks(provider, handle)
    if not frameworks:
        logger.warning("No target framework found for %s", project_path)
        return None

    fallback_text = await provider.get_property(handle, Constants.PROP_PACKAGE_TARGET_FALLBACK)
    fallbacks = list(parse_framework_list(fallback_text))

    target_frameworks: List[TargetFrameworkInfo] = []
    for framework in frameworks:
        if fallbacks:
            framework = FallbackFramework.wrap(framework, fallbacks)
        target_frameworks.append(TargetFrameworkInfo(
            framework=framework,
            dependencies=[_to_dependency(project_path, item) for item in package_items],
            imports=list(fallbacks),
        ))

    reference_items = await provider.get_items(handle, Constants.ITEM_PROJECT_REFERENCE)
    name = project_name_from_path(project_path)
    distinct = {info.framework.short_folder_name for info in target_frameworks}
    metadata = ProjectRestoreMetadata(
        output_type=ProjectFormat.PACKAGE_REFERENCE,
        project_unique_name=project_path,
        project_path=project_path,
        project_name=name,
        output_path=await provider.get_property(handle, Constants.PROP_BASE_INTERMEDIATE_OUTPUT_PATH),
        target_frameworks=[
            ProjectRestoreMetadataFrameworkInfo(
                info.framework,
                [_to_project_reference(project_path, item) for item in reference_items],
            )
            for info in target_frameworks
        ],
        original_target_frameworks=[info.framework.short_folder_name for info in target_frameworks],
        cross_targeting=len(distinct) > 1,
    )
    return PackageSpec(
        name=name,
        file_path=project_path,
        target_frameworks=target_frameworks,
        restore_metadata=metadata,
        runtime_graph=await _get_runtime_graph(provider, handle),
    )


def _dependency_keys(spec: PackageSpec) -> List[PackageReferenceKey]:
    return [PackageReferenceKey.for_range(dep.name, dep.version_range) for dep in spec.iter_dependencies()]


async def _normalize_project(provider: ProjectDataProvider, project_path: str) -> _ProjectOutcome:
    directory = os.path.dirname(project_path)

    packages_config_path = os.path.join(directory, Constants.PACKAGES_CONFIG_FILE)
    if await provider.exists(packages_config_path):
        records = await asyncio.to_thread(read_packages_config, packages_config_path) or []
        keys = [PackageReferenceKey.for_version_text(r.package_id, r.version) for r in records]
        return _ProjectOutcome(
            ProjectDescriptor.for_path(project_path, ProjectFormat.PACKAGES_CONFIG),
            await spec_for_packages_config(provider, project_path),
            keys,
        )

    project_json_path = os.path.join(directory, Constants.PROJECT_JSON_FILE)
    if await provider.exists(project_json_path):
        spec = await spec_for_project_json(provider, project_path, project_json_path)
        return _ProjectOutcome(
            ProjectDescriptor.for_path(project_path, ProjectFormat.PROJECT_JSON),
            spec,
            _dependency_keys(spec) if spec is not None else [],
        )

    spec = await spec_for_package_references(provider, project_path)
    return _ProjectOutcome(
        ProjectDescriptor.for_path(project_path, ProjectFormat.PACKAGE_REFERENCE),
        spec,
        _dependency_keys(spec) if spec is not None else [],
    )


async def aggregate_projects(
    provider: ProjectDataProvider,
    project_paths: Sequence[str],
    max_concurrency: int = Constants.DEFAULT_MAX_CONCURRENCY,
) -> GraphAggregate:
    """Normalize every project and fold the results into a ``GraphAggregate``.

    Args:
        provider: Source of project data.
        project_paths: Project files; duplicates are ignored.
        max_concurrency: Upper bound on projects normalized at once.

    Raises:
        MalformedDescriptorError: If a packages.config or project.json file is
            present but malformed.
    """
    paths: List[str] = []
    for path in project_paths:
        absolute = os.path.abspath(path)
        if absolute not in paths:
            paths.append(absolute)

    semaphore = asyncio.Semaphore(max(1, int(max_concurrency)))

    async def _run(path: str) -> _ProjectOutcome:
        async with semaphore:
            return await _normalize_project(provider, path)

    with Timer() as timer:
        outcomes = await asyncio.gather(*(_run(path) for path in paths))

    index: Dict[PackageReferenceKey, List[str]] = {}
    specs: List[PackageSpec] = []
    for path, outcome in zip(paths, outcomes):
        project_name = project_name_from_path(path)
        for key in dict.fromkeys(outcome.keys):
            index.setdefault(key, []).append(project_name)
        if outcome.spec is not None:
            specs.append(outcome.spec)
        else:
            logger.debug("No spec produced for %s", path)

    graph = DependencyGraphSpec()
    for spec in specs:
        graph.add_project(spec)
    unresolved = graph.unresolved_references()
    for reference in unresolved:
        logger.warning(
            "Project %s references %s, which is not part of the graph",
            reference.project_unique_name, reference.reference_path,
        )

    if is_debug_enabled(logger):
        logger.debug(
            "Aggregated projects",
            extra=extra_context(
                event="aggregate",
                component="graph_aggregator",
                count=len(paths),
                specs=len(specs),
                duration_ms=timer.duration_ms(),
            ),
        )

    return GraphAggregate(
        package_references={key: tuple(names) for key, names in index.items()},
        package_specs=tuple(specs),
        unresolved_references=tuple(unresolved),
        descriptors=tuple(outcome.descriptor for outcome in outcomes),
    )
