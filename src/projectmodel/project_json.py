"""Build a PackageSpec from the typed mapping of a project.json file."""

from __future__ import annotations

from typing import Any, List, Mapping

from common.errors import MalformedDescriptorError
from versioning import VersionRange, parse_version_range

from .frameworks import FallbackFramework, parse_framework
from .include_flags import (
    DEFAULT_SUPPRESS_PARENT,
    LibraryIncludeFlags,
    parse_include_flags,
)
from .models import (
    LibraryDependency,
    LibraryDependencyTarget,
    PackageSpec,
    RuntimeGraph,
    TargetFrameworkInfo,
)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(";") if v.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


def _range(path: str, name: str, text: Any) -> VersionRange:
    if text is None:
        return VersionRange.all()
    try:
        return parse_version_range(str(text))
    except ValueError as e:
        raise MalformedDescriptorError(path, f"dependency '{name}': {e}") from e


def _read_dependencies(path: str, section: Any) -> List[LibraryDependency]:
    dependencies: List[LibraryDependency] = []
    if not isinstance(section, Mapping):
        return dependencies
    for name, value in section.items():
        if isinstance(value, Mapping):
            include = parse_include_flags(value.get("include"), LibraryIncludeFlags.ALL)
            exclude = parse_include_flags(value.get("exclude"), LibraryIncludeFlags.NONE)
            suppress = parse_include_flags(value.get("suppressParent"), DEFAULT_SUPPRESS_PARENT)
            if str(value.get("type", "")).lower() == "build":
                suppress = LibraryIncludeFlags.ALL
            target = LibraryDependencyTarget.PACKAGE
            if str(value.get("target", "")).lower() == "project":
                target = LibraryDependencyTarget.PROJECT
            dependencies.append(LibraryDependency(
                name=name,
                version_range=_range(path, name, value.get("version")),
                target=target,
                include_type=include & ~exclude,
                suppress_parent=suppress,
            ))
        else:
            dependencies.append(LibraryDependency(name=name, version_range=_range(path, name, value)))
    return dependencies


def read_project_json_spec(name: str, path: str, data: Mapping[str, Any]) -> PackageSpec:
    """Create a PackageSpec from the key/value mapping of a project.json file.

    Raises:
        MalformedDescriptorError: If a framework or dependency version is invalid.
    """
    frameworks: List[TargetFrameworkInfo] = []
    frameworks_section = data.get("frameworks")
    if isinstance(frameworks_section, Mapping):
        for framework_name, body in frameworks_section.items():
            framework = parse_framework(framework_name)
            if framework is None:
                raise MalformedDescriptorError(path, f"invalid framework '{framework_name}'")
            body = body if isinstance(body, Mapping) else {}
            imports = [fw for fw in (parse_framework(i) for i in _as_list(body.get("imports"))) if fw]
            if imports:
                framework = FallbackFramework.wrap(framework, imports)
            frameworks.append(TargetFrameworkInfo(
                framework=framework,
                dependencies=_read_dependencies(path, body.get("dependencies")),
                imports=imports,
            ))

    runtime_graph = None
    runtimes = data.get("runtimes")
    supports = data.get("supports")
    if isinstance(runtimes, Mapping) or isinstance(supports, Mapping):
        runtime_graph = RuntimeGraph(
            runtimes=tuple(runtimes.keys()) if isinstance(runtimes, Mapping) else (),
            supports=tuple(supports.keys()) if isinstance(supports, Mapping) else (),
        )

    version = data.get("version")
    return PackageSpec(
        name=name,
        file_path=path,
        target_frameworks=frameworks,
        dependencies=_read_dependencies(path, data.get("dependencies")),
        runtime_graph=runtime_graph,
        version=version if isinstance(version, str) and version else "1.0.0",
    )
