"""Read and write dependency-graph (dg) JSON files.

The external build tool writes the graph for a project and its references
to a dg file. Documents are checked against a Draft-07 schema before being
converted, so shape problems surface as ``MalformedDescriptorError`` rather
than as KeyError/TypeError deep inside the conversion.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping

from jsonschema import Draft7Validator

from common.errors import MalformedDescriptorError
from constants import Constants, ProjectFormat
from versioning import parse_version_range

from .frameworks import FallbackFramework, parse_framework
from .include_flags import (
    DEFAULT_SUPPRESS_PARENT,
    LibraryIncludeFlags,
    format_include_flags,
    parse_include_flags,
)
from .models import (
    DependencyGraphSpec,
    LibraryDependency,
    LibraryDependencyTarget,
    PackageSpec,
    ProjectRestoreMetadata,
    ProjectRestoreMetadataFrameworkInfo,
    ProjectRestoreReference,
    RuntimeGraph,
    TargetFrameworkInfo,
    project_name_from_path,
)

logger = logging.getLogger(__name__)

_STRING = {"type": "string"}
_STRING_LIST = {"type": "array", "items": _STRING}

DG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["projects"],
    "properties": {
        "format": {"type": "integer"},
        "restore": {"type": "object"},
        "projects": {
            "type": "object",
            "additionalProperties": {"$ref": "#/definitions/project"},
        },
    },
    "definitions": {
        "dependencies": {
            "type": "object",
            "additionalProperties": {
                "anyOf": [
                    _STRING,
                    {
                        "type": "object",
                        "properties": {
                            "target": _STRING,
                            "version": _STRING,
                            "include": _STRING,
                            "exclude": _STRING,
                            "suppressParent": _STRING,
                        },
                    },
                ]
            },
        },
        "projectReference": {
            "type": "object",
            "properties": {
                "projectPath": _STRING,
                "includeAssets": _STRING,
                "excludeAssets": _STRING,
                "privateAssets": _STRING,
            },
        },
        "project": {
            "type": "object",
            "properties": {
                "version": _STRING,
                "restore": {
                    "type": "object",
                    "properties": {
                        "projectUniqueName": _STRING,
                        "projectName": _STRING,
                        "projectPath": _STRING,
                        "projectJsonPath": _STRING,
                        "outputPath": _STRING,
                        "projectStyle": _STRING,
                        "crossTargeting": {"type": "boolean"},
                        "originalTargetFrameworks": _STRING_LIST,
                        "sources": {"type": "object"},
                        "frameworks": {
                            "type": "object",
                            "additionalProperties": {
                                "type": "object",
                                "properties": {
                                    "projectReferences": {
                                        "type": "object",
                                        "additionalProperties": {"$ref": "#/definitions/projectReference"},
                                    }
                                },
                            },
                        },
                    },
                },
                "dependencies": {"$ref": "#/definitions/dependencies"},
                "frameworks": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "object",
                        "properties": {
                            "dependencies": {"$ref": "#/definitions/dependencies"},
                            "imports": _STRING_LIST,
                        },
                    },
                },
                "runtimes": {"type": "object"},
                "supports": {"type": "object"},
            },
        },
    },
}

_VALIDATOR = Draft7Validator(DG_SCHEMA)


def _validate(path: str, document: Any) -> None:
    errs = sorted(_VALIDATOR.iter_errors(document), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        where = "/".join(str(p) for p in first.path)
        raise MalformedDescriptorError(path, f"invalid dependency graph at '{where}': {first.message}")


def _project_style(value: Any) -> ProjectFormat:
    for fmt in ProjectFormat:
        if fmt.value == value:
            return fmt
    if value is not None:
        logger.debug("Unknown projectStyle %s; treating as PackageReference", value)
    return ProjectFormat.PACKAGE_REFERENCE


def _dependencies_from_json(path: str, section: Mapping[str, Any]) -> List[LibraryDependency]:
    result: List[LibraryDependency] = []
    for name, value in (section or {}).items():
        if isinstance(value, str):
            value = {"version": value}
        try:
            version_range = parse_version_range(value.get("version", ""))
        except ValueError as e:
            raise MalformedDescriptorError(path, f"dependency '{name}': {e}") from e
        target = LibraryDependencyTarget.PACKAGE
        if str(value.get("target", "Package")).lower() == "project":
            target = LibraryDependencyTarget.PROJECT
        include = parse_include_flags(value.get("include"), LibraryIncludeFlags.ALL)
        exclude = parse_include_flags(value.get("exclude"), LibraryIncludeFlags.NONE)
        result.append(LibraryDependency(
            name=name,
            version_range=version_range,
            target=target,
            include_type=include & ~exclude,
            suppress_parent=parse_include_flags(value.get("suppressParent"), DEFAULT_SUPPRESS_PARENT),
        ))
    return result


def _spec_from_json(path: str, unique_name: str, body: Mapping[str, Any]) -> PackageSpec:
    restore = body.get("restore") or {}
    project_path = restore.get("projectPath") or unique_name

    target_frameworks: List[TargetFrameworkInfo] = []
    for framework_name, fw_body in (body.get("frameworks") or {}).items():
        framework = parse_framework(framework_name)
        if framework is None:
            raise MalformedDescriptorError(path, f"invalid framework '{framework_name}'")
        imports = [fw for fw in (parse_framework(i) for i in fw_body.get("imports", [])) if fw]
        if imports:
            framework = FallbackFramework.wrap(framework, imports)
        target_frameworks.append(TargetFrameworkInfo(
            framework=framework,
            dependencies=_dependencies_from_json(path, fw_body.get("dependencies") or {}),
            imports=imports,
        ))

    by_short_name = {info.framework.short_folder_name: info.framework for info in target_frameworks}
    metadata_frameworks: List[ProjectRestoreMetadataFrameworkInfo] = []
    for framework_name, fw_body in (restore.get("frameworks") or {}).items():
        framework = parse_framework(framework_name)
        if framework is None:
            raise MalformedDescriptorError(path, f"invalid framework '{framework_name}'")
        framework = by_short_name.get(framework.short_folder_name, framework)
        references = []
        for ref_name, ref in (fw_body.get("projectReferences") or {}).items():
            references.append(ProjectRestoreReference(
                project_unique_name=ref_name,
                project_path=ref.get("projectPath") or ref_name,
                include_assets=parse_include_flags(ref.get("includeAssets"), LibraryIncludeFlags.ALL),
                exclude_assets=parse_include_flags(ref.get("excludeAssets"), LibraryIncludeFlags.NONE),
                private_assets=parse_include_flags(ref.get("privateAssets"), DEFAULT_SUPPRESS_PARENT),
            ))
        metadata_frameworks.append(ProjectRestoreMetadataFrameworkInfo(framework, references))

    metadata = ProjectRestoreMetadata(
        output_type=_project_style(restore.get("projectStyle")),
        project_unique_name=restore.get("projectUniqueName") or unique_name,
        project_path=project_path,
        project_name=restore.get("projectName") or project_name_from_path(project_path),
        output_path=restore.get("outputPath", ""),
        project_json_path=restore.get("projectJsonPath", ""),
        target_frameworks=metadata_frameworks,
        original_target_frameworks=list(restore.get("originalTargetFrameworks", [])),
        cross_targeting=bool(restore.get("crossTargeting", False)),
        sources=list((restore.get("sources") or {}).keys()),
    )

    runtime_graph = None
    if "runtimes" in body or "supports" in body:
        runtime_graph = RuntimeGraph(
            runtimes=tuple((body.get("runtimes") or {}).keys()),
            supports=tuple((body.get("supports") or {}).keys()),
        )

    return PackageSpec(
        name=metadata.project_name,
        file_path=project_path,
        target_frameworks=target_frameworks,
        dependencies=_dependencies_from_json(path, body.get("dependencies") or {}),
        runtime_graph=runtime_graph,
        restore_metadata=metadata,
        version=body.get("version", "1.0.0"),
    )


def parse_dependency_graph(document: Any, path: str = "<memory>") -> DependencyGraphSpec:
    """Convert a decoded dg document into a DependencyGraphSpec.

    Raises:
        MalformedDescriptorError: If the document does not match the dg schema.
    """
    _validate(path, document)
    graph = DependencyGraphSpec()
    for unique_name, body in document["projects"].items():
        spec = _spec_from_json(path, unique_name, body)
        graph.projects[unique_name] = spec
    for unique_name in (document.get("restore") or {}).keys():
        graph.add_restore(unique_name)
    return graph


def load_dependency_graph(path: str) -> DependencyGraphSpec:
    """Load a dg file from disk.

    Raises:
        MalformedDescriptorError: If the file is not valid JSON or not a dg document.
        OSError: If the file cannot be read.
    """
    with open(path, "r", encoding="utf-8-sig") as f:
        text = f.read()
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedDescriptorError(path, str(e)) from e
    return parse_dependency_graph(document, path)


def _dependencies_to_json(dependencies: List[LibraryDependency]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for dep in dependencies:
        entry: Dict[str, Any] = {
            "target": dep.target.value,
            "version": dep.version_range.to_normalized_string(),
        }
        if dep.include_type != LibraryIncludeFlags.ALL:
            entry["include"] = format_include_flags(dep.include_type)
        if dep.suppress_parent != DEFAULT_SUPPRESS_PARENT:
            entry["suppressParent"] = format_include_flags(dep.suppress_parent)
        result[dep.name] = entry
    return result


def _spec_to_json(spec: PackageSpec) -> Dict[str, Any]:
    body: Dict[str, Any] = {"version": spec.version}
    metadata = spec.restore_metadata
    if metadata is not None:
        restore: Dict[str, Any] = {
            "projectUniqueName": metadata.project_unique_name,
            "projectName": metadata.project_name,
            "projectPath": metadata.project_path,
            "projectStyle": metadata.output_type.value,
            "outputPath": metadata.output_path,
            "crossTargeting": metadata.cross_targeting,
            "originalTargetFrameworks": list(metadata.original_target_frameworks),
            "sources": {source: {} for source in metadata.sources},
            "frameworks": {},
        }
        if metadata.project_json_path:
            restore["projectJsonPath"] = metadata.project_json_path
        for info in metadata.target_frameworks:
            restore["frameworks"][info.framework.short_folder_name] = {
                "projectReferences": {
                    ref.project_unique_name: {
                        "projectPath": ref.project_path,
                        "includeAssets": format_include_flags(ref.include_assets),
                        "excludeAssets": format_include_flags(ref.exclude_assets),
                        "privateAssets": format_include_flags(ref.private_assets),
                    }
                    for ref in info.project_references
                }
            }
        body["restore"] = restore
    if spec.dependencies:
        body["dependencies"] = _dependencies_to_json(spec.dependencies)
    body["frameworks"] = {}
    for info in spec.target_frameworks:
        fw_body: Dict[str, Any] = {"dependencies": _dependencies_to_json(info.dependencies)}
        if info.imports:
            fw_body["imports"] = [fw.short_folder_name for fw in info.imports]
        body["frameworks"][info.framework.short_folder_name] = fw_body
    if spec.runtime_graph is not None:
        body["runtimes"] = {rid: {} for rid in spec.runtime_graph.runtimes}
        body["supports"] = {profile: {} for profile in spec.runtime_graph.supports}
    return body


def dump_dependency_graph(graph: DependencyGraphSpec) -> Dict[str, Any]:
    """Render a DependencyGraphSpec as a dg document."""
    return {
        "format": Constants.DG_FORMAT_VERSION,
        "restore": {unique_name: {} for unique_name in graph.restore},
        "projects": {name: _spec_to_json(spec) for name, spec in graph.projects.items()},
    }


def save_dependency_graph(graph: DependencyGraphSpec, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dump_dependency_graph(graph), f, indent=2)
