"""Project data access and solution-wide graph aggregation."""

from .aggregator import GraphAggregate, PackageReferenceKey, aggregate_projects
from .filesystem import FileSystemProjectDataProvider, resolve_reference_path
from .provider import ProjectDataProvider, ProjectItem

__all__ = [
    "FileSystemProjectDataProvider",
    "GraphAggregate",
    "PackageReferenceKey",
    "ProjectDataProvider",
    "ProjectItem",
    "aggregate_projects",
    "resolve_reference_path",
]
