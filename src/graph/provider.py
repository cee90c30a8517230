"""Project Data Provider interface consumed by the graph aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ProjectItem:
    """An evaluated MSBuild item: its ``Include`` value plus metadata."""

    evaluated_include: str
    metadata: Dict[str, str] = field(default_factory=dict)

    def get_metadata(self, name: str, default: str = "") -> str:
        """Metadata lookup, case-insensitive on the name like MSBuild."""
        if name in self.metadata:
            return self.metadata[name]
        lowered = name.lower()
        for key, value in self.metadata.items():
            if key.lower() == lowered:
                return value
        return default


class ProjectDataProvider:
    """Base class for sources of project data.

    Implementations wrap whatever project system hosts the projects; the
    aggregator only ever talks to this interface and treats handles as
    opaque values.
    """

    async def exists(self, path: str) -> bool:
        raise NotImplementedError

    async def get_project_references(self, project_path: str) -> List[str]:
        """Absolute paths of the projects referenced by ``project_path``."""
        raise NotImplementedError

    async def get_project_data_handle(self, project_path: str) -> Any:
        raise NotImplementedError

    async def get_items(self, handle: Any, item_type: str) -> List[ProjectItem]:
        raise NotImplementedError

    async def get_property(self, handle: Any, name: str) -> str:
        """Evaluated property value; empty string when undefined."""
        raise NotImplementedError
