"""Project Data Provider backed by MSBuild project files on disk.

Only static evaluation is done: properties and items that carry a
``Condition`` are skipped, and ``$(...)`` expressions are left as written.
That is enough for SDK-style projects and for the legacy properties read
by the aggregator.
"""

from __future__ import annotations

import asyncio
import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, List, Optional

from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from normalizers.xml_utils import local_name, parse_xml_file

from .provider import ProjectDataProvider, ProjectItem

logger = logging.getLogger(__name__)

_RESERVED_ATTRIBUTES = {"include", "update", "remove", "condition", "exclude"}


def resolve_reference_path(project_path: str, include: str) -> str:
    """Absolute, normalized path of ``include`` relative to the project directory."""
    relative = include.replace("\\", os.sep)
    base = os.path.dirname(os.path.abspath(project_path))
    return os.path.normpath(os.path.join(base, relative))


@dataclass
class ProjectDataHandle:
    """Parsed project file; ``root`` is None if the file is absent or malformed."""

    path: str
    root: Optional[ET.Element]


def _load(path: str) -> ProjectDataHandle:
    if not os.path.isfile(path):
        return ProjectDataHandle(path, None)
    try:
        return ProjectDataHandle(path, parse_xml_file(path))
    except ET.ParseError as e:
        logger.warning("Couldn't parse project file %s: %s", path, e)
        return ProjectDataHandle(path, None)


def _properties(root: ET.Element) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for group in root:
        if local_name(group) != "PropertyGroup" or group.get("Condition"):
            continue
        for prop in group:
            if prop.get("Condition"):
                continue
            # later definitions win
            values[local_name(prop)] = (prop.text or "").strip()
    return values


def _items(root: ET.Element, item_type: str) -> List[ProjectItem]:
    items: List[ProjectItem] = []
    for group in root:
        if local_name(group) != "ItemGroup" or group.get("Condition"):
            continue
        for elem in group:
            if local_name(elem) != item_type or elem.get("Condition"):
                continue
            include = elem.get("Include")
            if not include:
                continue
            metadata = {
                key: value for key, value in elem.attrib.items()
                if key.lower() not in _RESERVED_ATTRIBUTES
            }
            for child in elem:
                metadata[local_name(child)] = (child.text or "").strip()
            for value in include.split(";"):
                if value.strip():
                    items.append(ProjectItem(value.strip(), dict(metadata)))
    return items


class FileSystemProjectDataProvider(ProjectDataProvider):
    """Reads project data straight from project files.

    Each project file is parsed at most once per provider instance.
    """

    def __init__(self) -> None:
        self._cache: Dict[str, ProjectDataHandle] = {}

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(os.path.exists, path)

    async def get_project_data_handle(self, project_path: str) -> ProjectDataHandle:
        key = os.path.abspath(project_path)
        handle = self._cache.get(key)
        if handle is None:
            handle = await asyncio.to_thread(_load, key)
            self._cache[key] = handle
            if is_debug_enabled(logger):
                logger.debug(
                    "Loaded project data",
                    extra=extra_context(
                        event="project_loaded",
                        component="filesystem_provider",
                        target=key,
                        outcome="ok" if handle.root is not None else "empty",
                    ),
                )
        return handle

    async def get_items(self, handle: ProjectDataHandle, item_type: str) -> List[ProjectItem]:
        if handle.root is None:
            return []
        return _items(handle.root, item_type)

    async def get_property(self, handle: ProjectDataHandle, name: str) -> str:
        if handle.root is None:
            return ""
        return _properties(handle.root).get(name, "")

    async def get_project_references(self, project_path: str) -> List[str]:
        handle = await self.get_project_data_handle(project_path)
        items = await self.get_items(handle, Constants.ITEM_PROJECT_REFERENCE)
        return [resolve_reference_path(project_path, item.evaluated_include) for item in items]
