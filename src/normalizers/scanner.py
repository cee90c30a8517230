"""Dispatch a project description file to the reader for its format."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, Tuple

from constants import Constants, ProjectFormat

from .package_reference import read_package_references
from .packages_config import read_packages_config
from .project_json import read_project_json

logger = logging.getLogger(__name__)


def detect_format(path: str) -> Optional[ProjectFormat]:
    """Format tag for a file name, or None when no reader handles it."""
    name = os.path.basename(path).lower()
    if name == Constants.PACKAGES_CONFIG_FILE:
        return ProjectFormat.PACKAGES_CONFIG
    if name == Constants.PROJECT_JSON_FILE:
        return ProjectFormat.PROJECT_JSON
    ext = os.path.splitext(name)[1]
    if ext.endswith(Constants.MSBUILD_PROJECT_EXTENSION_SUFFIX):
        return ProjectFormat.PACKAGE_REFERENCE
    return None


def scan_content(path: str) -> Optional[Tuple[ProjectFormat, Any]]:
    """Read ``path`` with the reader matching its file name.

    Returns:
        ``(format, data)`` where data is a record list or a typed mapping
        (None if the file is absent), or None for unsupported file names.

    Raises:
        ValueError: If ``path`` is blank.
        MalformedDescriptorError: Propagated from the packages.config and
            project.json readers.
    """
    if not path or not path.strip():
        raise ValueError("path must not be empty")
    fmt = detect_format(path)
    if fmt is None:
        logger.debug("No reader for %s", path)
        return None
    if fmt is ProjectFormat.PACKAGES_CONFIG:
        return fmt, read_packages_config(path)
    if fmt is ProjectFormat.PROJECT_JSON:
        return fmt, read_project_json(path)
    return fmt, read_package_references(path)
