"""packages.config reader."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from typing import List, Optional

from common.errors import MalformedDescriptorError
from projectmodel.models import RawPackageRecord

from .xml_utils import local_name

logger = logging.getLogger(__name__)


def read_packages_config(path: str) -> Optional[List[RawPackageRecord]]:
    """Read every ``<package>`` element of a packages.config file.

    Args:
        path: Path to the packages.config file.

    Returns:
        One record per ``<package>`` element in document order, or None when
        the file does not exist. Missing attributes are empty strings.

    Raises:
        ValueError: If ``path`` is blank.
        MalformedDescriptorError: If the file exists but is not well-formed XML.
    """
    if not path or not path.strip():
        raise ValueError("path must not be empty")
    if not os.path.isfile(path):
        logger.debug("No packages.config at %s", path)
        return None

    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise MalformedDescriptorError(path, str(e)) from e

    records: List[RawPackageRecord] = []
    for elem in root.iter():
        if local_name(elem) != "package":
            continue
        records.append(RawPackageRecord(
            package_id=elem.get("id", ""),
            version=elem.get("version", ""),
            target_framework=elem.get("targetFramework", ""),
            development_dependency=elem.get("developmentDependency", ""),
        ))
    logger.debug("Read %d package(s) from %s", len(records), path)
    return records
