"""PackageReference reader for MSBuild project files."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from typing import List, Optional

from common.errors import MalformedDescriptorError
from constants import Constants
from projectmodel.models import RawPackageReferenceRecord

from .xml_utils import local_name, parse_xml_file

logger = logging.getLogger(__name__)


def _version_of(elem: ET.Element) -> str:
    children = list(elem)
    if children:
        return (children[0].text or "").strip()
    return (elem.get(Constants.METADATA_VERSION) or "").strip()


def read_package_references(path: str, strict: bool = False) -> Optional[List[RawPackageReferenceRecord]]:
    """Collect ``<PackageReference>`` elements from a project file.

    The package name is the ``Include`` attribute. The version is the text
    of the first child element (``<Version>1.0</Version>``), falling back to
    a ``Version`` attribute.

    Args:
        path: Path to the project file.
        strict: Raise on malformed XML instead of returning no records.

    Returns:
        Records in document order, or None when the file does not exist.

    Raises:
        ValueError: If ``path`` is blank.
        MalformedDescriptorError: Only with ``strict=True``.
    """
    if not path or not path.strip():
        raise ValueError("path must not be empty")
    if not os.path.isfile(path):
        return None

    try:
        root = parse_xml_file(path)
    except ET.ParseError as e:
        if strict:
            raise MalformedDescriptorError(path, str(e)) from e
        logger.warning("Couldn't parse project file %s: %s", path, e)
        return []

    records: List[RawPackageReferenceRecord] = []
    for elem in root.iter():
        if local_name(elem) != Constants.ITEM_PACKAGE_REFERENCE:
            continue
        name = elem.get("Include")
        if not name:
            continue
        records.append(RawPackageReferenceRecord(name=name.strip(), version=_version_of(elem)))
    return records
