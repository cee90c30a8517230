"""Small helpers around ``xml.etree.ElementTree``."""

from __future__ import annotations

import xml.etree.ElementTree as ET


def strip_namespaces(root: ET.Element) -> ET.Element:
    """Drop ``{namespace}`` prefixes from every tag under ``root`` (in place)."""
    for elem in root.iter():
        if isinstance(elem.tag, str) and "}" in elem.tag:
            elem.tag = elem.tag.split("}", 1)[1]
    return root


def parse_xml_file(path: str) -> ET.Element:
    """Parse ``path`` and return its namespace-free root element.

    Raises:
        xml.etree.ElementTree.ParseError: If the document is not well-formed.
        OSError: If the file cannot be read.
    """
    tree = ET.parse(path)
    return strip_namespaces(tree.getroot())


def local_name(elem: ET.Element) -> str:
    tag = elem.tag if isinstance(elem.tag, str) else ""
    return tag.split("}", 1)[-1]
