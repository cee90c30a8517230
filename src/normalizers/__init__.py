"""Readers for the supported project description formats."""

from .package_reference import read_package_references
from .packages_config import read_packages_config
from .project_json import read_project_json, unbox
from .scanner import detect_format, scan_content

__all__ = [
    "detect_format",
    "read_package_references",
    "read_packages_config",
    "read_project_json",
    "scan_content",
    "unbox",
]
