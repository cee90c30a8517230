"""Preview configuration.

``PreviewSettings`` is passed explicitly to the orchestrator and the build
tool driver; nothing below the CLI reads the environment on its own.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from common.errors import MalformedDescriptorError
from constants import Constants
from normalizers.xml_utils import local_name, parse_xml_file

logger = logging.getLogger(__name__)


def default_scratch_dir() -> str:
    return os.path.join(tempfile.gettempdir(), Constants.SCRATCH_DIR_NAME)


@dataclass(frozen=True)
class PreviewSettings:
    """Tunables for graph derivation and restore preview."""

    dotnet_path: str = Constants.DOTNET_EXECUTABLE
    msbuild_verbosity: str = Constants.DEFAULT_MSBUILD_VERBOSITY
    dg_timeout: float = Constants.DG_GENERATION_TIMEOUT_SEC
    recursive: bool = True
    scratch_dir: str = field(default_factory=default_scratch_dir)
    disable_parallel: bool = True
    no_cache: bool = False
    ignore_failed_sources: bool = True
    package_sources: List[str] = field(default_factory=list)
    max_concurrency: int = Constants.DEFAULT_MAX_CONCURRENCY

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "PreviewSettings":
        """Defaults plus the MSBuild verbosity override from the environment."""
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        verbosity = (env.get(Constants.ENV_MSBUILD_VERBOSITY) or "").strip()
        if verbosity:
            values["msbuild_verbosity"] = verbosity
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "PreviewSettings":
        """Copy with every non-None override applied."""
        known = {f.name for f in dataclasses.fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"unknown setting(s): {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_package_sources(nuget_config_path: str) -> List[str]:
    """Enabled package source URLs from a NuGet.Config file, in file order.

    ``<clear/>`` drops every source declared before it, and sources listed
    under ``<disabledPackageSources>`` with ``value="true"`` are skipped.

    Raises:
        MalformedDescriptorError: If the file is not well-formed XML.
        OSError: If the file cannot be read.
    """
    try:
        root = parse_xml_file(nuget_config_path)
    except ET.ParseError as e:
        raise MalformedDescriptorError(nuget_config_path, str(e)) from e

    sources: Dict[str, str] = {}
    disabled = set()
    for section in root:
        name = local_name(section)
        if name == "packageSources":
            for entry in section:
                tag = local_name(entry)
                if tag == "clear":
                    sources.clear()
                elif tag == "add" and entry.get("key") and entry.get("value"):
                    sources[entry.get("key")] = entry.get("value")
        elif name == "disabledPackageSources":
            for entry in section:
                if local_name(entry) == "add" and (entry.get("value") or "").lower() == "true":
                    disabled.add(entry.get("key"))

    enabled = [value for key, value in sources.items() if key not in disabled]
    logger.debug("Loaded %d enabled package source(s) from %s", len(enabled), nuget_config_path)
    return enabled
