"""Build ``PreviewSettings`` for the CLI.

Precedence, highest first: command-line flags, the YAML config file,
environment variables, built-in defaults.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any, Dict, Optional

import yaml

from common.errors import MalformedDescriptorError
from constants import Constants
from settings import PreviewSettings, load_package_sources

logger = logging.getLogger(__name__)

_FLOAT_KEYS = {"dg_timeout"}
_INT_KEYS = {"max_concurrency"}
_BOOL_KEYS = {"recursive", "disable_parallel", "no_cache", "ignore_failed_sources"}


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Read the ``dgpreview`` section of a YAML config file.

    A file without that section is taken as the section itself.

    Raises:
        MalformedDescriptorError: If the file is not valid YAML or not a mapping.
        OSError: If the file cannot be read.
    """
    if not config_path:
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise MalformedDescriptorError(config_path, str(e)) from e
    if not isinstance(data, dict):
        raise MalformedDescriptorError(config_path, "config root must be a mapping")
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise MalformedDescriptorError(config_path, f"'{Constants.CONFIG_SECTION}' must be a mapping")
    return section


def _coerce(config_path: str, key: str, value: Any) -> Any:
    try:
        if key in _FLOAT_KEYS:
            return float(value)
        if key in _INT_KEYS:
            return int(value)
    except (TypeError, ValueError) as e:
        raise MalformedDescriptorError(config_path, f"invalid value for {key}: {value!r}") from e
    if key in _BOOL_KEYS:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if key == "package_sources":
        return [str(v) for v in (value or [])]
    return value


def _file_overrides(config_path: Optional[str]) -> Dict[str, Any]:
    section = load_config_file(config_path)
    known = {f.name for f in dataclasses.fields(PreviewSettings)}
    overrides: Dict[str, Any] = {}
    for key, value in section.items():
        if key == "nuget_config":
            overrides["package_sources"] = load_package_sources(os.path.expanduser(str(value)))
        elif key in known:
            overrides[key] = _coerce(config_path or "", key, value)
        else:
            logger.warning("Ignoring unknown config key: %s", key)
    return overrides


def settings_from_args(args: Any) -> PreviewSettings:
    """Settings from parsed CLI arguments, a config file and the environment."""
    settings = PreviewSettings.from_env()
    settings = settings.with_overrides(**_file_overrides(getattr(args, "CONFIG", None)))

    cli: Dict[str, Any] = {
        "dotnet_path": getattr(args, "DOTNET", None),
        "msbuild_verbosity": getattr(args, "VERBOSITY", None),
        "dg_timeout": getattr(args, "TIMEOUT", None),
        "max_concurrency": getattr(args, "MAX_CONCURRENCY", None),
    }
    if getattr(args, "NO_RECURSIVE", False):
        cli["recursive"] = False
    nuget_config = getattr(args, "NUGET_CONFIG", None)
    if nuget_config:
        cli["package_sources"] = load_package_sources(nuget_config)
    extra_sources = getattr(args, "SOURCES", None) or []
    if extra_sources:
        base = cli.get("package_sources") or list(settings.package_sources)
        cli["package_sources"] = base + [s for s in extra_sources if s not in base]
    return settings.with_overrides(**cli)
