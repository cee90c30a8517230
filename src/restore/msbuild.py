"""Derive a dependency graph by running the external build tool.

``dotnet msbuild <project> /t:GenerateRestoreGraphFile`` writes the graph to
a file in the scratch directory; the file is read back and always removed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
from typing import List, Optional

from common.errors import (
    ExternalToolFailureError,
    ExternalToolNotFoundError,
    ExternalToolTimeoutError,
)
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from projectmodel.dgspec import load_dependency_graph
from projectmodel.models import DependencyGraphSpec
from settings import PreviewSettings

logger = logging.getLogger(__name__)


class TempFile:
    """Empty, uniquely named file in a scratch directory, removed on exit."""

    def __init__(self, extension: str, directory: str):
        if not extension:
            raise ValueError("extension must not be empty")
        self.extension = extension
        self.directory = directory
        self.path: Optional[str] = None

    def __enter__(self) -> str:
        os.makedirs(self.directory, exist_ok=True)
        fd, path = tempfile.mkstemp(suffix=self.extension, dir=self.directory)
        os.close(fd)
        self.path = path
        return path

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.path and os.path.exists(self.path):
            try:
                os.unlink(self.path)
            except OSError:
                logger.warning("Failed to remove temp file: %s", self.path)


def build_msbuild_arguments(
    settings: PreviewSettings, project_path: str, output_path: str, recursive: bool
) -> List[str]:
    args = [
        settings.dotnet_path,
        "msbuild",
        project_path,
        f"/t:{Constants.RESTORE_GRAPH_TARGET}",
        f"/v:{settings.msbuild_verbosity or Constants.DEFAULT_MSBUILD_VERBOSITY}",
        f"/p:{Constants.RESTORE_GRAPH_OUTPUT_PROPERTY}={output_path}",
    ]
    if recursive:
        args.append(f"/p:{Constants.RESTORE_RECURSIVE_PROPERTY}=true")
    if settings.package_sources:
        # msbuild splits unescaped semicolons into separate properties
        sources = "%3B".join(settings.package_sources)
        args.append(f"/p:{Constants.RESTORE_SOURCES_PROPERTY}={sources}")
    return args


def _kill(process: asyncio.subprocess.Process) -> None:
    # the process may already have exited
    with contextlib.suppress(ProcessLookupError):
        process.kill()


async def run_build_tool(args: List[str], timeout: float) -> None:
    """Run the build tool, raising typed errors on timeout or failure.

    The process is killed on timeout and when the awaiting task is cancelled.
    """
    command = " ".join(args[:2])
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise ExternalToolNotFoundError(args[0]) from e

    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError:
        _kill(process)
        await process.wait()
        raise ExternalToolTimeoutError(command, timeout) from None
    except asyncio.CancelledError:
        _kill(process)
        await process.wait()
        raise

    if process.returncode != 0:
        raise ExternalToolFailureError(
            command, process.returncode, (stderr or b"").decode("utf-8", errors="replace")
        )


def _read_graph_file(path: str) -> DependencyGraphSpec:
    if not os.path.isfile(path) or os.path.getsize(path) == 0:
        return DependencyGraphSpec()
    return load_dependency_graph(path)


async def derive_dependency_graph(
    project_path: str,
    settings: PreviewSettings,
    timeout: Optional[float] = None,
    recursive: Optional[bool] = None,
) -> DependencyGraphSpec:
    """Materialize the dependency graph of ``project_path`` with the build tool.

    Returns an empty graph if the tool succeeds without writing one.

    Raises:
        ExternalToolTimeoutError: The tool ran longer than ``timeout`` seconds.
        ExternalToolFailureError: The tool exited non-zero or could not start.
        MalformedDescriptorError: The emitted graph file could not be parsed.
    """
    timeout = settings.dg_timeout if timeout is None else timeout
    recursive = settings.recursive if recursive is None else recursive

    with TempFile(Constants.DG_FILE_EXTENSION, settings.scratch_dir) as dg_path:
        args = build_msbuild_arguments(settings, project_path, dg_path, recursive)
        logger.debug("Running: %s", " ".join(args))
        with Timer() as timer:
            await run_build_tool(args, timeout)
        graph = await asyncio.to_thread(_read_graph_file, dg_path)

    if is_debug_enabled(logger):
        logger.debug(
            "Derived dependency graph",
            extra=extra_context(
                event="dg_generated",
                component="msbuild",
                target=project_path,
                count=len(graph.projects),
                duration_ms=timer.duration_ms(),
            ),
        )
    return graph
