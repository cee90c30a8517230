"""dgpreview command-line entry point."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from args import parse_args
from cli_config import settings_from_args
from common.errors import (
    DgPreviewError,
    ExternalToolError,
    ExternalToolTimeoutError,
    MalformedDescriptorError,
)
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from graph import FileSystemProjectDataProvider, aggregate_projects
from normalizers import scan_content
from projectmodel import dump_dependency_graph
from restore import derive_dependency_graph

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    configure_logging(getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)


def _write_output(document: Any, path: Optional[str]) -> None:
    text = json.dumps(document, indent=2, default=str)
    if path:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info("Wrote %s", path)
    else:
        sys.stdout.write(text + "\n")


def run_scan(args: Any) -> Any:
    scanned = scan_content(args.FILE)
    if scanned is None:
        raise ValueError(f"Unsupported file: {args.FILE}")
    fmt, data = scanned
    if isinstance(data, list):
        data = [dataclasses.asdict(record) for record in data]
    return {"format": fmt.value, "data": data}


async def run_graph(args: Any) -> Dict[str, Any]:
    settings = settings_from_args(args)
    aggregate = await aggregate_projects(
        FileSystemProjectDataProvider(), args.PROJECTS, settings.max_concurrency)
    references: List[Dict[str, Any]] = [
        {"id": key.package_id, "version": key.version, "projects": list(projects)}
        for key, projects in aggregate.package_references.items()
    ]
    return {
        "projects": [
            {"name": d.name, "path": d.path, "format": d.format.value} for d in aggregate.descriptors
        ],
        "dependencyGraph": dump_dependency_graph(aggregate.to_dependency_graph_spec()),
        "packageReferences": references,
        "packageSources": list(settings.package_sources),
        "unresolvedReferences": [
            {"project": r.project_unique_name, "reference": r.reference_path}
            for r in aggregate.unresolved_references
        ],
    }


async def run_dgspec(args: Any) -> Dict[str, Any]:
    settings = settings_from_args(args)
    graph = await derive_dependency_graph(args.PROJECT, settings)
    return dump_dependency_graph(graph)


def main(argv: Optional[List[str]] = None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )

    exit_code = ExitCodes.SUCCESS
    try:
        if args.COMMAND == "scan":
            document = run_scan(args)
        elif args.COMMAND == "graph":
            document = asyncio.run(run_graph(args))
        else:
            document = asyncio.run(run_dgspec(args))
        _write_output(document, getattr(args, "OUTPUT", None))
    except MalformedDescriptorError as e:
        logger.error("%s", e)
        exit_code = ExitCodes.FILE_ERROR
    except ExternalToolTimeoutError as e:
        logger.error("%s", e)
        exit_code = ExitCodes.TOOL_TIMEOUT
    except ExternalToolError as e:
        logger.error("%s", e)
        exit_code = ExitCodes.TOOL_ERROR
    except DgPreviewError as e:
        logger.error("%s", e)
        exit_code = ExitCodes.TOOL_ERROR
    except ValueError as e:
        logger.error("%s", e)
        exit_code = ExitCodes.USAGE_ERROR
    except OSError as e:
        logger.error("%s", e)
        exit_code = ExitCodes.FILE_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = ExitCodes.INTERRUPTED

    sys.exit(exit_code.value)


if __name__ == "__main__":
    main()
