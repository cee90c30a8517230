"""Argument parsing for dgpreview."""

import argparse


def _add_common(parser):
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write JSON output to this file instead of stdout",
                        action="store",
                        type=str)
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="YAML config file (optional 'dgpreview:' section)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)


def _add_sources(parser):
    parser.add_argument("--nuget-config",
                        dest="NUGET_CONFIG",
                        help="NuGet.Config file to read enabled package sources from",
                        action="store",
                        type=str)
    parser.add_argument("--source",
                        dest="SOURCES",
                        help="Additional package source; may be repeated",
                        action="append",
                        type=str,
                        default=[])


def build_parser():
    """Build the top-level parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="dgpreview",
        description="Dependency graph normalization and restore preview for NuGet projects",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True

    scan = subparsers.add_parser(
        "scan", help="Read a packages.config, project.json or project file")
    scan.add_argument("FILE", help="File to read", type=str)
    _add_common(scan)

    graph = subparsers.add_parser(
        "graph", help="Aggregate projects into a dependency graph")
    graph.add_argument("PROJECTS", nargs="+", help="Project files", type=str)
    graph.add_argument("--max-concurrency",
                       dest="MAX_CONCURRENCY",
                       help="Projects normalized concurrently",
                       action="store",
                       type=int)
    _add_common(graph)
    _add_sources(graph)

    dgspec = subparsers.add_parser(
        "dgspec", help="Generate a dependency graph file with the build tool")
    dgspec.add_argument("PROJECT", help="Project file", type=str)
    dgspec.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Seconds to wait for the build tool",
                        action="store",
                        type=float)
    dgspec.add_argument("--no-recursive",
                        dest="NO_RECURSIVE",
                        help="Do not restore referenced projects as roots",
                        action="store_true")
    dgspec.add_argument("--verbosity",
                        dest="VERBOSITY",
                        help="MSBuild verbosity (default: q)",
                        action="store",
                        type=str)
    dgspec.add_argument("--dotnet",
                        dest="DOTNET",
                        help="Path to the dotnet executable",
                        action="store",
                        type=str)
    _add_common(dgspec)
    _add_sources(dgspec)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
