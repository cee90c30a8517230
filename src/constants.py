"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    USAGE_ERROR = 2
    TOOL_ERROR = 3
    TOOL_TIMEOUT = 4
    INTERRUPTED = 130


class ProjectFormat(Enum):
    """Project description formats recognized by the normalizers.

    Args:
        Enum (string): Format tag of a project description.
    """

    PACKAGES_CONFIG = "PackagesConfig"
    PROJECT_JSON = "ProjectJson"
    PACKAGE_REFERENCE = "PackageReference"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PACKAGES_CONFIG_FILE = "packages.config"
    PROJECT_JSON_FILE = "project.json"
    MSBUILD_PROJECT_EXTENSION_SUFFIX = "proj"
    NUGET_CONFIG_FILE = "NuGet.Config"

    # MSBuild item types and metadata
    ITEM_PACKAGE_REFERENCE = "PackageReference"
    ITEM_PROJECT_REFERENCE = "ProjectReference"
    METADATA_VERSION = "Version"
    METADATA_INCLUDE_ASSETS = "IncludeAssets"
    METADATA_EXCLUDE_ASSETS = "ExcludeAssets"
    METADATA_PRIVATE_ASSETS = "PrivateAssets"

    # MSBuild properties, in the order they are consulted
    PROP_TARGET_FRAMEWORK = "TargetFramework"
    PROP_TARGET_FRAMEWORKS = "TargetFrameworks"
    PROP_NUGET_TARGET_FRAMEWORK = "NuGetTargetFramework"
    PROP_TARGET_FRAMEWORK_MONIKER = "TargetFrameworkMoniker"
    PROP_TARGET_FRAMEWORK_IDENTIFIER = "TargetFrameworkIdentifier"
    PROP_TARGET_FRAMEWORK_VERSION = "TargetFrameworkVersion"
    PROP_TARGET_FRAMEWORK_PROFILE = "TargetFrameworkProfile"
    PROP_PACKAGE_TARGET_FALLBACK = "PackageTargetFallback"
    PROP_BASE_INTERMEDIATE_OUTPUT_PATH = "BaseIntermediateOutputPath"
    PROP_RUNTIME_IDENTIFIER = "RuntimeIdentifier"
    PROP_RUNTIME_IDENTIFIERS = "RuntimeIdentifiers"
    PROP_RUNTIME_SUPPORTS = "RuntimeSupports"

    # External build tool
    DOTNET_EXECUTABLE = "dotnet"
    RESTORE_GRAPH_TARGET = "GenerateRestoreGraphFile"
    RESTORE_GRAPH_OUTPUT_PROPERTY = "RestoreGraphOutputPath"
    RESTORE_RECURSIVE_PROPERTY = "RestoreRecursive"
    RESTORE_SOURCES_PROPERTY = "RestoreSources"
    DEFAULT_MSBUILD_VERBOSITY = "q"
    DG_FILE_EXTENSION = ".dg"
    SCRATCH_DIR_NAME = "NuGet-Scratch"
    DG_GENERATION_TIMEOUT_SEC = 5.0
    DG_FORMAT_VERSION = 1

    # Environment
    ENV_MSBUILD_VERBOSITY = "NUGET_RESTORE_MSBUILD_VERBOSITY"
    ENV_LOG_LEVEL = "DGPREVIEW_LOG_LEVEL"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    DEFAULT_MAX_CONCURRENCY = 8
    CONFIG_SECTION = "dgpreview"
