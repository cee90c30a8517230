"""Typed errors raised at the boundaries of the graph and restore layers.

Missing descriptor files are not errors: readers return ``None`` for them.
Dangling project references and incompatible frameworks are modelled as
data (``UnresolvedReference`` and ``CompatibilityCheckResult``).
"""

from __future__ import annotations

from typing import Optional


class DgPreviewError(Exception):
    """Base class for all errors raised by this package."""


class MalformedDescriptorError(DgPreviewError):
    """Raised when a project description file is present but cannot be parsed."""

    def __init__(self, path: str, detail: str):
        super().__init__(f"Malformed descriptor {path}: {detail}")
        self.path = path
        self.detail = detail


InvalidDescriptorError = MalformedDescriptorError


class ExternalToolError(DgPreviewError):
    """Base class for failures of the external build tool."""


class ExternalToolTimeoutError(ExternalToolError):
    """Raised when the external build tool does not exit within its timeout."""

    def __init__(self, command: str, timeout: float):
        super().__init__(f"{command} timed out after {timeout:g} seconds and was terminated")
        self.command = command
        self.timeout = timeout


class ExternalToolFailureError(ExternalToolError):
    """Raised when the external build tool exits non-zero or cannot be started."""

    def __init__(self, command: str, exit_code: Optional[int], stderr: str):
        detail = stderr.strip() or f"exit code {exit_code}"
        super().__init__(f"{command} failed: {detail}")
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class ExternalToolNotFoundError(ExternalToolFailureError):
    """Raised when the external build tool binary cannot be located."""

    def __init__(self, command: str):
        super().__init__(command, None, f"executable not found: {command}")
