"""Tests for dependency-graph derivation through the external build tool.

A small script stands in for ``dotnet``; it reads the output path from the
``/p:RestoreGraphOutputPath=`` argument the same way the real tool does.
"""

import asyncio
import glob
import os
import stat
import sys
import tempfile
from unittest.mock import patch

import pytest

from common.errors import (
    ExternalToolFailureError,
    ExternalToolNotFoundError,
    ExternalToolTimeoutError,
    MalformedDescriptorError,
)
from restore.msbuild import TempFile, build_msbuild_arguments, derive_dependency_graph
from settings import PreviewSettings

pytestmark = pytest.mark.skipif(sys.platform.startswith("win"), reason="fake tool is a POSIX script")

GRAPH = (
    '{"format": 1, "restore": {"/p/App.csproj": {}}, "projects": {"/p/App.csproj": {'
    '"restore": {"projectUniqueName": "/p/App.csproj", "projectPath": "/p/App.csproj",'
    ' "projectStyle": "PackageReference"},'
    ' "frameworks": {"net6.0": {"dependencies": {"A": "1.0.0"}}}}}}'
)

SCRIPT = """#!{python}
import os, sys, time
out = next(a.split("=", 1)[1] for a in sys.argv if a.startswith("/p:RestoreGraphOutputPath="))
{body}
"""

BODIES = {
    "ok": "open(out, 'w').write({graph!r})",
    "silent": "pass",
    "fail": "sys.stderr.write('error MSB1009: Project file does not exist.')\nsys.exit(1)",
    "hang": "time.sleep(30)",
    "pidfile": "open(out + '.pid', 'w').write(str(os.getpid()))\ntime.sleep(30)",
    "garbage": "open(out, 'w').write('{{not json')",
}


def _fake_tool(tmpdir, mode):
    path = os.path.join(tmpdir, f"dotnet-{mode}")
    body = BODIES[mode].format(graph=GRAPH)
    with open(path, "w", encoding="utf-8") as f:
        f.write(SCRIPT.format(python=sys.executable, body=body))
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR)
    return path


def _settings(tmpdir, mode, **kwargs):
    return PreviewSettings(
        dotnet_path=_fake_tool(tmpdir, mode),
        scratch_dir=os.path.join(tmpdir, "scratch"),
        **kwargs,
    )


def _leftovers(settings):
    return glob.glob(os.path.join(settings.scratch_dir, "*.dg"))


class TestDeriveDependencyGraph:
    """Test graph derivation and scratch-file cleanup."""

    def test_success(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, "ok")
            graph = asyncio.run(derive_dependency_graph("/p/App.csproj", settings))
            assert graph.restore == ["/p/App.csproj"]
            assert graph.get_project_spec("/p/App.csproj").frameworks[0].short_folder_name == "net6.0"
            assert _leftovers(settings) == []

    def test_no_output_is_empty_graph(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, "silent")
            graph = asyncio.run(derive_dependency_graph("/p/App.csproj", settings))
            assert graph.projects == {}
            assert _leftovers(settings) == []

    def test_non_zero_exit(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, "fail")
            with pytest.raises(ExternalToolFailureError) as exc:
                asyncio.run(derive_dependency_graph("/p/App.csproj", settings))
            assert exc.value.exit_code == 1
            assert "MSB1009" in exc.value.stderr
            assert _leftovers(settings) == []

    def test_timeout_kills_tool(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, "hang")
            with pytest.raises(ExternalToolTimeoutError) as exc:
                asyncio.run(derive_dependency_graph("/p/App.csproj", settings, timeout=0.5))
            assert exc.value.timeout == 0.5
            assert _leftovers(settings) == []

    def test_cancellation_kills_tool(self):
        async def _cancel_once_started(settings):
            task = asyncio.create_task(derive_dependency_graph("/p/App.csproj", settings, timeout=30))
            for _ in range(200):
                if glob.glob(os.path.join(settings.scratch_dir, "*.pid")):
                    break
                await asyncio.sleep(0.05)
            task.cancel()
            await task

        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, "pidfile")
            with pytest.raises(asyncio.CancelledError):
                asyncio.run(_cancel_once_started(settings))
            (pid_file,) = glob.glob(os.path.join(settings.scratch_dir, "*.pid"))
            with open(pid_file, encoding="utf-8") as f:
                pid = int(f.read())
            with pytest.raises(ProcessLookupError):
                os.kill(pid, 0)
            assert _leftovers(settings) == []

    def test_unparsable_graph(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = _settings(tmpdir, "garbage")
            with pytest.raises(MalformedDescriptorError):
                asyncio.run(derive_dependency_graph("/p/App.csproj", settings))
            assert _leftovers(settings) == []

    def test_missing_tool(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = PreviewSettings(
                dotnet_path=os.path.join(tmpdir, "no-such-dotnet"),
                scratch_dir=os.path.join(tmpdir, "scratch"),
            )
            with pytest.raises(ExternalToolNotFoundError):
                asyncio.run(derive_dependency_graph("/p/App.csproj", settings))
            assert _leftovers(settings) == []


class TestTempFile:
    """Test the scratch file context manager."""

    def test_created_then_removed(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            scratch = os.path.join(tmpdir, "nested", "scratch")
            with TempFile(".dg", scratch) as path:
                assert os.path.isfile(path)
                assert path.endswith(".dg")
                assert os.path.dirname(path) == scratch
            assert not os.path.exists(path)

    def test_removed_on_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(RuntimeError):
                with TempFile(".dg", tmpdir) as path:
                    raise RuntimeError("boom")
            assert not os.path.exists(path)

    def test_names_are_unique(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with TempFile(".dg", tmpdir) as first, TempFile(".dg", tmpdir) as second:
                assert first != second

    def test_failed_removal_is_logged(self, caplog):
        with tempfile.TemporaryDirectory() as tmpdir:
            with caplog.at_level("WARNING", logger="restore.msbuild"):
                with patch("restore.msbuild.os.unlink", side_effect=OSError("busy")):
                    with TempFile(".dg", tmpdir) as path:
                        pass
            assert os.path.exists(path)
        assert any(
            r.levelname == "WARNING" and "Failed to remove temp file" in r.getMessage()
            for r in caplog.records
        )

    def test_extension_required(self):
        with pytest.raises(ValueError):
            TempFile("", "/tmp")


def test_build_msbuild_arguments():
    settings = PreviewSettings(dotnet_path="dotnet", msbuild_verbosity="n")
    args = build_msbuild_arguments(settings, "/p/App.csproj", "/tmp/x.dg", recursive=True)
    assert args == [
        "dotnet", "msbuild", "/p/App.csproj", "/t:GenerateRestoreGraphFile", "/v:n",
        "/p:RestoreGraphOutputPath=/tmp/x.dg", "/p:RestoreRecursive=true",
    ]
    assert "/p:RestoreRecursive=true" not in build_msbuild_arguments(
        settings, "/p/App.csproj", "/tmp/x.dg", recursive=False)


def test_build_msbuild_arguments_with_sources():
    settings = PreviewSettings(dotnet_path="dotnet", package_sources=["https://a/", "/local/feed"])
    args = build_msbuild_arguments(settings, "/p/App.csproj", "/tmp/x.dg", recursive=False)
    assert args[-1] == "/p:RestoreSources=https://a/%3B/local/feed"
