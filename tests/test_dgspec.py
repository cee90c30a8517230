"""Tests for reading and writing dependency-graph files."""

import json
import os
import tempfile

import pytest

from common.errors import MalformedDescriptorError
from constants import ProjectFormat
from projectmodel.dgspec import (
    dump_dependency_graph,
    load_dependency_graph,
    parse_dependency_graph,
    save_dependency_graph,
)
from projectmodel.frameworks import FallbackFramework
from projectmodel.include_flags import LibraryIncludeFlags

DG_DOCUMENT = {
    "format": 1,
    "restore": {"/src/App/App.csproj": {}},
    "projects": {
        "/src/App/App.csproj": {
            "version": "1.0.0",
            "restore": {
                "projectUniqueName": "/src/App/App.csproj",
                "projectName": "App",
                "projectPath": "/src/App/App.csproj",
                "projectStyle": "PackageReference",
                "outputPath": "/src/App/obj/",
                "crossTargeting": True,
                "originalTargetFrameworks": ["net6.0", "net48"],
                "sources": {"https://api.nuget.org/v3/index.json": {}},
                "frameworks": {
                    "net6.0": {
                        "projectReferences": {
                            "/src/Lib/Lib.csproj": {
                                "projectPath": "/src/Lib/Lib.csproj",
                                "privateAssets": "All",
                            }
                        }
                    },
                    "net48": {"projectReferences": {}},
                },
            },
            "frameworks": {
                "net6.0": {
                    "dependencies": {
                        "Newtonsoft.Json": {"target": "Package", "version": "[13.0.1, )"},
                    }
                },
                "net48": {
                    "imports": ["net461"],
                    "dependencies": {
                        "Serilog": {"target": "Package", "version": "[2.10.0, )", "include": "Compile"},
                    },
                },
            },
            "runtimes": {"win-x64": {}},
        },
        "/src/Lib/Lib.csproj": {
            "restore": {
                "projectUniqueName": "/src/Lib/Lib.csproj",
                "projectPath": "/src/Lib/Lib.csproj",
                "projectStyle": "SomethingNew",
            },
            "frameworks": {"netstandard2.0": {}},
        },
    },
}


class TestParseDependencyGraph:
    """Test conversion of dg documents."""

    def test_projects_and_restore_roots(self):
        graph = parse_dependency_graph(DG_DOCUMENT)

        assert graph.restore == ["/src/App/App.csproj"]
        app = graph.get_project_spec("/src/App/App.csproj")
        assert app.name == "App"
        assert app.restore_metadata.cross_targeting
        assert app.restore_metadata.output_type == ProjectFormat.PACKAGE_REFERENCE
        assert app.restore_metadata.sources == ["https://api.nuget.org/v3/index.json"]
        assert [fw.short_folder_name for fw in app.frameworks] == ["net6.0", "net48"]
        assert app.runtime_graph.runtimes == ("win-x64",)

    def test_imports_wrap_framework(self):
        app = parse_dependency_graph(DG_DOCUMENT).get_project_spec("/src/App/App.csproj")
        net48 = app.target_frameworks[1]
        assert isinstance(net48.framework, FallbackFramework)
        assert net48.dependencies[0].include_type == LibraryIncludeFlags.COMPILE

    def test_project_references(self):
        app = parse_dependency_graph(DG_DOCUMENT).get_project_spec("/src/App/App.csproj")
        references = list(app.restore_metadata.project_references())
        assert len(references) == 1
        assert references[0].private_assets == LibraryIncludeFlags.ALL

    def test_unknown_style_is_package_reference(self):
        lib = parse_dependency_graph(DG_DOCUMENT).get_project_spec("/src/Lib/Lib.csproj")
        assert lib.restore_metadata.output_type == ProjectFormat.PACKAGE_REFERENCE
        assert lib.name == "Lib"

    def test_schema_violation(self):
        with pytest.raises(MalformedDescriptorError):
            parse_dependency_graph({"projects": {"x": {"frameworks": {"net48": {"imports": "net461"}}}}})

    def test_missing_projects(self):
        with pytest.raises(MalformedDescriptorError):
            parse_dependency_graph({"format": 1})


class TestDumpAndLoad:
    """Test writing graphs back out."""

    def test_dump_then_parse_is_equal(self):
        graph = parse_dependency_graph(DG_DOCUMENT)
        again = parse_dependency_graph(dump_dependency_graph(graph))
        assert again == graph

    def test_save_and_load(self):
        graph = parse_dependency_graph(DG_DOCUMENT)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "graph.dg")
            save_dependency_graph(graph, path)
            assert load_dependency_graph(path) == graph

    def test_load_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "graph.dg")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{")
            with pytest.raises(MalformedDescriptorError):
                load_dependency_graph(path)

    def test_dump_shape(self):
        document = dump_dependency_graph(parse_dependency_graph(DG_DOCUMENT))
        assert document["format"] == 1
        assert list(document["restore"]) == ["/src/App/App.csproj"]
        json.dumps(document)
