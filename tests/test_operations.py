"""Tests for spec cloning, graph helpers and dependency edits."""

from projectmodel.frameworks import parse_framework
from projectmodel.models import (
    DependencyGraphSpec,
    LibraryDependency,
    PackageSpec,
    ProjectRestoreMetadata,
    ProjectRestoreMetadataFrameworkInfo,
    ProjectRestoreReference,
    TargetFrameworkInfo,
    UnresolvedReference,
)
from projectmodel.operations import add_or_update_dependency, has_dependency, remove_dependency
from constants import ProjectFormat
from versioning import parse_version_range


def _spec(path="/src/App/App.csproj", frameworks=("net6.0", "net48"), references=()):
    infos = [TargetFrameworkInfo(parse_framework(fw)) for fw in frameworks]
    metadata = ProjectRestoreMetadata(
        output_type=ProjectFormat.PACKAGE_REFERENCE,
        project_unique_name=path,
        project_path=path,
        project_name="App",
        target_frameworks=[
            ProjectRestoreMetadataFrameworkInfo(
                info.framework, [ProjectRestoreReference(ref, ref) for ref in references])
            for info in infos
        ],
    )
    return PackageSpec(name="App", file_path=path, target_frameworks=infos, restore_metadata=metadata)


class TestClone:
    """Test clone-before-mutate."""

    def test_clone_shares_no_lists(self):
        original = _spec()
        clone = original.clone()
        add_or_update_dependency(clone, "PackageX", parse_version_range("1.0.0"))

        assert clone != original
        assert all(not info.dependencies for info in original.target_frameworks)
        assert clone.target_frameworks[0].dependencies is not original.target_frameworks[0].dependencies


class TestAddOrUpdate:
    """Test adding and updating dependencies."""

    def test_add_to_every_framework(self):
        spec = _spec()
        add_or_update_dependency(spec, "PackageX", parse_version_range("1.0.0"))
        assert [len(info.dependencies) for info in spec.target_frameworks] == [1, 1]
        assert has_dependency(spec, "packagex")

    def test_add_to_selected_frameworks(self):
        spec = _spec()
        add_or_update_dependency(spec, "PackageX", parse_version_range("1.0.0"), [parse_framework("net6.0")])
        assert [len(info.dependencies) for info in spec.target_frameworks] == [1, 0]

    def test_existing_name_is_updated_not_duplicated(self):
        spec = _spec()
        add_or_update_dependency(spec, "PackageX", parse_version_range("1.0.0"))
        add_or_update_dependency(spec, "packagex", parse_version_range("2.0.0"))
        deps = spec.target_frameworks[0].dependencies
        assert len(deps) == 1
        assert deps[0].version_range.to_normalized_string() == "[2.0.0, )"

    def test_top_level_dependency_updated_in_place(self):
        spec = _spec()
        spec.dependencies.append(LibraryDependency("Shared", parse_version_range("1.0")))
        add_or_update_dependency(spec, "Shared", parse_version_range("1.5"))
        assert spec.dependencies[0].version_range.to_normalized_string() == "[1.5.0, )"
        assert all(not info.dependencies for info in spec.target_frameworks)


class TestRemove:
    """Test removing dependencies."""

    def test_remove_everywhere(self):
        spec = _spec()
        add_or_update_dependency(spec, "PackageX", parse_version_range("1.0.0"))
        assert remove_dependency(spec, "PACKAGEX")
        assert not has_dependency(spec, "PackageX")

    def test_remove_missing(self):
        assert not remove_dependency(_spec(), "Nope")


class TestDependencyGraphSpec:
    """Test the solution-wide graph helpers."""

    def test_with_project_leaves_original_graph_alone(self):
        spec = _spec()
        graph = DependencyGraphSpec()
        graph.add_project(spec)
        graph.add_restore(spec.unique_name)

        updated = spec.clone()
        add_or_update_dependency(updated, "PackageX", parse_version_range("1.0.0"))
        mutated = graph.with_project(updated)

        assert graph.get_project_spec(spec.unique_name) is spec
        assert mutated.get_project_spec(spec.unique_name) is updated
        assert mutated.restore == graph.restore

    def test_dangling_references_are_data(self):
        app = _spec(references=("/src/Lib/Lib.csproj", "/src/Missing/Missing.csproj"))
        lib = _spec(path="/src/Lib/Lib.csproj", frameworks=("netstandard2.0",))
        graph = DependencyGraphSpec()
        graph.add_project(app)
        graph.add_project(lib)

        assert graph.unresolved_references() == [
            UnresolvedReference("/src/App/App.csproj", "/src/Missing/Missing.csproj")
        ]
        assert [s.unique_name for s in graph.closure(app.unique_name)] == [
            "/src/App/App.csproj", "/src/Lib/Lib.csproj"
        ]
