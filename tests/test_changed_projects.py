"""
Affected project detection tests.
"""

import os
import types

import pytest

from msbuild_affected.core import config
from msbuild_affected.core.models import ProjectModel, ProjectNode
from msbuild_affected.core.paths import PathComparer
from msbuild_affected.parsing.graph_builder import ProjectGraphBuilder
from msbuild_affected.prediction.changed_projects import (
    PredictionChangedProjectsProvider,
    get_affected_projects,
    list_affected_projects,
)
from msbuild_affected.prediction.collector import PredictionIndex
from msbuild_affected.prediction.executor import collect_predictions
from msbuild_affected.prediction.predictors import (
    ALL_PROJECT_PREDICTORS,
    DEFAULT_REGISTRY,
    OutDirOrOutputPathPredictor,
    ProjectFileAndImportsGraphPredictor,
    ProjectPredictor,
    PredictorRegistry,
)

from conftest import repo_path, sdk_project


@pytest.fixture
def graph(repo):
    return ProjectGraphBuilder().build([
        repo_path(repo, "app/app.csproj"),
        repo_path(repo, "tool/tool.csproj"),
    ])


def affected_paths(graph, files, **kwargs):
    return [node.full_path for node in get_affected_projects(graph, files, **kwargs)]


class TestPredictionIndex:

    def test_index_contains_sources_project_files_and_imports(self, repo, graph):
        index = collect_predictions(graph)
        lib = graph.get_node(repo_path(repo, "lib/lib.csproj"))
        app = graph.get_node(repo_path(repo, "app/app.csproj"))

        lib_files = index.files_for(lib)
        assert repo_path(repo, "lib/Foo.cs") in lib_files
        assert repo_path(repo, "lib/lib.csproj") in lib_files
        assert repo_path(repo, "Directory.Build.props") in lib_files
        assert repo_path(repo, "lib/obj/Generated.cs") not in lib_files

        app_files = index.files_for(app)
        assert repo_path(repo, "app/Program.cs") in app_files
        # referenced project files arrive through the graph predictor
        assert repo_path(repo, "lib/lib.csproj") in app_files
        assert repo_path(repo, "lib/Foo.cs") not in app_files

    def test_every_node_has_an_entry(self, graph):
        index = collect_predictions(graph)

        assert len(index) == len(graph.nodes)

    def test_index_keys_nodes_with_its_comparer(self, tmp_path):
        upper = ProjectNode.from_model(ProjectModel(full_path=str(tmp_path / "App" / "App.csproj")))
        lower = ProjectNode.from_model(ProjectModel(full_path=str(tmp_path / "app" / "app.csproj")))
        program = str(tmp_path / "app" / "Program.cs")
        index = PredictionIndex(PathComparer(case_sensitive=False))

        index.ensure_node(upper)
        index.add(lower, program)

        assert len(index) == 1
        assert list(index) == [upper]
        assert index.files_for(upper) == {program}
        assert index.nodes_containing(str(tmp_path / "APP" / "PROGRAM.CS")) == [upper]

    def test_repository_path_filters_outside_inputs(self, make_file, tmp_path):
        shared = make_file("outside/shared.props", "<Project />")
        project = make_file("repo/a/a.csproj", sdk_project(body='  <Import Project="../../outside/shared.props" />'))
        graph = ProjectGraphBuilder().build([project])
        node = graph.nodes[0]

        assert shared in collect_predictions(graph).files_for(node)
        assert shared not in collect_predictions(graph, repository_path=str(tmp_path / "repo")).files_for(node)


class TestRegistry:

    def test_default_registry_excludes_output_predictor(self):
        assert any(isinstance(p, OutDirOrOutputPathPredictor) for p in ALL_PROJECT_PREDICTORS)
        assert not any(isinstance(p, OutDirOrOutputPathPredictor) for p in DEFAULT_REGISTRY.project_predictors)
        assert len(DEFAULT_REGISTRY.project_predictors) == len(ALL_PROJECT_PREDICTORS) - 1

    def test_default_registry_has_graph_predictor(self):
        assert [type(p) for p in DEFAULT_REGISTRY.graph_predictors] == [ProjectFileAndImportsGraphPredictor]

    def test_default_reuses_catalog_instances(self):
        assert PredictorRegistry.default() == DEFAULT_REGISTRY


class TestGetAffectedProjects:

    def test_source_file_change(self, repo, graph):
        assert affected_paths(graph, [repo_path(repo, "lib/Foo.cs")]) == [repo_path(repo, "lib/lib.csproj")]

    def test_project_file_change_marks_referencing_projects(self, repo, graph):
        result = affected_paths(graph, [repo_path(repo, "lib/lib.csproj")])

        assert result == [repo_path(repo, "lib/lib.csproj"), repo_path(repo, "app/app.csproj")]

    def test_shared_import_marks_every_project(self, repo, graph):
        result = affected_paths(graph, [repo_path(repo, "Directory.Build.props")])

        assert sorted(result) == sorted(node.full_path for node in graph.nodes)

    def test_package_pins_are_excluded(self, repo, graph):
        pins = repo_path(repo, "Directory.Packages.props")
        lib = graph.get_node(repo_path(repo, "lib/lib.csproj"))
        assert pins in collect_predictions(graph).files_for(lib)

        assert affected_paths(graph, [pins]) == []

    def test_excluded_files_are_configurable(self, repo, graph):
        pins = repo_path(repo, "Directory.Packages.props")
        provider = PredictionChangedProjectsProvider(graph, excluded_files=[])

        assert len(list(provider.get_referencing_projects([pins]))) == len(graph.nodes)

    def test_direct_and_predicted_matches_without_duplicates(self, repo, graph):
        files = [
            repo_path(repo, "tool/tool.csproj"),
            repo_path(repo, "app/Program.cs"),
            repo_path(repo, "tool/Tool.cs"),
            repo_path(repo, "app/Program.cs"),
        ]

        result = affected_paths(graph, files)

        assert result == [repo_path(repo, "tool/tool.csproj"), repo_path(repo, "app/app.csproj")]

    def test_unrelated_file(self, repo, graph, make_file):
        readme = make_file("repo/README.md", "# readme")

        assert affected_paths(graph, [readme]) == []

    def test_no_changed_files(self, graph):
        assert affected_paths(graph, []) == []

    def test_relative_changed_files_use_cwd(self, repo, graph, monkeypatch):
        monkeypatch.chdir(repo)

        assert affected_paths(graph, [os.path.join("lib", "Foo.cs")]) == [repo_path(repo, "lib/lib.csproj")]

    def test_project_file_not_in_graph(self, repo, graph, make_file):
        other = make_file("repo/other/other.csproj", sdk_project())

        assert affected_paths(graph, [other]) == []

    def test_repeated_calls_give_same_result(self, repo, graph):
        files = [repo_path(repo, "lib/lib.csproj"), repo_path(repo, "tool/Tool.cs")]

        assert affected_paths(graph, files) == affected_paths(graph, files)

    def test_case_insensitive_comparer(self, repo, graph):
        comparer = PathComparer(case_sensitive=False)
        changed = repo_path(repo, "tool/TOOL.cs")

        assert affected_paths(graph, [changed], comparer=comparer) == [repo_path(repo, "tool/tool.csproj")]

    def test_result_is_lazy(self, repo, graph):
        result = get_affected_projects(graph, [repo_path(repo, "lib/lib.csproj")])

        assert isinstance(result, types.GeneratorType)
        assert next(result).full_path == repo_path(repo, "lib/lib.csproj")
        assert next(result).full_path == repo_path(repo, "app/app.csproj")
        with pytest.raises(StopIteration):
            next(result)

    def test_list_affected_projects(self, repo, graph):
        assert [n.full_path for n in list_affected_projects(graph, [repo_path(repo, "lib/Foo.cs")])] == [
            repo_path(repo, "lib/lib.csproj")
        ]

    def test_custom_predictor(self, repo, graph):

        class ReadmePredictor(ProjectPredictor):
            def predict_inputs_and_outputs(self, project, reporter):
                if project.name == "tool":
                    reporter.report_input_file("README.md")

        registry = PredictorRegistry(graph_predictors=(), project_predictors=(ReadmePredictor(),))

        result = affected_paths(graph, [repo_path(repo, "tool/README.md")], registry=registry)

        assert result == [repo_path(repo, "tool/tool.csproj")]

    def test_predictor_failures_propagate(self, repo, graph):

        class BrokenPredictor(ProjectPredictor):
            def predict_inputs_and_outputs(self, project, reporter):
                raise RuntimeError("prediction failed")

        registry = PredictorRegistry(graph_predictors=(), project_predictors=(BrokenPredictor(),))

        with pytest.raises(RuntimeError, match="prediction failed"):
            list(get_affected_projects(graph, [repo_path(repo, "lib/Foo.cs")], registry=registry))


def test_configured_exclusions_are_read_at_construction(repo, graph, monkeypatch):
    monkeypatch.setattr(config, "EXCLUDED_FILES", ["Foo.cs"])

    assert affected_paths(graph, [repo_path(repo, "lib/Foo.cs")]) == []


class TestSharedBuildFiles:

    @pytest.fixture
    def shared_graph(self, make_file):
        make_file("repo/Directory.Build.props", """<Project>
  <PropertyGroup>
    <RepoRoot>$(MSBuildThisFileDirectory)</RepoRoot>
  </PropertyGroup>
  <ItemGroup>
    <Compile Include="$(RepoRoot)shared/Version.cs" />
  </ItemGroup>
</Project>
""")
        make_file("repo/build/common.props", "<Project />")
        make_file("repo/shared/Version.cs", "class Version {}")
        a = make_file("repo/a/a.csproj", sdk_project(body='  <Import Project="$(RepoRoot)build/common.props" />'))
        b = make_file("repo/b/b.csproj", sdk_project())
        return ProjectGraphBuilder().build([a, b])

    def test_import_resolved_through_inherited_property(self, shared_graph, tmp_path):
        changed = os.path.join(str(tmp_path), "repo", "build", "common.props")

        assert affected_paths(shared_graph, [changed]) == [os.path.join(str(tmp_path), "repo", "a", "a.csproj")]

    def test_source_file_added_by_shared_props(self, shared_graph, tmp_path):
        changed = os.path.join(str(tmp_path), "repo", "shared", "Version.cs")

        assert affected_paths(shared_graph, [changed]) == [
            os.path.join(str(tmp_path), "repo", "a", "a.csproj"),
            os.path.join(str(tmp_path), "repo", "b", "b.csproj"),
        ]
