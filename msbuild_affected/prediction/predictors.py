"""
Input predictors.

A predictor looks at an evaluated project (or at a node of the project graph)
and reports the files the project's build is expected to read or write. The
catalog is an explicit list built once at import time; the default registry
keeps every predictor that reports inputs and drops the output-path one.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from ..core.models import ProjectGraph, ProjectModel, ProjectNode


class PredictionReporter:
    """Forwards predictions for one node and one predictor to a collector."""

    def __init__(self, collector, node: ProjectNode, predictor_name: str):
        self.collector = collector
        self.node = node
        self.predictor_name = predictor_name

    def report_input_file(self, path: str) -> None:
        self.collector.add_input_file(path, self.node, self.predictor_name)

    def report_input_directory(self, path: str) -> None:
        self.collector.add_input_directory(path, self.node, self.predictor_name)

    def report_output_file(self, path: str) -> None:
        self.collector.add_output_file(path, self.node, self.predictor_name)

    def report_output_directory(self, path: str) -> None:
        self.collector.add_output_directory(path, self.node, self.predictor_name)


class ProjectPredictor(ABC):
    """Predicts inputs and outputs from a single evaluated project."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def predict_inputs_and_outputs(self, project: ProjectModel, reporter: PredictionReporter) -> None:
        ...


class ProjectGraphPredictor(ABC):
    """Predicts inputs and outputs of a node using the whole graph."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def predict_inputs_and_outputs(
        self,
        graph: ProjectGraph,
        node: ProjectNode,
        reporter: PredictionReporter
    ) -> None:
        ...


class ProjectFileAndImportsPredictor(ProjectPredictor):
    """The project file itself and every file it imports."""

    def predict_inputs_and_outputs(self, project, reporter):
        reporter.report_input_file(project.full_path)
        for import_path in project.imports:
            reporter.report_input_file(import_path)


class ItemTypeInputPredictor(ProjectPredictor):
    """Reports every item of ``item_type`` as an input file."""
    item_type = ""

    def predict_inputs_and_outputs(self, project, reporter):
        for item in project.get_items(self.item_type):
            reporter.report_input_file(item.include)


class CompileItemsPredictor(ItemTypeInputPredictor):
    item_type = "Compile"


class ContentItemsPredictor(ItemTypeInputPredictor):
    item_type = "Content"


class NoneItemsPredictor(ItemTypeInputPredictor):
    item_type = "None"


class EmbeddedResourceItemsPredictor(ItemTypeInputPredictor):
    item_type = "EmbeddedResource"


class AdditionalFilesPredictor(ItemTypeInputPredictor):
    item_type = "AdditionalFiles"


class OutDirOrOutputPathPredictor(ProjectPredictor):
    """Output directory of the project (OutDir, falling back to OutputPath)."""

    def predict_inputs_and_outputs(self, project, reporter):
        out_dir = project.get_property("OutDir") or project.get_property("OutputPath")
        if out_dir:
            reporter.report_output_directory(out_dir)


class ProjectFileAndImportsGraphPredictor(ProjectGraphPredictor):
    """Project files and imports of every project a node transitively references."""

    def predict_inputs_and_outputs(self, graph, node, reporter):
        for dependency in graph.get_transitive_references(node):
            reporter.report_input_file(dependency.full_path)
            for import_path in dependency.project.imports:
                reporter.report_input_file(import_path)


ALL_PROJECT_PREDICTORS: Tuple[ProjectPredictor, ...] = (
    ProjectFileAndImportsPredictor(),
    CompileItemsPredictor(),
    ContentItemsPredictor(),
    NoneItemsPredictor(),
    EmbeddedResourceItemsPredictor(),
    AdditionalFilesPredictor(),
    OutDirOrOutputPathPredictor(),
)

ALL_GRAPH_PREDICTORS: Tuple[ProjectGraphPredictor, ...] = (
    ProjectFileAndImportsGraphPredictor(),
)


@dataclass(frozen=True)
class PredictorRegistry:
    """The predictor chain run by the prediction executor."""
    graph_predictors: Tuple[ProjectGraphPredictor, ...]
    project_predictors: Tuple[ProjectPredictor, ...]

    @classmethod
    def default(cls) -> "PredictorRegistry":
        # Output directories say nothing about which input changed
        return cls(
            graph_predictors=ALL_GRAPH_PREDICTORS,
            project_predictors=tuple(
                predictor for predictor in ALL_PROJECT_PREDICTORS
                if not isinstance(predictor, OutDirOrOutputPathPredictor)
            ),
        )


DEFAULT_REGISTRY = PredictorRegistry.default()
