import time
from typing import Optional

from tqdm import tqdm

from ..core.models import ProjectGraph
from ..core.paths import DEFAULT_PATH_COMPARER, PathComparer
from ..utils.logger import logger, is_debug_enabled
from .collector import FilesByProjectGraphCollector, PredictionIndex
from .predictors import DEFAULT_REGISTRY, PredictionReporter, PredictorRegistry


class PredictionExecutor:
    """Runs a predictor chain over every node of a project graph."""

    def __init__(self, registry: PredictorRegistry = DEFAULT_REGISTRY):
        self.registry = registry

    def predict_inputs_and_outputs(self, graph: ProjectGraph, collector) -> None:
        """Report the predictions of every predictor for every node to ``collector``."""
        start_time = time.time()
        nodes = graph.nodes

        progress_bar = tqdm(nodes, desc="Predicting inputs", total=len(nodes))\
                       if is_debug_enabled()\
                       else nodes

        for node in progress_bar:
            for predictor in self.registry.project_predictors:
                predictor.predict_inputs_and_outputs(
                    node.project, PredictionReporter(collector, node, predictor.name)
                )
            for predictor in self.registry.graph_predictors:
                predictor.predict_inputs_and_outputs(
                    graph, node, PredictionReporter(collector, node, predictor.name)
                )

        total_time = time.time() - start_time
        logger.debug(f"Ran {len(self.registry.project_predictors) + len(self.registry.graph_predictors)} "
                     f"predictors over {len(nodes)} projects in {total_time:.2f}s")


def collect_predictions(
    graph: ProjectGraph,
    repository_path: Optional[str] = None,
    registry: PredictorRegistry = DEFAULT_REGISTRY,
    comparer: PathComparer = DEFAULT_PATH_COMPARER
) -> PredictionIndex:
    """Build a fresh prediction index for ``graph``."""
    collector = FilesByProjectGraphCollector(graph, repository_path, comparer)
    PredictionExecutor(registry).predict_inputs_and_outputs(graph, collector)
    return collector.predictions_per_node
