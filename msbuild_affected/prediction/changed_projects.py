"""
Affected project detection.

Determines which projects of a graph are affected by a list of changed files.
A project is affected when one of the changed files is the project file itself
or one of the inputs the predictor chain predicts for it.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from ..core import config
from ..core.models import ProjectGraph, ProjectNode
from ..core.paths import DEFAULT_PATH_COMPARER, PathComparer, canonicalize
from ..utils.logger import logger
from .collector import FilesByProjectGraphCollector
from .executor import PredictionExecutor
from .predictors import DEFAULT_REGISTRY, PredictorRegistry


class PredictionChangedProjectsProvider:
    """Maps changed files onto the project nodes whose build reads them."""

    def __init__(
        self,
        graph: ProjectGraph,
        repository_path: Optional[str] = None,
        registry: PredictorRegistry = DEFAULT_REGISTRY,
        comparer: PathComparer = DEFAULT_PATH_COMPARER,
        excluded_files: Optional[Sequence[str]] = None,
        project_extension: Optional[str] = None
    ):
        """
        Args:
            graph: The project graph to search
            repository_path: Inputs outside this directory are not indexed
            registry: Predictor chain used to build the prediction index
            comparer: Path comparison rule
            excluded_files: Changed files ending with one of these never match
                (defaults to the configured list)
            project_extension: Extension of project files for direct matches
        """
        self.graph = graph
        self.repository_path = repository_path
        self.executor = PredictionExecutor(registry)
        self.comparer = comparer
        self.excluded_files = list(config.EXCLUDED_FILES if excluded_files is None else excluded_files)
        self.project_extension = project_extension or config.PROJECT_FILE_EXTENSION

    def get_referencing_projects(self, files: Iterable[str]) -> Iterator[ProjectNode]:
        """
        Yield each project affected by ``files`` once, in first-touched order.

        The prediction index is built when iteration starts and discarded with
        the generator. Failures of the predictors propagate to the caller.
        """
        has_returned = set()

        collector = FilesByProjectGraphCollector(self.graph, self.repository_path, self.comparer)
        self.executor.predict_inputs_and_outputs(self.graph, collector)
        predictions = collector.predictions_per_node

        normalized_files = [
            canonicalize(f) for f in files
            if not any(f.endswith(exclusion) for exclusion in self.excluded_files)
        ]

        project_path_to_node: Dict[str, ProjectNode] = {
            self.comparer.key(node.full_path): node for node in self.graph.nodes
        }

        for file in normalized_files:
            if self.comparer.ends_with(file, self.project_extension):
                node = project_path_to_node.get(self.comparer.key(file))
                if node is not None and self.comparer.key(node.full_path) not in has_returned:
                    has_returned.add(self.comparer.key(node.full_path))
                    logger.debug(f"{node.full_path} changed directly")
                    yield node

            for node in predictions.nodes_containing(file):
                key = self.comparer.key(node.full_path)
                if key not in has_returned:
                    has_returned.add(key)
                    logger.debug(f"{node.full_path} affected by {file}")
                    yield node


def get_affected_projects(
    graph: ProjectGraph,
    changed_files: Iterable[str],
    repository_path: Optional[str] = None,
    registry: PredictorRegistry = DEFAULT_REGISTRY,
    comparer: PathComparer = DEFAULT_PATH_COMPARER
) -> Iterator[ProjectNode]:
    """Lazily yield the distinct projects of ``graph`` affected by ``changed_files``."""
    provider = PredictionChangedProjectsProvider(graph, repository_path, registry, comparer)
    return provider.get_referencing_projects(changed_files)


def list_affected_projects(graph: ProjectGraph, changed_files: Iterable[str], **kwargs) -> List[ProjectNode]:
    affected = list(get_affected_projects(graph, changed_files, **kwargs))
    logger.info(f"{len(affected)} of {len(graph.nodes)} projects affected")
    return affected
