"""
Collection of predicted inputs per project node.

The collector receives the callbacks of the prediction executor and keeps, for
every node of the graph, the set of input files its build is predicted to read.
"""

import os
from typing import Dict, Iterator, List, Optional, Set

from ..core.models import ProjectGraph, ProjectNode
from ..core.paths import DEFAULT_PATH_COMPARER, PathComparer, canonicalize
from ..utils.logger import logger


class PredictionIndex:
    """
    Mapping of project node to the canonical input files predicted for it.

    Nodes and files are both keyed by ``comparer``, so two nodes whose paths
    the comparer treats as equal share one entry.
    """

    def __init__(self, comparer: PathComparer = DEFAULT_PATH_COMPARER):
        self.comparer = comparer
        self._nodes: Dict[str, ProjectNode] = {}
        self._files_by_node: Dict[str, Dict[str, str]] = {}

    def _node_key(self, node: ProjectNode) -> str:
        key = self.comparer.key(node.full_path)
        if key not in self._nodes:
            self._nodes[key] = node
            self._files_by_node[key] = {}
        return key

    def ensure_node(self, node: ProjectNode) -> None:
        self._node_key(node)

    def add(self, node: ProjectNode, path: str) -> None:
        full_path = canonicalize(path)
        self._files_by_node[self._node_key(node)].setdefault(self.comparer.key(full_path), full_path)

    def files_for(self, node: ProjectNode) -> Set[str]:
        return set(self._files_by_node.get(self.comparer.key(node.full_path), {}).values())

    def nodes_containing(self, path: str) -> List[ProjectNode]:
        """Nodes whose predicted inputs contain ``path``, in index order."""
        key = self.comparer.key(path)
        return [self._nodes[node_key] for node_key, files in self._files_by_node.items() if key in files]

    def __iter__(self) -> Iterator[ProjectNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)


class FilesByProjectGraphCollector:
    """Collects predicted input files per node of a project graph."""

    def __init__(
        self,
        graph: ProjectGraph,
        repository_path: Optional[str] = None,
        comparer: PathComparer = DEFAULT_PATH_COMPARER
    ):
        """
        Args:
            graph: The graph predictions are made for
            repository_path: When set, inputs outside this directory are ignored
            comparer: Path comparison rule
        """
        self.graph = graph
        self.comparer = comparer
        self.repository_path = canonicalize(repository_path) if repository_path else None
        self.predictions_per_node = PredictionIndex(comparer)

        for node in graph.nodes:
            self.predictions_per_node.ensure_node(node)

    def _is_in_repository(self, full_path: str) -> bool:
        if not self.repository_path:
            return True
        repository_key = self.comparer.key(self.repository_path).rstrip(os.sep)
        path_key = self.comparer.key(full_path)
        return path_key == repository_key or path_key.startswith(repository_key + os.sep)

    def add_input_file(self, path: str, node: ProjectNode, predictor_name: str) -> None:
        full_path = canonicalize(path, node.project.directory)
        if not self._is_in_repository(full_path):
            logger.debug(f"{predictor_name}: ignoring input outside repository {full_path}")
            return
        self.predictions_per_node.add(node, full_path)

    def add_input_directory(self, path: str, node: ProjectNode, predictor_name: str) -> None:
        pass

    def add_output_file(self, path: str, node: ProjectNode, predictor_name: str) -> None:
        pass

    def add_output_directory(self, path: str, node: ProjectNode, predictor_name: str) -> None:
        pass
