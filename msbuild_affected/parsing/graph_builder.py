from collections import deque
from typing import Dict, Iterable, List, Optional

from ..core.models import PROJECT_REFERENCE_ITEM, ProjectGraph, ProjectNode, ProjectReferenceEdge
from ..core.paths import DEFAULT_PATH_COMPARER, PathComparer, canonicalize
from ..utils.logger import logger
from .project_file import ProjectModelProvider


class ProjectGraphBuilder:
    """Builds the project reference graph from a set of entry projects."""

    def __init__(
        self,
        model_provider: Optional[ProjectModelProvider] = None,
        comparer: PathComparer = DEFAULT_PATH_COMPARER
    ):
        self.model_provider = model_provider or ProjectModelProvider()
        self.comparer = comparer

    def build(self, entry_paths: Iterable[str]) -> ProjectGraph:
        """
        Evaluate the entry projects and everything they reference.

        Args:
            entry_paths: Project files the graph starts from

        Returns:
            ProjectGraph with one node per distinct project file

        Raises:
            FileNotFoundError: If an entry or a referenced project does not exist
        """
        nodes: Dict[str, ProjectNode] = {}
        edges: List[ProjectReferenceEdge] = []
        queue = deque()

        for path in entry_paths:
            full_path = canonicalize(path)
            key = self.comparer.key(full_path)
            if key not in nodes:
                nodes[key] = None
                queue.append(full_path)

        while queue:
            full_path = queue.popleft()
            project = self.model_provider.evaluate(full_path)
            node = ProjectNode.from_model(project)
            nodes[self.comparer.key(full_path)] = node

            for item in project.get_items(PROJECT_REFERENCE_ITEM):
                reference_path = canonicalize(item.include, project.directory)
                edges.append(ProjectReferenceEdge(subject_path=node.full_path, object_path=reference_path))

                reference_key = self.comparer.key(reference_path)
                if reference_key not in nodes:
                    nodes[reference_key] = None
                    queue.append(reference_path)

        logger.debug(f"Built project graph with {len(nodes)} nodes and {len(edges)} edges")
        return ProjectGraph(nodes=list(nodes.values()), edges=edges)

    def build_from_traversal(self, traversal_path: str, discoverer=None) -> ProjectGraph:
        """Build the graph from the members of a traversal project."""
        if discoverer is None:
            from ..discovery.traversal import TraversalDiscoverer
            discoverer = TraversalDiscoverer(model_provider=self.model_provider, comparer=self.comparer)

        return self.build(discoverer.discover_projects(traversal_path))
