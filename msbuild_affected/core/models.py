from collections import defaultdict, deque
from typing import Dict, Iterator, List, Optional, Tuple
import os

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from .paths import DEFAULT_PATH_COMPARER, canonicalize

PROJECT_REFERENCE_ITEM = "ProjectReference"


class ProjectItem(BaseModel):
    item_type: str
    include: str = ""
    remove: str = ""
    exclude: str = ""
    condition: str = ""
    metadata: Dict[str, str] = Field(default_factory=dict)

    def is_item_type(self, item_type: str) -> bool:
        return self.item_type.lower() == item_type.lower()

    def __repr__(self):
        if self.remove:
            return f"<{self.item_type} Remove=\"{self.remove}\">"
        return f"<{self.item_type} Include=\"{self.include}\">"


class ItemGroup(BaseModel):
    condition: str = ""
    items: List[ProjectItem] = Field(default_factory=list)


class AggregatorDescriptor(BaseModel):
    """Raw, unevaluated item groups of a traversal project."""
    full_path: str
    item_groups: List[ItemGroup] = Field(default_factory=list)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.full_path)

    def project_references(self) -> Iterator[Tuple[ItemGroup, ProjectItem]]:
        for group in self.item_groups:
            for item in group.items:
                if item.is_item_type(PROJECT_REFERENCE_ITEM):
                    yield group, item


class ProjectModel(BaseModel):
    """Evaluated project: properties, items and the imports it pulls in."""
    full_path: str
    properties: Dict[str, str] = Field(default_factory=dict)
    items: List[ProjectItem] = Field(default_factory=list)
    imports: List[str] = Field(default_factory=list)
    sdk: str = ""

    @model_validator(mode='after')
    def validate_project(self):
        self.full_path = canonicalize(self.full_path)
        return self

    @property
    def directory(self) -> str:
        return os.path.dirname(self.full_path)

    @property
    def name(self) -> str:
        return os.path.splitext(os.path.basename(self.full_path))[0]

    def get_items(self, item_type: str) -> List[ProjectItem]:
        return [item for item in self.items if item.is_item_type(item_type)]

    def get_property(self, name: str, default: str = "") -> str:
        for key, value in self.properties.items():
            if key.lower() == name.lower():
                return value
        return default


class ProjectNode(BaseModel):
    """A vertex of the project graph, keyed by its absolute project file path."""
    model_config = ConfigDict(frozen=True)

    full_path: str
    project: ProjectModel

    @classmethod
    def from_model(cls, project: ProjectModel) -> "ProjectNode":
        return cls(full_path=project.full_path, project=project)

    def __eq__(self, other):
        if not isinstance(other, ProjectNode):
            return NotImplemented
        return DEFAULT_PATH_COMPARER.equals(self.full_path, other.full_path)

    def __hash__(self):
        return DEFAULT_PATH_COMPARER.hash_of(self.full_path)

    def __repr__(self):
        return f"ProjectNode({self.full_path})"


class ProjectReferenceEdge(BaseModel):
    subject_path: str
    object_path: str

    def __repr__(self):
        return f"Edge: {self.subject_path} --references--> {self.object_path}"


class ProjectGraph(BaseModel):
    """Project nodes plus project-to-project reference edges."""
    nodes: List[ProjectNode] = Field(default_factory=list)
    edges: List[ProjectReferenceEdge] = Field(default_factory=list)

    _nodes_by_key: Dict[str, ProjectNode] = PrivateAttr(default_factory=dict)
    _references: Dict[str, List[str]] = PrivateAttr(default_factory=lambda: defaultdict(list))
    _referenced_by: Dict[str, List[str]] = PrivateAttr(default_factory=lambda: defaultdict(list))

    def model_post_init(self, __context) -> None:
        for node in self.nodes:
            self._nodes_by_key[DEFAULT_PATH_COMPARER.key(node.full_path)] = node
        for edge in self.edges:
            subject_key = DEFAULT_PATH_COMPARER.key(edge.subject_path)
            object_key = DEFAULT_PATH_COMPARER.key(edge.object_path)
            self._references[subject_key].append(object_key)
            self._referenced_by[object_key].append(subject_key)

    def get_node(self, path: str) -> Optional[ProjectNode]:
        return self._nodes_by_key.get(DEFAULT_PATH_COMPARER.key(path))

    def get_references(self, node: ProjectNode) -> List[ProjectNode]:
        """Projects directly referenced by ``node``."""
        keys = self._references.get(DEFAULT_PATH_COMPARER.key(node.full_path), [])
        return [self._nodes_by_key[key] for key in keys if key in self._nodes_by_key]

    def get_referencing(self, node: ProjectNode) -> List[ProjectNode]:
        """Projects that directly reference ``node``."""
        keys = self._referenced_by.get(DEFAULT_PATH_COMPARER.key(node.full_path), [])
        return [self._nodes_by_key[key] for key in keys if key in self._nodes_by_key]

    def get_transitive_references(self, node: ProjectNode) -> List[ProjectNode]:
        """All projects reachable from ``node`` through references, breadth first."""
        start_key = DEFAULT_PATH_COMPARER.key(node.full_path)
        visited = {start_key}
        queue = deque([start_key])
        result: List[ProjectNode] = []

        while queue:
            current = queue.popleft()
            for key in self._references.get(current, []):
                if key in visited or key not in self._nodes_by_key:
                    continue
                visited.add(key)
                result.append(self._nodes_by_key[key])
                queue.append(key)

        return result

    def __len__(self):
        return len(self.nodes)
