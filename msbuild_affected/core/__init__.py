"""Core models, configuration and path identity."""

from .models import (
    ProjectItem,
    ItemGroup,
    AggregatorDescriptor,
    ProjectModel,
    ProjectNode,
    ProjectReferenceEdge,
    ProjectGraph,
    PROJECT_REFERENCE_ITEM,
)
from .paths import (
    IS_WINDOWS,
    PathComparer,
    DEFAULT_PATH_COMPARER,
    canonicalize,
    normalize_separators,
)
from .config import update_config

__all__ = [
    "ProjectItem",
    "ItemGroup",
    "AggregatorDescriptor",
    "ProjectModel",
    "ProjectNode",
    "ProjectReferenceEdge",
    "ProjectGraph",
    "PROJECT_REFERENCE_ITEM",
    "IS_WINDOWS",
    "PathComparer",
    "DEFAULT_PATH_COMPARER",
    "canonicalize",
    "normalize_separators",
    "update_config",
]
