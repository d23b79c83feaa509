"""Project file reading and graph construction."""

from .conditions import only_when_not_windows, is_group_applicable
from .project_file import ProjectModelProvider, find_file_above
from .graph_builder import ProjectGraphBuilder

__all__ = [
    "only_when_not_windows",
    "is_group_applicable",
    "ProjectModelProvider",
    "find_file_above",
    "ProjectGraphBuilder"
]
