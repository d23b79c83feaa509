"""
msbuild-affected: find the MSBuild projects affected by a set of changed files.

This package resolves the members of traversal projects (explicit or glob
based), builds the project reference graph and maps changed files onto the
projects whose build is predicted to read them.
"""

__version__ = "0.1.0"

from .core.models import ProjectGraph, ProjectNode, ProjectModel
from .discovery.traversal import TraversalDiscoverer, discover_projects
from .discovery.glob_resolver import GlobMemberResolver
from .parsing.graph_builder import ProjectGraphBuilder
from .parsing.project_file import ProjectModelProvider
from .prediction.changed_projects import PredictionChangedProjectsProvider, get_affected_projects

__all__ = [
    "ProjectGraph",
    "ProjectNode",
    "ProjectModel",
    "TraversalDiscoverer",
    "discover_projects",
    "GlobMemberResolver",
    "ProjectGraphBuilder",
    "ProjectModelProvider",
    "PredictionChangedProjectsProvider",
    "get_affected_projects"
]
