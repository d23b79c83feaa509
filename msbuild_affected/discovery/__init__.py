"""Traversal project member discovery."""

from .glob_resolver import GlobMemberResolver
from .traversal import TraversalDiscoverer, discover_projects

__all__ = [
    "GlobMemberResolver",
    "TraversalDiscoverer",
    "discover_projects"
]
