import os
from typing import List, Optional

from ..core import config
from ..core.models import PROJECT_REFERENCE_ITEM
from ..core.paths import DEFAULT_PATH_COMPARER, PathComparer, canonicalize
from ..parsing.project_file import ProjectModelProvider
from ..utils.logger import logger
from .glob_resolver import GlobMemberResolver


class TraversalDiscoverer:
    """Resolves the member projects of a traversal (.proj) project."""

    def __init__(
        self,
        model_provider: Optional[ProjectModelProvider] = None,
        glob_resolver: Optional[GlobMemberResolver] = None,
        comparer: PathComparer = DEFAULT_PATH_COMPARER,
        traversal_extension: Optional[str] = None
    ):
        self.model_provider = model_provider or ProjectModelProvider()
        self.glob_resolver = glob_resolver or GlobMemberResolver(is_windows=self.model_provider.is_windows)
        self.comparer = comparer
        self.traversal_extension = traversal_extension or config.TRAVERSAL_FILE_EXTENSION

    def discover_projects(self, traversal_path: str) -> List[str]:
        """
        List the absolute paths of the projects a traversal project includes.

        A traversal project is either fully explicit or fully glob based: as
        soon as one ProjectReference include carries a wildcard, members are
        taken from glob expansion only and explicit references are ignored.

        Raises:
            ValueError: If the path is empty or not a traversal project file
            FileNotFoundError: If an explicit traversal project does not exist
        """
        if not traversal_path or not traversal_path.endswith(self.traversal_extension):
            raise ValueError(f"{traversal_path} should be a {self.traversal_extension} file")

        full_path = canonicalize(traversal_path)
        traversal_directory = os.path.dirname(full_path)

        if self.uses_glob_includes(full_path):
            logger.debug(f"Traversal project {full_path} uses glob includes")
            descriptor = self.model_provider.open_raw(full_path)
            return self.glob_resolver.resolve(descriptor, traversal_directory)

        project = self.model_provider.evaluate(full_path)
        seen = set()
        projects = []
        for item in project.get_items(PROJECT_REFERENCE_ITEM):
            include = item.include
            if not os.path.isabs(include):
                include = os.path.join(traversal_directory, include)
            member_path = canonicalize(include)

            key = self.comparer.key(member_path)
            if key in seen:
                continue
            seen.add(key)
            projects.append(member_path)

        logger.debug(f"Traversal project {full_path} lists {len(projects)} projects")
        return projects

    def uses_glob_includes(self, traversal_path: str) -> bool:
        """Whether any ProjectReference include of the project contains a wildcard."""
        full_path = canonicalize(traversal_path)
        if not os.path.isfile(full_path):
            return False

        descriptor = self.model_provider.open_raw(full_path)
        return any("*" in (item.include or "") for _, item in descriptor.project_references())


def discover_projects(traversal_path: str) -> List[str]:
    """Resolve the members of a traversal project with default collaborators."""
    return TraversalDiscoverer().discover_projects(traversal_path)
