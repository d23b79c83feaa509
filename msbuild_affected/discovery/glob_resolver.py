"""
Glob expansion of traversal project members.

Traversal projects may list their members with recursive patterns such as
``src/**/*.csproj`` and exclude subtrees with ``Remove="src/legacy/**"``.
Patterns are expanded directly against the filesystem rather than through
MSBuild evaluation.
"""

import fnmatch
import os
from typing import Dict, Iterator, List, Optional, Tuple

from ..core import config
from ..core.models import AggregatorDescriptor, ItemGroup, ProjectItem
from ..core.paths import IS_WINDOWS, canonicalize, normalize_separators
from ..parsing.conditions import is_group_applicable
from ..utils.logger import logger

RECURSIVE_WILDCARD = "**"


class GlobMemberResolver:
    """Expands wildcard ProjectReference includes into absolute project paths."""

    def __init__(self, is_windows: bool = IS_WINDOWS, default_search_pattern: Optional[str] = None):
        self.is_windows = is_windows
        self.default_search_pattern = default_search_pattern or config.DEFAULT_SEARCH_PATTERN
        self.sep = os.sep

    def _applicable_references(self, descriptor: AggregatorDescriptor) -> Iterator[Tuple[ItemGroup, ProjectItem]]:
        # Include and exclude passes must gate item groups identically
        for group, item in descriptor.project_references():
            if is_group_applicable(group.condition, self.is_windows):
                yield group, item

    def include_patterns(self, descriptor: AggregatorDescriptor) -> List[Tuple[str, str]]:
        """
        Split each wildcard include into a base directory and a file search pattern.

        Returns:
            List of (include_base, search_pattern); an empty base means the
            traversal project's own directory
        """
        sep = self.sep
        patterns = []

        for _, item in self._applicable_references(descriptor):
            include = normalize_separators(item.include or "", sep).strip()
            if "*" not in include:
                continue

            star_star = include.find(RECURSIVE_WILDCARD)
            if star_star < 0:
                logger.debug(f"Skipping non-recursive wildcard include: {item.include}")
                continue

            include_base = include[:star_star].rstrip(sep)
            after_star = include[star_star + len(RECURSIVE_WILDCARD):].lstrip(sep)
            last_sep = after_star.rfind(sep)
            search_pattern = after_star[last_sep + 1:] if last_sep >= 0 else after_star
            if not search_pattern or "*" not in search_pattern:
                search_pattern = self.default_search_pattern
            # Nested dynamic bases are not supported
            if "*" in include_base:
                include_base = ""

            patterns.append((include_base, search_pattern))

        return patterns

    def exclusion_prefixes(self, descriptor: AggregatorDescriptor) -> List[str]:
        """Path prefixes derived from ProjectReference ``Remove`` patterns."""
        sep = self.sep
        prefixes: List[str] = []
        seen = set()

        for _, item in self._applicable_references(descriptor):
            remove = item.remove
            if not remove or not remove.strip():
                continue

            normalized = normalize_separators(remove, sep).strip()
            star_star = normalized.find(RECURSIVE_WILDCARD)
            if star_star >= 0:
                prefix = normalized[:star_star].rstrip(sep) + sep
            else:
                prefix = normalized + sep

            if prefix.casefold() not in seen:
                seen.add(prefix.casefold())
                prefixes.append(prefix)

        return prefixes

    def resolve(self, descriptor: AggregatorDescriptor, traversal_directory: Optional[str] = None) -> List[str]:
        """
        Expand the wildcard members of a traversal project.

        Args:
            descriptor: Raw item groups of the traversal project
            traversal_directory: Directory patterns are relative to; defaults to
                the directory of the traversal project

        Returns:
            Absolute project paths, deduplicated and sorted case-insensitively
        """
        traversal_directory = canonicalize(traversal_directory or descriptor.directory)
        exclude_prefixes = [prefix.casefold() for prefix in self.exclusion_prefixes(descriptor)]
        matches: Dict[str, str] = {}

        for include_base, search_pattern in self.include_patterns(descriptor):
            base_dir = canonicalize(include_base, traversal_directory) if include_base else traversal_directory
            if not os.path.isdir(base_dir):
                logger.debug(f"Glob base directory does not exist, skipping: {base_dir}")
                continue

            for full_path in self._enumerate_files(base_dir, search_pattern):
                if self._is_excluded(full_path, base_dir, traversal_directory, exclude_prefixes):
                    logger.debug(f"Excluded by Remove pattern: {full_path}")
                    continue
                matches.setdefault(full_path.casefold(), full_path)

        result = sorted(matches.values(), key=str.casefold)
        logger.debug(f"Glob expansion of {descriptor.full_path} matched {len(result)} projects")
        return result

    def _enumerate_files(self, base_dir: str, search_pattern: str) -> Iterator[str]:
        for root, dirs, files in os.walk(base_dir):
            dirs.sort()
            for file_name in sorted(files):
                if fnmatch.fnmatch(file_name, search_pattern):
                    yield canonicalize(os.path.join(root, file_name))

    def _is_excluded(self, full_path: str, base_dir: str, traversal_directory: str, prefixes: List[str]) -> bool:
        if not prefixes:
            return False

        candidates = {normalize_separators(os.path.relpath(full_path, base_dir), self.sep).casefold()}
        # Remove patterns are written relative to the traversal project itself
        candidates.add(normalize_separators(os.path.relpath(full_path, traversal_directory), self.sep).casefold())

        return any(candidate.startswith(prefix) for candidate in candidates for prefix in prefixes)
