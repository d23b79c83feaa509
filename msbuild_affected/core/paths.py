"""
Path identity helpers.

Every path compared or stored by the package goes through ``canonicalize`` and
is compared with a ``PathComparer``. Case sensitivity follows the host
filesystem convention: case-insensitive on Windows, case-sensitive elsewhere.
"""

import os
import sys
from typing import Optional

IS_WINDOWS = sys.platform.startswith("win")


def canonicalize(path: str, base_dir: Optional[str] = None) -> str:
    """
    Return the absolute, normalized form of ``path``.

    Only the path string is normalized; the filesystem is not consulted and
    symlinks are not resolved. Relative paths are joined onto ``base_dir`` when
    one is given, otherwise onto the current working directory.
    """
    if base_dir and not os.path.isabs(path):
        path = os.path.join(base_dir, path)
    return os.path.abspath(path)


def normalize_separators(text: str, sep: str = os.sep) -> str:
    """Convert both forward and back slashes to ``sep``."""
    return text.replace("\\", sep).replace("/", sep)


class PathComparer:
    """Equality and hashing of paths on their canonical form."""

    def __init__(self, case_sensitive: bool = not IS_WINDOWS):
        self.case_sensitive = case_sensitive

    def key(self, path: str) -> str:
        full_path = canonicalize(path)
        return full_path if self.case_sensitive else full_path.casefold()

    def equals(self, a: Optional[str], b: Optional[str]) -> bool:
        if a is None and b is None:
            return True
        if a is None or b is None:
            return False
        return self.key(a) == self.key(b)

    def hash_of(self, path: str) -> int:
        return hash(self.key(path))

    def ends_with(self, path: str, suffix: str) -> bool:
        if self.case_sensitive:
            return path.endswith(suffix)
        return path.casefold().endswith(suffix.casefold())

    def __repr__(self):
        return f"PathComparer(case_sensitive={self.case_sensitive})"


DEFAULT_PATH_COMPARER = PathComparer()
