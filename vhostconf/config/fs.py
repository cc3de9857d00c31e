"""
Filesystem probes used by the validator.

The validator only needs to know whether a path exists and whether it is
a directory or a regular file. LocalFileSystem answers from the real disk;
MemoryFileSystem answers from a fixed set of paths.
"""

import os
from collections.abc import Iterable
from typing import Protocol


class FileSystem(Protocol):
    """Stat-like capability: existence and type of a path."""

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...


class LocalFileSystem:
    """
    Probes the real filesystem.

    Any OS error while probing (permissions, broken links, ...) is reported
    as a missing path.
    """

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)


class MemoryFileSystem:
    """
    In-memory filesystem made of known files and directories.

    Paths are compared after normalization, so "www/./site" and "www/site"
    are the same entry. Parent directories of every entry exist implicitly.

    Usage:
        fs = MemoryFileSystem(dirs=["/srv/www"], files=["/srv/www/404.html"])
        fs.is_dir("/srv")         # True
        fs.is_file("/srv/www")    # False
    """

    def __init__(self, dirs: Iterable[str] = (), files: Iterable[str] = ()):
        self.dirs: set[str] = set()
        self.files: set[str] = set()
        for path in dirs:
            self.add_dir(path)
        for path in files:
            self.add_file(path)

    @staticmethod
    def _normalize(path: str) -> str:
        return os.path.normpath(path) if path else path

    def _add_parents(self, path: str) -> None:
        parent = os.path.dirname(path)
        while parent and parent not in self.dirs:
            self.dirs.add(parent)
            next_parent = os.path.dirname(parent)
            if next_parent == parent:
                break
            parent = next_parent

    def add_dir(self, path: str) -> None:
        path = self._normalize(path)
        self.dirs.add(path)
        self._add_parents(path)

    def add_file(self, path: str) -> None:
        path = self._normalize(path)
        self.files.add(path)
        self._add_parents(path)

    def exists(self, path: str) -> bool:
        return self.is_dir(path) or self.is_file(path)

    def is_dir(self, path: str) -> bool:
        return bool(path) and self._normalize(path) in self.dirs

    def is_file(self, path: str) -> bool:
        return bool(path) and self._normalize(path) in self.files
