"""
Decision logic for requests that resolve to a directory.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from ..config.fs import FileSystem, LocalFileSystem
from ..config.validator import join_path
from .autoindex import generate_autoindex


class DirDecision(Enum):
    """What to answer for a directory request."""
    SERVE_INDEX_FILE = "index"
    SERVE_AUTOINDEX = "autoindex"
    FORBIDDEN = "forbidden"


@dataclass
class DirResolveResult:
    """Outcome of resolve_directory_request()."""
    decision: DirDecision = DirDecision.FORBIDDEN
    file_path: str = ""
    html: str = ""


def find_index_file(
    dir_path: str,
    index_files: Sequence[str],
    fs: FileSystem | None = None,
) -> str | None:
    """
    Find the first index file present in a directory.

    Args:
        dir_path: Directory to look in
        index_files: Candidate names in priority order
        fs: Filesystem to probe (the real one if None)

    Returns:
        Path of the first candidate that is a regular file, or None
    """
    fs = fs if fs is not None else LocalFileSystem()
    for name in index_files:
        candidate = join_path(dir_path, name)
        if fs.is_file(candidate):
            return candidate
    return None


def resolve_directory_request(
    dir_path: str,
    url_path: str,
    index_files: Sequence[str],
    autoindex: bool,
    fs: FileSystem | None = None,
) -> DirResolveResult:
    """
    Decide how to answer a request for a directory.

    An existing index file wins; otherwise a generated listing is served
    when autoindex is on; otherwise the request is forbidden.

    Args:
        dir_path: Resolved filesystem directory
        url_path: Request URL, used for links in the listing
        index_files: Index file names from the server or location
        autoindex: Autoindex flag of the location
        fs: Filesystem to probe for index files (the real one if None)
    """
    index_path = find_index_file(dir_path, index_files, fs)
    if index_path is not None:
        return DirResolveResult(DirDecision.SERVE_INDEX_FILE, file_path=index_path)

    if autoindex:
        return DirResolveResult(DirDecision.SERVE_AUTOINDEX, html=generate_autoindex(dir_path, url_path))

    return DirResolveResult(DirDecision.FORBIDDEN)
