"""
Helpers for consumers of a validated configuration.
"""

from .autoindex import generate_autoindex
from .dirindex import DirDecision, DirResolveResult, find_index_file, resolve_directory_request
from .paths import resolve_path
from .ports import find_busy_listens

__all__ = [
    "resolve_path",
    "generate_autoindex",
    "DirDecision",
    "DirResolveResult",
    "find_index_file",
    "resolve_directory_request",
    "find_busy_listens",
]
