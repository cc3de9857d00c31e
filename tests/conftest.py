"""
Pytest configuration and fixtures.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from vhostconf.config.fs import MemoryFileSystem


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Write configuration text to a file under tmp_path and return its path."""

    def _write(text: str, name: str = "webserv.conf") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def site_tree(tmp_path: Path) -> Path:
    """
    Document root on disk:

        site/
            index.html
            errors/404.html
            static/
            uploads/
    """
    root = tmp_path / "site"
    (root / "errors").mkdir(parents=True)
    (root / "static").mkdir()
    (root / "uploads").mkdir()
    (root / "index.html").write_text("<h1>home</h1>")
    (root / "errors" / "404.html").write_text("<h1>404</h1>")
    return root


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """In-memory tree rooted at /srv/www with an error page and an upload directory."""
    return MemoryFileSystem(
        dirs=["/srv/www", "/srv/www/uploads", "/srv/media"],
        files=["/srv/www/404.html", "/srv/www/errors/500.html"],
    )
