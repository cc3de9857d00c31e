"""
HTML directory listing for locations with autoindex enabled.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape

from ..logging import get_logger

logger = get_logger("utils.autoindex")

STYLE = (
    "body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial,sans-serif;padding:24px}"
    "table{border-collapse:collapse;width:100%;max-width:960px}"
    "th,td{border:1px solid #ddd;padding:8px;text-align:left}"
    "th{background:#f5f5f5}"
    "tr:nth-child(even){background:#fafafa}"
    "code{background:#f2f2f2;padding:2px 4px;border-radius:4px}"
    "a{text-decoration:none}"
)


@dataclass
class DirEntry:
    """A file or directory shown in a listing."""
    name: str
    is_dir: bool
    size: int
    mtime: float


def format_size(size: int) -> str:
    """Human readable size: 512 B, 1.5 KB, 3.0 MB, 2.0 GB."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def format_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def parent_url(url: str) -> str:
    """Parent of a slash-terminated URL path: "/a/b/" -> "/a/", "/a/" -> "/"."""
    trimmed = url.rstrip("/")
    pos = trimmed.rfind("/")
    if pos > 0:
        return trimmed[:pos] + "/"
    return "/"


def list_directory(dir_path: str) -> list[DirEntry]:
    """
    Read a directory, directories first, then by name.

    Entries that cannot be stat'ed are skipped.

    Raises:
        OSError: If the directory itself cannot be read
    """
    entries = []
    with os.scandir(dir_path) as it:
        for entry in it:
            try:
                st = entry.stat()
                is_dir = entry.is_dir()
            except OSError:
                continue
            entries.append(DirEntry(entry.name, is_dir, 0 if is_dir else st.st_size, st.st_mtime))

    entries.sort(key=lambda e: (not e.is_dir, e.name))
    return entries


def generate_autoindex(dir_path: str, url_path: str) -> str:
    """
    Render an HTML listing of a directory.

    Args:
        dir_path: Filesystem directory to list
        url_path: Request URL the listing is served under

    Returns:
        HTML page; an error page if the directory cannot be read
    """
    try:
        entries = list_directory(dir_path)
    except OSError as e:
        logger.warning(f"Cannot list directory {dir_path}: {e}")
        return (
            "<!doctype html><html><body><h1>Failed to open directory</h1>"
            f"<p>Path: {escape(dir_path)}</p>"
            f"<p>Error: {escape(e.strerror or str(e))}</p></body></html>"
        )

    url = url_path if url_path.endswith("/") else url_path + "/"

    parts = [
        '<!doctype html><html><head><meta charset="utf-8">',
        f"<title>Index of {escape(url)}</title>",
        '<meta name="viewport" content="width=device-width,initial-scale=1">',
        f"<style>{STYLE}</style></head><body>",
        f"<h1>Index of <code>{escape(url)}</code></h1>",
    ]

    if url != "/":
        parts.append(f'<p><a href="{escape(parent_url(url))}">Parent directory</a></p>')

    parts.append(
        "<table><thead><tr>"
        "<th>Name</th><th>Size</th><th>Last Modified</th><th>Type</th>"
        "</tr></thead><tbody>"
    )

    for entry in entries:
        suffix = "/" if entry.is_dir else ""
        parts.append(
            "<tr>"
            f'<td><a href="{escape(url + entry.name + suffix)}">{escape(entry.name + suffix)}</a></td>'
            f"<td>{'-' if entry.is_dir else format_size(entry.size)}</td>"
            f"<td>{format_time(entry.mtime)}</td>"
            f"<td>{'directory' if entry.is_dir else 'file'}</td>"
            "</tr>"
        )

    parts.append("</tbody></table></body></html>")
    return "".join(parts)
