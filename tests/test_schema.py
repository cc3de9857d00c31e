"""
Tests for the frozen configuration model.
"""

import dataclasses

import pytest

from vhostconf.config.parser import parse_config
from vhostconf.config.schema import ListenEntry, Redirect


SOURCE = """
server {
    listen :80;
    error_page 404 /404.html;
    location / { cgi_pass .py /usr/bin/python3; return 301 /new; }
}
"""


def test_blocks_compare_by_value() -> None:
    assert parse_config(SOURCE) == parse_config(SOURCE)


def test_blocks_are_not_hashable() -> None:
    """Blocks hold read-only maps, so they refuse hashing up front."""
    config = parse_config(SOURCE)
    server = config.servers[0]

    for value in (config, server, server.locations[0]):
        assert type(value).__hash__ is None
        with pytest.raises(TypeError):
            hash(value)


def test_leaf_values_are_hashable() -> None:
    entries = {ListenEntry("0.0.0.0", 80), ListenEntry("0.0.0.0", 80)}
    assert len(entries) == 1
    assert hash(Redirect("301", "/new")) == hash(Redirect("301", "/new"))


def test_blocks_are_immutable() -> None:
    server = parse_config(SOURCE).servers[0]

    with pytest.raises(dataclasses.FrozenInstanceError):
        server.root = "/elsewhere"
    with pytest.raises(TypeError):
        server.error_pages[500] = "/500.html"
    with pytest.raises(TypeError):
        server.locations[0].cgi_map[".php"] = "/usr/bin/php-cgi"
