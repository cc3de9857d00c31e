"""
Tests for the configuration parser.
"""

from pathlib import Path

import pytest

from vhostconf.config.errors import ParseError
from vhostconf.config.parser import (
    ConfigParser,
    LocationDirective,
    ServerDirective,
    parse_config,
    parse_config_file,
    parse_size,
    split_host_port,
)
from vhostconf.config.schema import ListenEntry, Redirect


FULL_CONFIG = """
server {
    listen 127.0.0.1:8080;
    listen :8081;
    server_name example.org;
    root /srv/www;
    index index.html "home page.html";
    client_max_body_size 2M;
    error_page 404 /404.html;
    error_page 500 errors/500.html;

    location /upload {
        root /srv/media;
        methods GET POST POST;
        autoindex on;
        index up.html;
        upload_store uploads;
        cgi_pass .py /usr/bin/python3;
        cgi_pass .php "/usr/bin/php-cgi";
    }

    location "/old" {
        return 301 https://example.org/new;
    }
}

server {
    listen :9090;
    root /srv/other;
}
"""


def server_with(body: str) -> str:
    return f"server {{\n{body}\n}}\n"


def parse_error(source: str) -> ParseError:
    with pytest.raises(ParseError) as exc_info:
        parse_config(source)
    return exc_info.value


def test_parse_full_config() -> None:
    config = parse_config(FULL_CONFIG)

    assert len(config.servers) == 2
    server = config.servers[0]
    assert server.listens == (ListenEntry("127.0.0.1", 8080), ListenEntry("0.0.0.0", 8081))
    assert server.server_name == "example.org"
    assert server.root == "/srv/www"
    assert server.index_files == ("index.html", "home page.html")
    assert server.client_max_body_size == 2 * 1024 * 1024
    assert dict(server.error_pages) == {404: "/404.html", 500: "errors/500.html"}

    upload, old = server.locations
    assert upload.path_prefix == "/upload"
    assert upload.root == "/srv/media"
    assert upload.methods == frozenset({"GET", "POST"})
    assert upload.autoindex is True
    assert upload.index_files == ("up.html",)
    assert upload.upload_store == "uploads"
    assert dict(upload.cgi_map) == {".py": "/usr/bin/python3", ".php": "/usr/bin/php-cgi"}
    assert upload.redirect is None

    assert old.path_prefix == "/old"
    assert old.redirect == Redirect("301", "https://example.org/new")
    assert old.root == ""
    assert old.autoindex is False


def test_collect_all_listens_in_server_then_listen_order() -> None:
    config = parse_config(FULL_CONFIG)
    assert config.collect_all_listens() == [
        ListenEntry("127.0.0.1", 8080),
        ListenEntry("0.0.0.0", 8081),
        ListenEntry("0.0.0.0", 9090),
    ]


def test_empty_source_has_no_servers() -> None:
    assert parse_config("# nothing here\n").servers == ()


def test_server_without_listen_parses() -> None:
    """Missing listen is a validation concern, not a syntax error."""
    config = parse_config(server_with("root /srv;"))
    assert config.servers[0].listens == ()


def test_reparsing_yields_equal_models() -> None:
    assert parse_config(FULL_CONFIG) == parse_config(FULL_CONFIG)


def test_model_is_read_only() -> None:
    config = parse_config(FULL_CONFIG)
    server = config.servers[0]
    with pytest.raises(AttributeError):
        server.root = "/tmp"  # type: ignore[misc]
    with pytest.raises(TypeError):
        server.error_pages[404] = "/x.html"  # type: ignore[index]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("127.0.0.1:8080", ListenEntry("127.0.0.1", 8080)),
        ("localhost:80", ListenEntry("localhost", 80)),
        ("*:8080", ListenEntry("0.0.0.0", 8080)),
        (":8080", ListenEntry("0.0.0.0", 8080)),
        ("8080", ListenEntry("0.0.0.0", 8080)),
        ("[::1]:8443", ListenEntry("[::1]", 8443)),
        ("host:", ListenEntry("host", 0)),
        ("70000", ListenEntry("0.0.0.0", 70000)),
    ],
)
def test_split_host_port(value: str, expected: ListenEntry) -> None:
    assert split_host_port(value) == expected


def test_listen_accepts_quoted_wildcard() -> None:
    config = parse_config(server_with('listen "*:8080";'))
    assert config.servers[0].listens == (ListenEntry("0.0.0.0", 8080),)


def test_listen_port_without_host() -> None:
    config = parse_config(server_with("listen :8080;"))
    assert config.servers[0].listens == (ListenEntry("0.0.0.0", 8080),)


def test_listen_rejects_bare_number_token() -> None:
    error = parse_error(server_with("listen 8080;"))
    assert error.message == "Expected 'host:port' or 'port' after listen"
    assert error.line == 2


def test_duplicate_listen_entries_accumulate() -> None:
    config = parse_config(server_with("listen :80; listen :80;"))
    assert len(config.servers[0].listens) == 2


@pytest.mark.parametrize(
    "value, expected",
    [
        ("10M", 10 * 1024 * 1024),
        ("512K", 512 * 1024),
        ("512k", 512 * 1024),
        ("1GB", 1024 ** 3),
        ("3mb", 3 * 1024 ** 2),
        ("100", 100),
        ("100Q", 100),
        ("M", 0),
    ],
)
def test_parse_size(value: str, expected: int) -> None:
    assert parse_size(value) == expected


def test_client_max_body_size_directive() -> None:
    config = parse_config(server_with("client_max_body_size 10M;"))
    assert config.servers[0].client_max_body_size == 10 * 1024 * 1024


def test_client_max_body_size_defaults_to_unset() -> None:
    assert parse_config(server_with("listen :80;")).servers[0].client_max_body_size == 0


def test_duplicate_error_page_last_wins() -> None:
    config = parse_config(server_with("error_page 404 /a.html;\nerror_page 404 /b.html;"))
    assert dict(config.servers[0].error_pages) == {404: "/b.html"}


def test_duplicate_cgi_pass_last_wins() -> None:
    config = parse_config(
        server_with("location / { cgi_pass .py /bin/a; cgi_pass .py /bin/b; }")
    )
    assert dict(config.servers[0].locations[0].cgi_map) == {".py": "/bin/b"}


def test_return_without_target() -> None:
    config = parse_config(server_with("location / { return 301; }"))
    assert config.servers[0].locations[0].redirect == Redirect("301", "")


def test_return_with_target() -> None:
    config = parse_config(server_with("location / { return 301 /new; }"))
    assert config.servers[0].locations[0].redirect == Redirect("301", "/new")


def test_methods_are_case_sensitive_set() -> None:
    config = parse_config(server_with("location / { methods GET get GET; }"))
    assert config.servers[0].locations[0].methods == frozenset({"GET", "get"})


def test_autoindex_off() -> None:
    config = parse_config(server_with("location / { autoindex on; autoindex off; }"))
    assert config.servers[0].locations[0].autoindex is False


def test_missing_final_brace_is_unclosed_at_eof_line() -> None:
    error = parse_error("server {\n    listen :80;\n")
    assert "Unclosed server block" in error.message
    assert error.line == 3


def test_unclosed_location_block() -> None:
    error = parse_error("server {\n location / {\n  root /x;\n")
    assert "Unclosed location block" in error.message
    assert error.line == 4


def test_unknown_top_level_block() -> None:
    error = parse_error("http {\n}\n")
    assert error.message == "Expected 'server' block"
    assert error.line == 1


def test_unknown_server_directive_is_named() -> None:
    error = parse_error("server {\n  listen :80;\n  proxy_pass x;\n}")
    assert error.message == "Unknown server directive: proxy_pass"
    assert error.line == 3


def test_unknown_location_directive_is_named() -> None:
    error = parse_error(server_with("location / { listen :80; }"))
    assert error.message == "Unknown location directive: listen"


def test_missing_semicolon() -> None:
    error = parse_error("server {\n  root /srv\n  listen :80;\n}")
    assert error.message == "Expected ';'"
    assert error.line == 3


@pytest.mark.parametrize(
    "body, message",
    [
        ("listen ;", "Expected 'host:port' or 'port' after listen"),
        ("root ;", "root expects a path"),
        ("index ;", "index expects at least one filename"),
        ("server_name {", "server_name expects a name"),
        ('client_max_body_size "1M";', "client_max_body_size expects a number or suffixed size"),
        ("error_page abc /x.html;", "error_page expects a numeric code"),
        ("error_page 404;", "error_page expects a path"),
        ("location { }", "location expects a path prefix"),
        ("location / root", "Expected '{'"),
        ("location / { methods ; }", "methods expects a list (GET/POST/DELETE)"),
        ('location / { methods GET "POST"; }', "Expected ';'"),
        ("location / { autoindex yes; }", "autoindex value must be 'on' or 'off'"),
        ("location / { autoindex 1; }", "autoindex expects 'on' or 'off'"),
        ('location / { return "301"; }', "return expects a status code"),
        ("location / { return 301 {", "return expects a target path or URL"),
        ('location / { cgi_pass ".py" /bin/py; }', "cgi_pass expects an extension (e.g. .py)"),
        ("location / { cgi_pass .py; }", "cgi_pass expects an interpreter path"),
    ],
)
def test_directive_argument_errors(body: str, message: str) -> None:
    assert parse_error(server_with(body)).message == message


def test_unterminated_string_is_unexpected_end() -> None:
    error = parse_error('server {\n  root "/srv;\n}\n')
    assert error.message == "root expects a path"


def test_error_line_is_current_token_line() -> None:
    error = parse_error("server {\n  error_page\n\n  404;\n}")
    assert error.message == "error_page expects a path"
    assert error.line == 4


def test_every_directive_has_a_handler() -> None:
    assert set(ConfigParser.SERVER_HANDLERS) == set(ServerDirective)
    assert set(ConfigParser.LOCATION_HANDLERS) == set(LocationDirective)


def test_parse_config_file(write_config) -> None:
    path = write_config(FULL_CONFIG)
    assert parse_config_file(path) == parse_config(FULL_CONFIG)


def test_parse_config_file_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        parse_config_file(tmp_path / "nope.conf")


@pytest.mark.parametrize(
    "body",
    [
        "client_max_body_size " + "9" * 5000 + ";",
        "listen :" + "9" * 5000 + ";",
        "error_page " + "4" * 5000 + " /x.html;",
    ],
)
def test_oversized_number_is_a_parse_error(body: str) -> None:
    error = parse_error(server_with(body))
    assert error.message.startswith("Number too large")
    assert error.line == 2
