"""
Recursive descent parser for the virtual-server configuration syntax.

Pulls tokens from the lexer one at a time (single token lookahead) and
builds a Config tree. Directive keywords are resolved through the
ServerDirective/LocationDirective enumerations; each handler receives the
builder of the enclosing block and returns it.
"""

import re
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TypeVar

from ..const import WILDCARD_ADDRESS
from ..logging import get_logger
from .errors import ParseError
from .lexer import Lexer, Token, TokenType
from .schema import (
    Config,
    ListenEntry,
    LocationBlock,
    LocationBuilder,
    Redirect,
    ServerBlock,
    ServerBuilder,
)

logger = get_logger("config.parser")


class ServerDirective(Enum):
    """Directives accepted inside a server block."""
    LISTEN = "listen"
    ROOT = "root"
    INDEX = "index"
    SERVER_NAME = "server_name"
    CLIENT_MAX_BODY_SIZE = "client_max_body_size"
    ERROR_PAGE = "error_page"
    LOCATION = "location"


class LocationDirective(Enum):
    """Directives accepted inside a location block."""
    ROOT = "root"
    METHODS = "methods"
    AUTOINDEX = "autoindex"
    INDEX = "index"
    UPLOAD_STORE = "upload_store"
    RETURN = "return"
    CGI_PASS = "cgi_pass"


# Power-of-1024 multipliers for client_max_body_size suffixes
SIZE_UNITS = {
    "k": 1024,
    "kb": 1024,
    "m": 1024 ** 2,
    "mb": 1024 ** 2,
    "g": 1024 ** 3,
    "gb": 1024 ** 3,
}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_SIZE = re.compile(r"(\d*)(.*)", re.DOTALL)

PATH_TYPES = (TokenType.IDENTIFIER, TokenType.STRING)

BuilderT = TypeVar("BuilderT", ServerBuilder, LocationBuilder)
ValueT = TypeVar("ValueT")


def parse_int(text: str) -> int:
    """
    Parse the leading integer of a string, yielding 0 when there is none.

    "8080" -> 8080, "80abc" -> 80, "abc" -> 0

    Raises:
        ValueError: If the digit run is too long to convert
    """
    match = _LEADING_INT.match(text)
    if not match:
        return 0
    return int(match.group(1))


def split_host_port(value: str) -> ListenEntry:
    """
    Split a listen value into host and port.

    The value is split on its last colon. Without a colon the whole value
    is the port; an empty or "*" host becomes the wildcard address. The
    port is not range-checked here.

    Examples:
        "127.0.0.1:8080" -> ListenEntry("127.0.0.1", 8080)
        "*:8080", ":8080", "8080" -> ListenEntry("0.0.0.0", 8080)
    """
    host, sep, port = value.rpartition(":")
    if not sep:
        return ListenEntry(WILDCARD_ADDRESS, parse_int(value))
    if host in ("", "*"):
        host = WILDCARD_ADDRESS
    return ListenEntry(host, parse_int(port))


def parse_size(value: str) -> int:
    """
    Parse a size with an optional K/KB/M/MB/G/GB suffix into bytes.

    Suffixes are case-insensitive. An unknown suffix is ignored and the
    numeric prefix alone is returned; no numeric prefix means 0.

    Examples:
        "10M" -> 10485760, "512k" -> 524288, "100" -> 100, "100Q" -> 100

    Raises:
        ValueError: If the digit run is too long to convert
    """
    match = _SIZE.match(value)
    digits, suffix = match.group(1), match.group(2)
    base = int(digits) if digits else 0
    return base * SIZE_UNITS.get(suffix.lower(), 1)


class ConfigParser:
    """
    Recursive descent parser for the configuration syntax.

    Grammar:
        config      := server*
        server      := 'server' '{' server_directive* '}'
        server_directive := listen | root | index | server_name
                          | client_max_body_size | error_page | location
        location    := 'location' path '{' location_directive* '}'
        location_directive := root | methods | autoindex | index
                            | upload_store | return | cgi_pass
    """

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.current_token: Token = lexer.next_token()

    def _advance(self) -> Token:
        """Advance to next token and return the previous one."""
        previous = self.current_token
        self.current_token = self.lexer.next_token()
        return previous

    def _check(self, *token_types: TokenType) -> bool:
        """Check if current token is of one of the given types."""
        return self.current_token.type in token_types

    def _error(self, message: str) -> ParseError:
        return ParseError(message, self.current_token.line, self.current_token.column)

    def _expect(self, token_type: TokenType, what: str) -> Token:
        """Expect current token to be of given type, advance and return it."""
        if not self._check(token_type):
            raise self._error(f"Expected {what}")
        return self._advance()

    def _expect_argument(self, message: str, *token_types: TokenType) -> Token:
        """Consume a directive argument of one of the given types."""
        if not self._check(*token_types):
            raise self._error(message)
        return self._advance()

    def _expect_value(self, message: str, *token_types: TokenType) -> str:
        """Consume a directive argument of one of the given types and return its text."""
        return self._expect_argument(message, *token_types).text

    @staticmethod
    def _convert(token: Token, convert: Callable[[str], ValueT]) -> ValueT:
        """Apply a numeric conversion to a token, reporting failures at the token."""
        try:
            return convert(token.text)
        except ValueError:
            raise ParseError(
                f"Number too large: {token.text[:16]}...", token.line, token.column
            ) from None

    def _end_directive(self) -> None:
        self._expect(TokenType.SEMICOLON, "';'")

    def parse(self) -> Config:
        """Parse the entire configuration."""
        servers: list[ServerBlock] = []

        while not self._check(TokenType.EOF):
            if self._check(TokenType.IDENTIFIER) and self.current_token.text == "server":
                servers.append(self._parse_server())
            else:
                raise self._error("Expected 'server' block")

        logger.debug(f"Parsed {len(servers)} server block(s) from {self.lexer.filename}")
        return Config(servers=tuple(servers))

    def _parse_server(self) -> ServerBlock:
        """Parse a server block, starting at the 'server' keyword."""
        start_line = self._advance().line
        self._expect(TokenType.LBRACE, "'{'")

        builder = ServerBuilder()
        while not self._check(TokenType.RBRACE):
            if self._check(TokenType.EOF):
                raise self._error("Unclosed server block")
            builder = self._parse_server_directive(builder)
        self._advance()  # consume }

        server = builder.build()
        logger.debug(
            f"Server block at line {start_line}: {len(server.listens)} listen, "
            f"{len(server.locations)} location(s)"
        )
        return server

    def _parse_server_directive(self, builder: ServerBuilder) -> ServerBuilder:
        if not self._check(TokenType.IDENTIFIER):
            raise self._error("Expected directive name")

        name = self.current_token.text
        try:
            directive = ServerDirective(name)
        except ValueError:
            raise self._error(f"Unknown server directive: {name}") from None

        self._advance()  # consume keyword
        return self.SERVER_HANDLERS[directive](self, builder)

    def _parse_location_block(self, prefix: str) -> LocationBlock:
        """Parse the directives of a location block, after its opening brace."""
        builder = LocationBuilder(path_prefix=prefix)
        while not self._check(TokenType.RBRACE):
            if self._check(TokenType.EOF):
                raise self._error("Unclosed location block")
            builder = self._parse_location_directive(builder)
        return builder.build()

    def _parse_location_directive(self, builder: LocationBuilder) -> LocationBuilder:
        if not self._check(TokenType.IDENTIFIER):
            raise self._error("Expected directive name in location")

        name = self.current_token.text
        try:
            directive = LocationDirective(name)
        except ValueError:
            raise self._error(f"Unknown location directive: {name}") from None

        self._advance()  # consume keyword
        return self.LOCATION_HANDLERS[directive](self, builder)

    # Directives shared by server and location blocks

    def _root(self, builder: BuilderT) -> BuilderT:
        builder.root = self._expect_value("root expects a path", *PATH_TYPES)
        self._end_directive()
        return builder

    def _index(self, builder: BuilderT) -> BuilderT:
        if not self._check(*PATH_TYPES):
            raise self._error("index expects at least one filename")
        while self._check(*PATH_TYPES):
            builder.index_files.append(self._advance().text)
        self._end_directive()
        return builder

    # Server directives

    def _listen(self, builder: ServerBuilder) -> ServerBuilder:
        value = self._expect_argument(
            "Expected 'host:port' or 'port' after listen", *PATH_TYPES
        )
        self._end_directive()
        builder.listens.append(self._convert(value, split_host_port))
        return builder

    def _server_name(self, builder: ServerBuilder) -> ServerBuilder:
        builder.server_name = self._expect_value("server_name expects a name", *PATH_TYPES)
        self._end_directive()
        return builder

    def _client_max_body_size(self, builder: ServerBuilder) -> ServerBuilder:
        value = self._expect_argument(
            "client_max_body_size expects a number or suffixed size",
            TokenType.IDENTIFIER,
            TokenType.NUMBER,
        )
        builder.client_max_body_size = self._convert(value, parse_size)
        self._end_directive()
        return builder

    def _error_page(self, builder: ServerBuilder) -> ServerBuilder:
        code = self._convert(
            self._expect_argument("error_page expects a numeric code", TokenType.NUMBER),
            parse_int,
        )
        path = self._expect_value("error_page expects a path", *PATH_TYPES)
        # Last definition for a code wins
        builder.error_pages[code] = path
        self._end_directive()
        return builder

    def _location(self, builder: ServerBuilder) -> ServerBuilder:
        prefix = self._expect_value("location expects a path prefix", *PATH_TYPES)
        self._expect(TokenType.LBRACE, "'{'")
        location = self._parse_location_block(prefix)
        self._expect(TokenType.RBRACE, "'}'")
        builder.locations.append(location)
        return builder

    # Location directives

    def _methods(self, builder: LocationBuilder) -> LocationBuilder:
        if not self._check(TokenType.IDENTIFIER):
            raise self._error("methods expects a list (GET/POST/DELETE)")
        while self._check(TokenType.IDENTIFIER):
            builder.methods.add(self._advance().text)
        self._end_directive()
        return builder

    def _autoindex(self, builder: LocationBuilder) -> LocationBuilder:
        if not self._check(TokenType.IDENTIFIER):
            raise self._error("autoindex expects 'on' or 'off'")
        if self.current_token.text not in ("on", "off"):
            raise self._error("autoindex value must be 'on' or 'off'")
        builder.autoindex = self._advance().text == "on"
        self._end_directive()
        return builder

    def _upload_store(self, builder: LocationBuilder) -> LocationBuilder:
        builder.upload_store = self._expect_value("upload_store expects a path", *PATH_TYPES)
        self._end_directive()
        return builder

    def _return(self, builder: LocationBuilder) -> LocationBuilder:
        code = self._expect_value(
            "return expects a status code", TokenType.NUMBER, TokenType.IDENTIFIER
        )
        if self._check(TokenType.SEMICOLON):
            self._advance()
            builder.redirect = Redirect(code, "")
            return builder

        target = self._expect_value("return expects a target path or URL", *PATH_TYPES)
        builder.redirect = Redirect(code, target)
        self._end_directive()
        return builder

    def _cgi_pass(self, builder: LocationBuilder) -> LocationBuilder:
        extension = self._expect_value(
            "cgi_pass expects an extension (e.g. .py)", TokenType.IDENTIFIER
        )
        interpreter = self._expect_value("cgi_pass expects an interpreter path", *PATH_TYPES)
        # Last mapping for an extension wins
        builder.cgi_map[extension] = interpreter
        self._end_directive()
        return builder

    SERVER_HANDLERS: dict[ServerDirective, Callable[["ConfigParser", ServerBuilder], ServerBuilder]] = {
        ServerDirective.LISTEN: _listen,
        ServerDirective.ROOT: _root,
        ServerDirective.INDEX: _index,
        ServerDirective.SERVER_NAME: _server_name,
        ServerDirective.CLIENT_MAX_BODY_SIZE: _client_max_body_size,
        ServerDirective.ERROR_PAGE: _error_page,
        ServerDirective.LOCATION: _location,
    }

    LOCATION_HANDLERS: dict[
        LocationDirective, Callable[["ConfigParser", LocationBuilder], LocationBuilder]
    ] = {
        LocationDirective.ROOT: _root,
        LocationDirective.METHODS: _methods,
        LocationDirective.AUTOINDEX: _autoindex,
        LocationDirective.INDEX: _index,
        LocationDirective.UPLOAD_STORE: _upload_store,
        LocationDirective.RETURN: _return,
        LocationDirective.CGI_PASS: _cgi_pass,
    }


def parse_config(source: str, filename: str = "<string>") -> Config:
    """
    Convenience function to parse a configuration string.

    Args:
        source: Configuration source text
        filename: Filename for log messages

    Returns:
        Parsed (not yet validated) Config

    Raises:
        ParseError: On the first syntax error
    """
    return ConfigParser(Lexer(source, filename)).parse()


def parse_config_file(path: str | Path) -> Config:
    """
    Parse a configuration file.

    Args:
        path: Path to the configuration file

    Returns:
        Parsed (not yet validated) Config

    Raises:
        OSError: If the file cannot be read
        ParseError: On the first syntax error
    """
    lexer = Lexer()
    lexer.load(path)
    return ConfigParser(lexer).parse()
