"""
Exceptions raised by the configuration pipeline.

Parsing and validation fail with distinct exception types so callers can
tell a malformed file apart from one that merely points at missing paths.
Both derive from ConfigError for callers that treat them the same way.
"""


class ConfigError(Exception):
    """Base class for configuration errors."""

    pass


class ParseError(ConfigError):
    """Syntactic error: wrong token, unknown directive, unclosed block."""

    def __init__(self, message: str, line: int, column: int | None = None):
        self.message = message
        self.line = line
        self.column = column
        if column is not None:
            super().__init__(f"Line {line}, column {column}: {message}")
        else:
            super().__init__(f"Line {line}: {message}")


class ValidationError(ConfigError):
    """Semantic error found after parsing: bad port, missing path, wrong path type."""

    def __init__(
        self,
        message: str,
        server_index: int | None = None,
        location: str | None = None,
        path: str | None = None,
    ):
        self.message = message
        self.server_index = server_index
        self.location = location
        self.path = path
        super().__init__(message)
