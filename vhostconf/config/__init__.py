"""
Configuration parsing and validation for nginx-style server blocks.
"""

from .errors import ConfigError, ParseError, ValidationError
from .fs import FileSystem, LocalFileSystem, MemoryFileSystem
from .lexer import Lexer, Token, TokenType
from .loader import ConfigLoader, load_config
from .parser import ConfigParser, parse_config, parse_config_file
from .schema import Config, ListenEntry, LocationBlock, Redirect, ServerBlock
from .validator import ConfigValidator, validate_config

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "ConfigParser",
    "parse_config",
    "parse_config_file",
    "Config",
    "ServerBlock",
    "LocationBlock",
    "ListenEntry",
    "Redirect",
    "ConfigValidator",
    "validate_config",
    "FileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "ConfigLoader",
    "load_config",
    "ConfigError",
    "ParseError",
    "ValidationError",
]
