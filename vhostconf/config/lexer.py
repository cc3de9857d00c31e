"""
Lexer (tokenizer) for the virtual-server configuration syntax.

Supports:
- Identifiers (directive names, paths, host:port pairs, sizes like 10M)
- Numbers (digit-only words)
- Quoted strings (double quotes; backslash escapes are kept verbatim)
- Braces and semicolons
- Single-line (#) comments
"""

import string
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from .errors import ParseError


class TokenType(Enum):
    """Token types for the configuration syntax."""

    # Literals
    IDENTIFIER = auto()    # directive name, path, 10M, 127.0.0.1:80
    NUMBER = auto()        # 8080
    STRING = auto()        # "quoted string"

    # Delimiters
    LBRACE = auto()        # {
    RBRACE = auto()        # }
    SEMICOLON = auto()     # ;

    # Special
    EOF = auto()           # end of input, also returned for an unterminated string


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""

    type: TokenType
    text: str
    line: int
    column: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.column})"


WHITESPACE = " \t\r\n\v\f"
IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_.:-/[]")
SINGLE_CHAR_TOKENS = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
}


class Lexer:
    """
    Tokenizer for the configuration syntax.

    Tokens are produced on demand by next_token(); once the input is
    exhausted every further call returns an EOF token.

    Example config:
        server {
            listen 127.0.0.1:8080;
            root ./www;
            location /upload {
                methods POST;
                upload_store uploads;
            }
        }
    """

    def __init__(self, source: str = "", filename: str = "<string>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def load(self, path: str | Path) -> None:
        """
        Buffer the whole content of a file and rewind to its start.

        Args:
            path: Path to the configuration file

        Raises:
            OSError: If the file cannot be opened or read
            ParseError: If the file is not valid UTF-8
        """
        path = Path(path)
        raw = path.read_bytes()
        try:
            source = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            line_start = raw.rfind(b"\n", 0, e.start) + 1
            raise ParseError(
                f"Invalid UTF-8 byte 0x{raw[e.start]:02x}",
                raw.count(b"\n", 0, e.start) + 1,
                e.start - line_start + 1,
            ) from e
        # Line-oriented reads always leave the last line terminated
        if source and not source.endswith("\n"):
            source += "\n"

        self.source = source
        self.filename = str(path)
        self.pos = 0
        self.line = 1
        self.column = 1

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _current(self) -> str:
        """Get current character or empty string if at end."""
        if self.pos >= len(self.source):
            return ""
        return self.source[self.pos]

    def _advance(self) -> str:
        """Advance position and return the consumed character."""
        if self.pos >= len(self.source):
            return ""

        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def _skip_whitespace_and_comments(self) -> None:
        """Skip any interleaving of whitespace runs and # comments."""
        while True:
            while not self._at_end() and self._current() in WHITESPACE:
                self._advance()

            if self._current() != "#":
                break

            while not self._at_end() and self._advance() != "\n":
                pass

    def _read_string(self) -> Token:
        """Read a quoted string literal; escapes are consumed but not interpreted."""
        start_line = self.line
        start_col = self.column
        self._advance()  # skip opening quote
        start_pos = self.pos

        while not self._at_end() and self._current() != '"':
            if self._advance() == "\\" and not self._at_end():
                self._advance()

        if self._at_end():
            # Unterminated literal: the parser sees a premature end of input
            return Token(TokenType.EOF, "", self.line, self.column)

        text = self.source[start_pos:self.pos]
        self._advance()  # skip closing quote

        return Token(TokenType.STRING, text, start_line, start_col)

    def _read_word(self) -> Token:
        """Read an identifier, or a number if the word is made of digits only."""
        start_line = self.line
        start_col = self.column
        start_pos = self.pos

        while not self._at_end() and self._current() in IDENTIFIER_CHARS:
            self._advance()

        text = self.source[start_pos:self.pos]

        if not text:
            raise ParseError(
                f"Unexpected character: {self._current()!r}", start_line, start_col
            )

        if text.isdigit():
            return Token(TokenType.NUMBER, text, start_line, start_col)

        return Token(TokenType.IDENTIFIER, text, start_line, start_col)

    def next_token(self) -> Token:
        """Get the next token from the source."""
        self._skip_whitespace_and_comments()

        if self._at_end():
            return Token(TokenType.EOF, "", self.line, self.column)

        char = self._current()

        if char in SINGLE_CHAR_TOKENS:
            token = Token(SINGLE_CHAR_TOKENS[char], char, self.line, self.column)
            self._advance()
            return token

        if char == '"':
            return self._read_string()

        return self._read_word()

    def tokenize(self) -> Iterator[Token]:
        """Generate all tokens from the source, ending with a single EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def __iter__(self) -> Iterator[Token]:
        """Allow iteration over tokens."""
        return self.tokenize()


def tokenize(source: str, filename: str = "<string>") -> list[Token]:
    """Convenience function to tokenize a source string."""
    return list(Lexer(source, filename))
