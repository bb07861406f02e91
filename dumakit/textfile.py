"""A small character-level reader for plain ASCII text files.

The reader never raises on bad input: failures are recorded and reported
through :meth:`TextFile.error`. Once an error has been recorded every
reading method becomes a no-op.
"""

from __future__ import annotations

import os
from enum import IntEnum
from typing import IO, Any

__all__ = ["ErrorType", "TextFile"]

_WHITESPACE = frozenset(" \t\n\v\f\r")
_HEX_DIGITS = {ch: int(ch, 16) for ch in "0123456789abcdefABCDEF"}


class ErrorType(IntEnum):
    """Error state of a reader; ``NONE`` is falsy."""

    NONE = 0
    OPEN = 1
    READ = 2
    PARSE = 3


class TextFile:
    """Reads a text file one character, token or hex number at a time."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._err = ErrorType.NONE
        self._line = 1
        self._peeked: str | None = None
        self._at_eof = False
        self._file: IO[str] | None
        try:
            self._file = open(path, "r", encoding="latin-1")
        except OSError:
            self._file = None
            self._err = ErrorType.OPEN

    def peek_char(self) -> str | None:
        """Return the next character without consuming it, or None."""
        if self._err:
            return None
        if self._peeked is None and self._file is not None:
            try:
                ch = self._file.read(1)
            except OSError:
                self._err = ErrorType.READ
                return None
            if ch:
                self._peeked = ch
            else:
                self._at_eof = True
        return self._peeked

    def read_char(self) -> str | None:
        """Consume and return the next character, or None at the end."""
        if self._err:
            return None
        ch = self.peek_char()
        self._peeked = None
        if ch == "\n":
            self._line += 1
        return ch

    def skip_whitespace(self) -> bool:
        """Skip whitespace; return False if the end of the file was reached."""
        if self._err:
            return False
        while (ch := self.peek_char()) is not None and ch in _WHITESPACE:
            self.read_char()
        return not self.eof()

    def read_string(self, size: int | None = None) -> str:
        """Read a whitespace-delimited token.

        With ``size`` given, at most ``size - 1`` characters are kept; the
        rest of the token is consumed and dropped. An empty result means
        nothing could be stored.
        """
        if self._err:
            return ""
        self.skip_whitespace()
        limit = None if size is None else max(size - 1, 0)
        chars: list[str] = []
        while (ch := self.peek_char()) is not None and ch not in _WHITESPACE:
            if limit is None or len(chars) < limit:
                chars.append(ch)
            self.read_char()
        return "".join(chars)

    def skip_line(self) -> None:
        """Consume everything up to and including the next newline."""
        if self._err:
            return
        while (ch := self.read_char()) is not None:
            if ch == "\n":
                break

    def read_hex(self) -> int:
        """Read a hexadecimal number after optional whitespace.

        The number must start with an alphanumeric character, otherwise a
        parse error is recorded and 0 is returned.
        """
        if self._err:
            return 0
        self.skip_whitespace()
        ch = self.peek_char()
        if ch is None or not (ch.isascii() and ch.isalnum()):
            self._err = ErrorType.PARSE
            return 0
        value = 0
        while (ch := self.peek_char()) is not None:
            digit = _HEX_DIGITS.get(ch)
            if digit is None:
                break
            value = (value << 4) | digit
            self.read_char()
        return value

    def eof(self) -> bool:
        """True once the end of the file was hit, or after any error."""
        if self._err:
            return True
        return self._at_eof

    def error(self) -> ErrorType:
        """The recorded error, ``ErrorType.NONE`` if there is none."""
        return self._err

    def line(self) -> int:
        """The current line number, starting at 1."""
        return self._line

    def close(self) -> None:
        """Close the underlying file; the error state is kept."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "TextFile":
        return self

    def __exit__(self, *args: Any) -> bool:
        self.close()
        return False