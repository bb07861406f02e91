"""Parser for linker-generated module map files.

Only the public symbol table is read: the block that follows the
``Address Publics by Value Rva+Base Lib:Object`` header, one symbol per
line, ended by an empty line.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from operator import attrgetter
from typing import Iterator

from dumakit.textfile import ErrorType, TextFile

__all__ = ["MAX_NAME", "ErrorType", "MapFile", "MapFileEntry", "module_map_filename"]

MAX_NAME = 256
"""Maximum number of characters kept of an entry's name or library."""

_TOKEN_SIZE = 256
_LINE_TOKEN_SIZE = 1024
_LOOKUP_SLACK = 10000


@dataclass(frozen=True)
class MapFileEntry:
    """One public symbol of a map file."""

    section: int = 0
    offset: int = 0
    length: int = 0
    name: str = ""
    rvabase: int = 0
    lib: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name[:MAX_NAME])
        object.__setattr__(self, "lib", (self.lib or "")[:MAX_NAME])

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MapFileEntry):
            return NotImplemented
        return self.rvabase < other.rvabase


def _clean_name(raw: str) -> str:
    """Strip decoration from a symbol name: cut at '@@', drop leading
    digits, '?' and '$', and turn remaining '@' into '.'."""
    name = raw.split("@@", 1)[0]
    name = name.lstrip("0123456789?$")
    return name.replace("@", ".")


class MapFile:
    """A parsed map file; entries are sorted by their rva+base address."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self._load_addr = 0
        self._entries: list[MapFileEntry] = []
        self._err = ErrorType.NONE
        self._err_line = 0
        self._file = TextFile(filename)
        try:
            self.module_name = self._file.read_string(_TOKEN_SIZE)
            while token := self._file.read_string(_LINE_TOKEN_SIZE):
                if token == "Address":
                    self._parse_entries()
                else:
                    self._file.skip_line()
        finally:
            self._file.close()
        self._entries.sort(key=attrgetter("rvabase"))

    def _fail(self) -> None:
        self._err = ErrorType.PARSE
        self._err_line = self._file.line()

    def _expect(self, word: str) -> None:
        if self._file.read_string(_TOKEN_SIZE) != word:
            self._fail()

    def _expect_char(self, expected: str) -> None:
        if self._file.read_char() != expected:
            self._fail()

    def _next_line_empty(self) -> bool:
        self._file.skip_line()
        while (ch := self._file.peek_char()) is not None and ch.isspace() and ch != "\n":
            self._file.read_char()
        return self._file.peek_char() == "\n"

    def _parse_entries(self) -> None:
        for word in ("Publics", "by", "Value", "Rva+Base", "Lib:Object"):
            self._expect(word)
        self._file.skip_whitespace()

        while not self.error():
            section = self._file.read_hex()
            self._expect_char(":")
            offset = self._file.read_hex()
            raw_name = self._file.read_string(_TOKEN_SIZE)
            rvabase = self._file.read_hex()
            lib = self._file.read_string(_TOKEN_SIZE)
            if lib == "f":
                lib = self._file.read_string(_TOKEN_SIZE)
            self._entries.append(
                MapFileEntry(section, offset, 0, _clean_name(raw_name), rvabase, lib)
            )
            if self._next_line_empty():
                break

    def load_address(self) -> int:
        """The preferred load address; the parser does not read it, so it is 0."""
        return self._load_addr

    def entries(self) -> tuple[MapFileEntry, ...]:
        """All entries, sorted by rva+base."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> MapFileEntry:
        return self._entries[index]

    def __iter__(self) -> Iterator[MapFileEntry]:
        return iter(self._entries)

    def error(self) -> ErrorType:
        """The parse error if any, otherwise the reader's error."""
        if self._err != ErrorType.NONE:
            return self._err
        return self._file.error()

    def line(self) -> int:
        """Line of the parse error, or the last line the reader reached."""
        if self._err != ErrorType.NONE:
            return self._err_line
        return self._file.line()

    def find_entry(self, addr: int) -> int | None:
        """Index of the entry that contains ``addr``, or None."""
        if addr == 0 or not self._entries:
            return None
        if addr > self._entries[-1].rvabase + _LOOKUP_SLACK:
            return None
        for index in range(len(self._entries) - 1, -1, -1):
            if self._entries[index].rvabase <= addr:
                return index
        return None


def module_map_filename(module_path: str | None = None) -> str:
    """Map file name for a module: drop a .exe/.dll extension, add .map.

    Without a path, the running executable is used on Windows; elsewhere
    the module name is unknown and the result is just ``.map``.
    """
    if module_path is None:
        module_path = sys.executable if sys.platform == "win32" else ""
    if len(module_path) > 3 and module_path[-4:] in (".exe", ".EXE", ".DLL", ".dll"):
        module_path = module_path[:-4]
    return module_path + ".map"