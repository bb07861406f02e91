"""Formatting of call stacks against the symbols of a linker map file.

Frame addresses cannot be read from the machine stack here, so they are
handed in by the caller: ``addresses[level]`` is the return address of the
frame ``level`` steps up the call chain. A zero address, or running past
the end of the sequence, marks the top of the stack.
"""

from __future__ import annotations

import os
from typing import Sequence

from dumakit.mapfile import MapFile, MapFileEntry, module_map_filename
from dumakit.textfile import ErrorType

__all__ = [
    "INTERNAL_FUNCTIONS",
    "MAX_DEPTH",
    "StackTracePrinter",
    "format_stack_trace",
    "is_internal_function",
]

MAX_DEPTH = 32
"""Deepest call stack that is ever walked."""

INTERNAL_FUNCTIONS = frozenset(
    {
        "__duma_malloc",
        "__duma_calloc",
        "__duma_realloc",
        "__duma_valloc",
        "__duma_allocate",
        "_printStackTrace",
    }
)
"""Allocator entry points that are left out of printed traces."""

_DEFAULT_INIT_LEVEL = 1
_DEFAULT_MAX_DEPTH = 16


def is_internal_function(name: str) -> bool:
    """True if ``name`` is one of the allocator's own entry points."""
    return name in INTERNAL_FUNCTIONS


def _lookup(maps: Sequence[MapFile], addr: int) -> MapFileEntry | None:
    for map_file in maps:
        index = map_file.find_entry(addr)
        if index is not None:
            return map_file[index]
    return None


def _caller(addresses: Sequence[int], level: int) -> int:
    return addresses[level] if 0 <= level < len(addresses) else 0


def format_stack_trace(
    maps: Sequence[MapFile],
    addresses: Sequence[int],
    init_level: int = _DEFAULT_INIT_LEVEL,
    max_depth: int = _DEFAULT_MAX_DEPTH,
    buffer_size: int | None = None,
) -> tuple[str, int]:
    """Format the call stack, outermost caller first.

    Frames from ``init_level`` up to (not including) ``max_depth`` are
    resolved against ``maps``; frames without a symbol and allocator
    internals are left out. Each line is indented by its depth.

    Returns the text and the number of characters the full trace needs.
    With ``buffer_size`` given, only the lines that fit in fewer than
    ``buffer_size`` characters are kept.
    """
    max_depth = min(max_depth, MAX_DEPTH)

    callers: list[tuple[int, MapFileEntry]] = []
    addr = -1
    level = init_level
    while level < max_depth and addr:
        addr = _caller(addresses, level)
        level += 1
        entry = _lookup(maps, addr)
        if entry is not None:
            callers.append((addr, entry))

    pieces: list[str] = []
    needed = 0
    for depth, (addr, entry) in enumerate(reversed(callers), start=1):
        if is_internal_function(entry.name):
            continue
        indent = " " * max(depth - init_level + 1, 0)
        line = f"{indent}{entry.name} ({addr:x})\n"
        needed += len(line)
        if buffer_size is None or needed < buffer_size:
            pieces.append(line)

    return "".join(pieces), needed


class StackTracePrinter:
    """Prints stack traces using a map file that is parsed once, lazily."""

    def __init__(self, map_filename: str | os.PathLike[str] | None = None) -> None:
        self.map_filename = map_filename
        self._map: MapFile | None = None
        self._message = ""

    def _load(self) -> MapFile:
        name = os.fspath(self.map_filename) if self.map_filename is not None else module_map_filename()
        map_file = MapFile(name)
        error = map_file.error()
        if error == ErrorType.OPEN:
            self._message = f"Failed to open map file {name}\n"
        elif error == ErrorType.READ:
            self._message = f"Error while reading map file {name}({map_file.line()})\n"
        elif error == ErrorType.PARSE:
            self._message = f"Parse error in map file {name}({map_file.line()})\n"
        else:
            self._message = ""
        return map_file

    def print_stack_trace(
        self, addresses: Sequence[int], buffer_size: int | None = None
    ) -> str:
        """Return the formatted trace, or a description of why the map
        file could not be used."""
        if self._map is None:
            self._map = self._load()
        if self._map.error():
            return self._message
        text, _ = format_stack_trace(
            [self._map], addresses, _DEFAULT_INIT_LEVEL, _DEFAULT_MAX_DEPTH, buffer_size
        )
        return text

    def cleanup(self) -> None:
        """Forget the parsed map file; the next trace parses it again."""
        self._map = None
        self._message = ""