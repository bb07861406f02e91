"""Message formatting and reporting for the allocator's diagnostics.

The formatter understands a small, fixed set of conversions:

* ``%a`` / ``%x`` - an address, printed in lower-case hexadecimal
* ``%d`` - an unsigned size, printed in decimal
* ``%i`` / ``%l`` - a signed integer, printed in decimal
* ``%s`` - a string (``None`` prints as ``NULL``)
* ``%c`` - a single character
* ``%%`` - a literal percent sign
"""

from __future__ import annotations

import os
import sys
import warnings
from typing import Any, Callable, Iterator

__all__ = ["DumaAbort", "DumaExit", "Reporter", "format_message", "strerror"]

_ADDR_BITS = 64
_ADDR_MASK = (1 << _ADDR_BITS) - 1

_ABORT_PREFIX = "\nDUMA Aborting: "
_EXIT_PREFIX = "\nDUMA Exiting: "


class DumaAbort(Exception):
    """Raised when a fatal internal inconsistency is reported."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DumaExit(SystemExit):
    """Raised to end the program after a fatal error has been reported."""

    def __init__(self, message: str) -> None:
        super().__init__(-1)
        self.message = message

    def __str__(self) -> str:
        return self.message


def _unsigned(value: Any, base: int) -> str:
    number = 0 if value is None else int(value) & _ADDR_MASK
    return format(number, "x") if base == 16 else str(number)


def _signed(value: Any) -> str:
    return str(int(value))


def _string(value: Any) -> str:
    return "NULL" if value is None else str(value)


def _char(value: Any) -> str:
    if isinstance(value, int):
        return chr(value & 0xFF)
    if isinstance(value, str) and len(value) == 1:
        return value
    raise TypeError(f"%c needs an int or a single character, not {value!r}")


_CONVERSIONS: dict[str, Callable[[Any], str]] = {
    "a": lambda v: _unsigned(v, 16),
    "x": lambda v: _unsigned(v, 16),
    "d": lambda v: _unsigned(v, 10),
    "i": _signed,
    "l": _signed,
    "s": _string,
    "c": _char,
}


def format_message(pattern: str, *args: Any) -> str:
    """Format ``pattern`` with ``args`` using the allocator's conversions.

    Unknown conversions are reported with a ``RuntimeWarning`` and skipped.
    Raises ``TypeError`` if there are fewer arguments than conversions.
    """
    values: Iterator[Any] = iter(args)
    chars = iter(pattern)
    out: list[str] = []

    for ch in chars:
        if ch != "%":
            out.append(ch)
            continue
        spec = next(chars, "")
        if spec == "%":
            out.append("%")
            continue
        convert = _CONVERSIONS.get(spec) if spec else None
        if convert is None:
            warnings.warn(
                f"DUMA: Bad pattern specifier %{spec} in DUMA_Print().",
                RuntimeWarning,
                stacklevel=2,
            )
            continue
        try:
            value = next(values)
        except StopIteration:
            raise TypeError(f"not enough arguments for %{spec}") from None
        out.append(convert(value))

    return "".join(out)


def strerror(errno: int) -> str:
    """Describe a system error number without consulting the C library."""
    return format_message(
        "System Error Number 'errno' from Standard C Library is %i\n", errno
    )


class Reporter:
    """Writes diagnostic messages to stdout, stderr and/or a log file."""

    def __init__(
        self,
        to_stdout: bool = False,
        to_stderr: bool = True,
        output_file: str | os.PathLike[str] | None = None,
    ) -> None:
        self.to_stdout = to_stdout
        self.to_stderr = to_stderr
        self.output_file = output_file

    def print(self, pattern: str, *args: Any) -> str:
        """Format a message, write it to every configured output and return it."""
        text = format_message(pattern, *args)
        if self.to_stdout:
            sys.stdout.write(text)
            sys.stdout.flush()
        if self.to_stderr:
            sys.stderr.write(text)
            sys.stderr.flush()
        if self.output_file is not None:
            self._append(text)
        return text

    def _append(self, text: str) -> None:
        try:
            fd = os.open(
                self.output_file, os.O_APPEND | os.O_CREAT | os.O_WRONLY, 0o600
            )
        except OSError:
            return
        try:
            os.write(fd, text.encode("utf-8", errors="replace"))
        finally:
            os.close(fd)

    def abort(self, pattern: str, *args: Any) -> None:
        """Report a fatal error and raise :class:`DumaAbort`."""
        message = format_message(pattern, *args)
        self.print("%s", _ABORT_PREFIX + message + "\n")
        raise DumaAbort(message)

    def exit(self, pattern: str, *args: Any) -> None:
        """Report a fatal error and raise :class:`DumaExit`."""
        message = format_message(pattern, *args)
        self.print("%s", _EXIT_PREFIX + message + "\n")
        raise DumaExit(message)