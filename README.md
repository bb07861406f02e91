# dumakit

Diagnostic building blocks for a red-zone memory debugger: message
formatting and reporting, a re-entrant lock, a parser for linker map files,
and symbolised stack traces built on that parser.

## Modules

### `dumakit.printing`

- `format_message(pattern, *args)` formats a message with a small, fixed set
  of conversions:
  - `%a` and `%x` print an address in lower-case hexadecimal. The value is
    taken as a 64-bit unsigned number.
  - `%d` prints an unsigned size in decimal.
  - `%i` and `%l` print a signed integer in decimal.
  - `%s` prints a string. `None` prints as `NULL`.
  - `%c` prints one character, given as an int or a one-character string.
  - `%%` prints a literal percent sign.

  An unknown conversion issues a `RuntimeWarning` and is skipped. Too few
  arguments raise `TypeError`.
- `strerror(errno)` returns
  `"System Error Number 'errno' from Standard C Library is <n>\n"`.
- `Reporter(to_stdout=False, to_stderr=True, output_file=None)` sends
  messages to each output you enable.
  - `print(pattern, *args)` formats the message, writes it and returns the
    text. With `output_file` set, it appends to that file and creates it
    with mode `0o600` if needed. If the file cannot be opened, that output
    is skipped without an error.
  - `abort(...)` writes `"\nDUMA Aborting: <message>\n"` and raises
    `DumaAbort`.
  - `exit(...)` writes `"\nDUMA Exiting: <message>\n"` and raises
    `DumaExit`. `DumaExit` is a `SystemExit` with code `-1`.

  Both exceptions carry the formatted text in `.message`.

### `dumakit.semaphore`

`RecursiveSemaphore` is a thread-owned lock that the owning thread may
acquire again.

- The underlying lock is created lazily by `init()` or by the first
  `acquire()`.
- `release(retval)` pops one level of the hold and returns `retval`
  unchanged. The lock is given up only when the depth reaches zero.
- `release` raises `SemaphoreError` in three cases: the semaphore was never
  initialised, it is not locked, or it is held by another thread.
- The semaphore also works as a context manager.

### `dumakit.textfile`

`TextFile(path)` reads a text file one character, token or hex number at a
time. It never raises on bad input. Failures are recorded as an `ErrorType`
(`NONE`, `OPEN`, `READ`, `PARSE`) and returned by `error()`. After an error,
the reading methods do nothing.

- Reading: `peek_char()`, `read_char()`, `skip_whitespace()`,
  `read_string(size=None)`, `skip_line()`, `read_hex()`.
- State: `eof()`, `error()`, `line()`.
- Closing: `close()`, or use the reader as a context manager.

### `dumakit.mapfile`

`MapFile(filename)` parses the public symbol table of a linker map file. This
is the block after the `Address Publics by Value Rva+Base Lib:Object` header,
ended by an empty line.

- Symbol names are cleaned: they are cut at `@@`, leading digits, `?` and `$`
  are dropped, and any remaining `@` becomes `.`.
- Entries are `MapFileEntry` dataclasses with `section`, `offset`, `length`,
  `name`, `rvabase` and `lib`. Names and libraries are limited to
  `MAX_NAME` (256) characters.
- Entries are sorted by `rvabase`. Get them with `entries()`, iteration,
  indexing or `len()`.
- `find_entry(addr)` returns the index of the last entry whose `rvabase` is at
  or below `addr`. It returns `None` for address `0`, for an empty map, or for
  an address more than 10000 past the last entry.
- `error()` and `line()` report parse or read failures.
- `load_address()` always returns `0`, because the load address is not read.

`module_map_filename(module_path=None)` drops a `.exe`, `.EXE`, `.dll` or
`.DLL` extension and appends `.map`. Without a path it uses the running
executable on Windows. On other systems it returns just `.map`.

### `dumakit.stacktrace`

- `format_stack_trace(maps, addresses, init_level=1, max_depth=16, buffer_size=None)`
  resolves caller addresses against one or more `MapFile`s and returns
  `(text, needed)`.
  - `addresses[level]` is the return address `level` frames up the stack.
  - Walking stops at a `0` address, at the end of the sequence, or at
    `max_depth`. The depth is capped at `MAX_DEPTH` (32).
  - Unresolved frames and the allocator's own entry points
    (`INTERNAL_FUNCTIONS`, checked by `is_internal_function`) are left out.
  - The outermost caller comes first, and each line is indented by its depth.
  - With `buffer_size`, only lines whose running total stays below it are
    kept. `needed` is always the length of the full trace.
- `StackTracePrinter(map_filename=None)` parses its map file once, on first
  use. Without a file name it uses `module_map_filename()`.
  - `print_stack_trace(addresses, buffer_size=None)` returns the trace. If the
    map file could not be used, it returns a one-line message instead, such
    as `Failed to open map file <name>`.
  - `cleanup()` drops the parsed map so that the next call parses it again.

## What it does not do

This package does not allocate, guard or check memory. It has no allocator,
no red zones and no leak detection; it only offers the helpers listed above.
It cannot read return addresses from the running machine stack, so callers of
`format_stack_trace` and `StackTracePrinter` must supply the addresses
themselves. It provides no command-line program.

## Example

```python
from dumakit.printing import format_message
from dumakit.stacktrace import StackTracePrinter

print(format_message("block %a of %d bytes", 0x1F00, 64))  # block 1f00 of 64 bytes

printer = StackTracePrinter("program.map")
print(printer.print_stack_trace([0, 0x004011A0, 0x00401230], 600))
printer.cleanup()
```

## Tests

```
pip install -e .[test]
pytest
```