"""Diagnostic helpers: message formatting, a recursive lock, a map-file parser and symbolised stack traces."""

__version__ = "0.1.0"
__all__ = ["printing", "semaphore", "textfile", "mapfile", "stacktrace"]