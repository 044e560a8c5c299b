"""Console log sink — prints timestamped, level-tagged messages.

Anything that accepts ``(level, message)`` can be used as a log sink; the
two here cover the terminal and in-memory collection.
"""
from __future__ import annotations

import sys
from datetime import datetime
from typing import TextIO

from domstack.core.constants import LOG_LEVELS

_LEVEL_COLORS: dict[str, str] = {
    "DEBUG":   "\033[90m",
    "INFO":    "\033[0m",
    "WARNING": "\033[33m",
    "ERROR":   "\033[31m",
}
_RESET = "\033[0m"


def level_rank(level: str) -> int:
    level = level.upper()
    return LOG_LEVELS.index(level) if level in LOG_LEVELS else len(LOG_LEVELS)


class ConsoleLogSink:
    """Writes ``[HH:MM:SS.mmm] [LEVEL  ] message`` lines to a stream."""

    def __init__(
        self,
        stream:    TextIO | None = None,
        min_level: str           = "INFO",
        color:     str           = "auto",
    ) -> None:
        self._stream    = stream if stream is not None else sys.stderr
        self._min_rank  = level_rank(min_level)
        if color == "auto":
            isatty = getattr(self._stream, "isatty", None)
            self._color = bool(isatty and isatty())
        else:
            self._color = color == "always"

    def __call__(self, level: str, message: str) -> None:
        self.log(level, message)

    def log(self, level: str, message: str) -> None:
        """Append a timestamped entry, dropping levels below the minimum."""
        if level_rank(level) < self._min_rank:
            return
        ts  = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        tag = f"[{level.upper():7}]"
        if self._color:
            tag = f"{_LEVEL_COLORS.get(level.upper(), '')}{tag}{_RESET}"
        self._stream.write(f"[{ts}] {tag} {message}\n")
        self._stream.flush()


class ListLogSink:
    """Collects ``(level, message)`` pairs in memory."""

    def __init__(self) -> None:
        self.entries: list[tuple[str, str]] = []

    def __call__(self, level: str, message: str) -> None:
        self.entries.append((level.upper(), message))

    def messages(self, level: str | None = None) -> list[str]:
        if level is None:
            return [msg for _, msg in self.entries]
        return [msg for lvl, msg in self.entries if lvl == level.upper()]

    def clear(self) -> None:
        self.entries.clear()
