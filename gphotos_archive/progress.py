"""
Run statistics and the rolling console summary shown to the operator.
"""
import sys
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TextIO

from . import config


class Outcome(str, Enum):
    ARCHIVED = "archived"
    SKIPPED = "skipped"
    TIMEOUT = "timeout"


@dataclass
class RunStats:
    archived: int = 0
    skipped: int = 0
    timeouts: int = 0
    history: deque = field(default_factory=lambda: deque(maxlen=config.HISTORY_SIZE))

    @property
    def total(self) -> int:
        return self.archived + self.skipped + self.timeouts

    def count(self, outcome: Outcome) -> None:
        if outcome == Outcome.ARCHIVED:
            self.archived += 1
        elif outcome == Outcome.SKIPPED:
            self.skipped += 1
        else:
            self.timeouts += 1


class ProgressLogger:
    """
    Prints prefixed log lines and keeps the last few of them for the summary.
    On a terminal the summary is redrawn in place after every processed item.
    """

    def __init__(self, stats: Optional[RunStats] = None, stream: Optional[TextIO] = None, verbose: bool = False):
        self.stats = stats if stats is not None else RunStats()
        self._stream = stream
        self.verbose = verbose

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _emit(self, level: str, message: str) -> None:
        line = f"[{level}] {message}"
        self.stats.history.append(line)
        print(line, file=self.stream, flush=True)

    def debug(self, message: str) -> None:
        if self.verbose:
            self._emit("DEBUG", message)

    def info(self, message: str) -> None:
        self._emit("INFO", message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", message)

    def error(self, message: str) -> None:
        self._emit("ERROR", message)

    def record(self, outcome: Outcome, locator: str) -> None:
        """Count an item outcome and redraw the summary."""
        self.stats.count(outcome)
        self.stats.history.append(f"[{outcome.value.upper()}] {locator}")
        self.render()

    def summary_line(self) -> str:
        s = self.stats
        return f"Processed {s.total}: {s.archived} archived, {s.skipped} skipped, {s.timeouts} timed out"

    def render(self) -> None:
        out = self.stream
        if not out.isatty():
            print(f"[INFO] {self.summary_line()}", file=out, flush=True)
            return

        # Clear screen and move cursor home
        out.write("\033[2J\033[H")
        print("=" * 60, file=out)
        print(f"  Archived: {self.stats.archived}   Skipped: {self.stats.skipped}   "
              f"Timed out: {self.stats.timeouts}", file=out)
        print("=" * 60, file=out)
        for line in self.stats.history:
            print(f"  {line}", file=out)
        out.flush()
