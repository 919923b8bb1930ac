from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

BAR_WIDTH = 28


@dataclass
class ProgressState:
    total: int
    completed: int = 0
    start_time: float = 0.0


def fmt_mmss(seconds: float) -> str:
    s = max(0, int(seconds))
    return f"{s // 60:02d}:{s % 60:02d}"


def open_progress_stream() -> TextIO:
    """Prefer the controlling terminal so progress survives redirected stdout."""
    if os.access("/dev/tty", os.W_OK):
        try:
            return open("/dev/tty", "w", encoding="utf-8")
        except OSError:
            pass
    return sys.stdout


class ProgressEstimator:
    """Step counter with a percentage bar and a running-average ETA.

    The ETA assumes every step costs the same: elapsed / completed.
    """

    def __init__(
        self,
        total: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        stream: Optional[TextIO] = None,
        bar_width: int = BAR_WIDTH,
    ) -> None:
        self.clock = clock
        self.stream = stream
        self.bar_width = bar_width
        self.state = ProgressState(total=max(0, int(total)), start_time=clock())

    @property
    def total(self) -> int:
        return self.state.total

    @property
    def completed(self) -> int:
        return self.state.completed

    def percent(self, completed: Optional[int] = None) -> int:
        done = self.state.completed if completed is None else completed
        if self.state.total <= 0:
            return 0
        return min(100, max(0, done * 100 // self.state.total))

    def elapsed(self) -> float:
        return max(0.0, self.clock() - self.state.start_time)

    def remaining(self, completed: Optional[int] = None) -> float:
        done = self.state.completed if completed is None else completed
        if done <= 0 or self.state.total <= 0:
            return 0.0
        average = self.elapsed() / done
        return max(0.0, average * (self.state.total - done))

    def bar(self, completed: Optional[int] = None) -> str:
        filled = self.percent(completed) * self.bar_width // 100
        filled = min(self.bar_width, max(0, filled))
        return "#" * filled + "-" * (self.bar_width - filled)

    def line(self, status: str, completed: Optional[int] = None) -> str:
        done = self.state.completed if completed is None else completed
        return "[%s] %3d%% (%d/%d) elapsed %s ETA %s - %s" % (
            self.bar(done),
            self.percent(done),
            done,
            self.state.total,
            fmt_mmss(self.elapsed()),
            fmt_mmss(self.remaining(done)),
            status,
        )

    def render(self, status: str, completed: Optional[int] = None) -> str:
        text = self.line(status, completed)
        if self.stream is not None:
            self.stream.write("\r" + text)
            self.stream.flush()
        return text

    def advance(self) -> None:
        self.state.completed += 1

    def finish_line(self) -> None:
        if self.stream is not None:
            self.stream.write("\n")
            self.stream.flush()
