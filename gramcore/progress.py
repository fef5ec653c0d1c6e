"""Transfer progress reporting: percentage, ETA, speed and a text bar."""

from __future__ import annotations

import time
from typing import Callable, Optional

EditFunc = Callable[[int, int], None]

_BAR_LENGTH = 20


def _format_duration(seconds: int) -> str:
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


class ProgressManager:
    """Tracks progress of a transfer and reports it through an edit callback."""

    def __init__(self, edit_interval: int, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self.start_time: int = int(clock())
        self.edit_interval = edit_interval
        self.edit_func: Optional[EditFunc] = None
        self.total_size = 0
        self.last_perc = 0.0

    def with_edit(self, edit_func: EditFunc) -> "ProgressManager":
        """Set the callback called with (total_size, current_size) and return self."""
        self.edit_func = edit_func
        return self

    def set_total_size(self, total_size: int) -> None:
        self.total_size = total_size

    def print_func(self) -> EditFunc:
        """Return a callback that prints the statistics."""

        def _print(_total: int, current: int) -> None:
            print(self.get_stats(current))

        return _print

    def get_progress(self, current_bytes: int) -> float:
        """Return the percentage done; it never goes down between calls."""
        if self.total_size == 0:
            return 0.0
        current = current_bytes / self.total_size * 100
        if current < self.last_perc:
            return self.last_perc
        self.last_perc = current
        return current

    def get_eta(self, current_bytes: int) -> str:
        """Return the estimated remaining time, e.g. '1m5s'."""
        if current_bytes <= 0:
            return "0s"
        elapsed = int(self._clock()) - self.start_time
        remaining = (self.total_size - current_bytes) / current_bytes * elapsed
        return _format_duration(int(remaining))

    def get_speed(self, current_bytes: int) -> str:
        """Return the average transfer speed since the start."""
        elapsed = self._clock() - self.start_time
        if int(elapsed) == 0:
            return "0 B/s"
        speed = current_bytes / elapsed
        if speed < 1024:
            return f"{speed:.2f} B/s"
        if speed < 1024 * 1024:
            return f"{speed / 1024:.2f} KB/s"
        return f"{speed / 1024 / 1024:.2f} MB/s"

    def get_stats(self, current_bytes: int) -> str:
        """Return a two-line summary of progress, ETA, speed and a bar."""
        return (
            f"Progress: {self.get_progress(current_bytes):.2f}% | "
            f"ETA: {self.get_eta(current_bytes)} | "
            f"Speed: {self.get_speed(current_bytes)}\n"
            f"{self.progress_bar(current_bytes)}"
        )

    def progress_bar(self, current_bytes: int) -> str:
        """Return a carriage-return-led bar of 20 cells with the percentage."""
        filled = int(self.get_progress(current_bytes) / 100 * _BAR_LENGTH)
        filled = max(0, min(_BAR_LENGTH, filled))
        bar = "[" + "=" * filled + " " * (_BAR_LENGTH - filled) + "]"
        return f"\r{bar} {int(self.get_progress(current_bytes))}%"