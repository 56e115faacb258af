"""Helper functions for tracking block time"""
from __future__ import annotations

import logging


class BlockTime:
    """Global clock for the market.

    Time is an integer number of seconds, like an EVM block timestamp.
    Every market call reads ``time`` exactly once and uses that value for the whole call.
    """

    def __init__(self, start_time: int = 0, step_size: int = 12):
        self._time = int(start_time)
        self._step_size = int(step_size)

    @property
    def time(self) -> int:
        """Current block timestamp, in seconds"""
        return self._time

    @property
    def step_size(self) -> int:
        """Seconds between consecutive blocks"""
        return self._step_size

    def tick(self, delta_seconds: int | None = None) -> None:
        """Advance the clock by delta_seconds, or one block if not provided."""
        delta = self._step_size if delta_seconds is None else int(delta_seconds)
        if delta < 0:
            raise ValueError(f"block time cannot move backwards, got {delta=}")
        self._time += delta

    def set_time(self, time: int) -> None:
        """Jump to the given timestamp, which must not be earlier than the current one"""
        time = int(time)
        if time < self._time:
            raise ValueError(f"block time cannot move backwards, from {self._time} to {time}")
        logging.debug("block time set from %d to %d", self._time, time)
        self._time = time

    def __repr__(self) -> str:
        return f"BlockTime(time={self._time}, step_size={self._step_size})"
