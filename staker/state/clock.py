"""Deterministic block-time source."""

from __future__ import annotations


class ManualClock:
    """Callable returning the current timestamp; only moves forward."""

    def __init__(self, now: int = 0) -> None:
        if now < 0:
            raise ValueError(f"timestamp must be non-negative: {now}")
        self._now = now

    def __call__(self) -> int:
        return self._now

    @property
    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"cannot move time backwards by {seconds}s")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> int:
        if timestamp < self._now:
            raise ValueError(f"cannot move time backwards: {timestamp} < {self._now}")
        self._now = timestamp
        return self._now

    def __repr__(self) -> str:
        return f"ManualClock({self._now})"
