"""Business ID generators for markets and bets.

Markets and bets carry monotonic string IDs. Production uses the snowflake
generator (time-ordered across replicas); the in-memory store and tests use
the sequential one so IDs are predictable.
"""

import itertools
import threading
import time
from typing import Protocol


class IdGenerator(Protocol):
    def next_id(self) -> str: ...


class SnowflakeIdGenerator:
    """Snowflake-style generator.

    Layout (63 bits):
      - 41 bits: millisecond timestamp since _EPOCH_MS
      - 10 bits: machine_id (0-1023)
      - 12 bits: per-millisecond sequence (0-4095)
    """

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = self._clock_ms()
            if now_ms < self._last_ms:
                # Wall clock stepped backwards: keep issuing from the last instant.
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._SEQUENCE_MASK
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = self._clock_ms()
            else:
                self._sequence = 0
            self._last_ms = now_ms
            value = (
                ((now_ms - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return str(value)

    @staticmethod
    def _clock_ms() -> int:
        return time.time_ns() // 1_000_000


class SequentialIdGenerator:
    """1, 2, 3, ... as strings, with an optional prefix."""

    def __init__(self, prefix: str = "", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            return f"{self._prefix}{next(self._counter)}"
