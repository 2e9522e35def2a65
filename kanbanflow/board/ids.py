"""Process-unique identifiers for boards, columns and tasks."""

from __future__ import annotations

import itertools
import secrets
import threading
import time
from collections.abc import Callable


def _clock_ms() -> int:
    return time.time_ns() // 1_000_000


def _random_suffix() -> str:
    return secrets.token_hex(4)


class IdGenerator:
    """Issue ids as ``{kind}-{millis}{counter}{random}`` in base 16.

    The counter is shared by every kind and never repeats within the
    generator, so two ids issued in the same millisecond still differ. The
    clock and random suffix keep ids from colliding with ones persisted by an
    earlier process.
    """

    def __init__(
        self,
        clock: Callable[[], int] = _clock_ms,
        suffix: Callable[[], str] = _random_suffix,
    ) -> None:
        self._clock = clock
        self._suffix = suffix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def new_id(self, kind: str) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{kind}-{self._clock():x}{n:04x}{self._suffix()}"


default_ids = IdGenerator()
