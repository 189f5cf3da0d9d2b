"""Time-ordered, collision resistant keys for appended records.

Keys are 20 characters: 8 encode the millisecond timestamp and 12 are
random. Within one millisecond the random part is incremented, so the
lexicographic order of keys from one generator is their creation order.
"""

from __future__ import annotations

import secrets
import time
from threading import Lock
from typing import List, Optional

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
_BASE = len(PUSH_CHARS)


class PushIdGenerator:

    def __init__(self) -> None:
        self._last_ms = -1
        self._last_random: List[int] = [0] * 12
        self._lock = Lock()

    def generate(self, now_ms: Optional[int] = None) -> str:
        timestamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
        with self._lock:
            if timestamp <= self._last_ms:
                # Same (or rewound) clock: keep ordering by bumping the random tail.
                timestamp = self._last_ms
                self._increment()
            else:
                self._last_random = [secrets.randbelow(_BASE) for _ in range(12)]
            self._last_ms = timestamp
            random_part = list(self._last_random)

        time_chars = []
        for _ in range(8):
            time_chars.append(PUSH_CHARS[timestamp % _BASE])
            timestamp //= _BASE
        prefix = "".join(reversed(time_chars))
        return prefix + "".join(PUSH_CHARS[index] for index in random_part)

    def _increment(self) -> None:
        position = len(self._last_random) - 1
        while position >= 0 and self._last_random[position] == _BASE - 1:
            self._last_random[position] = 0
            position -= 1
        if position >= 0:
            self._last_random[position] += 1
