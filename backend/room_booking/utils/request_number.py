from __future__ import annotations

import os
import threading
import time
from typing import Callable

# Crockford base32, as used by ULIDs
_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_RANDOM_BITS = 80
_RANDOM_MAX = (1 << _RANDOM_BITS) - 1


def _encode(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        value, rem = divmod(value, 32)
        chars.append(_ALPHABET[rem])
    return "".join(reversed(chars))


class RequestNumberGenerator:
    """Thread-safe monotonic ULID source for human-readable request numbers.

    Numbers look like ``PS-01J9Z3Q4S8M2XK7T1V0B6C5D4E``. Within one millisecond the
    random part is incremented instead of redrawn, so two numbers from the same
    generator never collide and always sort in creation order.
    """

    def __init__(
        self,
        prefix: str,
        *,
        clock_ms: Callable[[], int] | None = None,
        entropy: Callable[[], int] | None = None,
    ) -> None:
        self.prefix = prefix
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._entropy = entropy or (lambda: int.from_bytes(os.urandom(10), "big"))
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_random = 0

    def _next_ulid(self) -> str:
        with self._lock:
            now_ms = self._clock_ms()
            if now_ms <= self._last_ms:
                # same millisecond, or the clock stepped back
                now_ms = self._last_ms
                if self._last_random == _RANDOM_MAX:
                    now_ms += 1
                    self._last_random = self._entropy() & _RANDOM_MAX
                else:
                    self._last_random += 1
            else:
                self._last_random = self._entropy() & _RANDOM_MAX
            self._last_ms = now_ms
            return _encode(now_ms, 10) + _encode(self._last_random, 16)

    def __call__(self) -> str:
        return f"{self.prefix}-{self._next_ulid()}"
