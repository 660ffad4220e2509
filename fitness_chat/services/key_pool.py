"""
KEY POOL MODULE
===============

Holds the OpenRouter API keys and hands them out round-robin.

ROUND-ROBIN API KEYS:
  - Keys keep the order they were configured in. Duplicates are kept (a key listed
    twice gets twice the traffic); empty values are dropped at load time.
  - take_next() returns the key under the cursor and moves the cursor one step,
    wrapping at the end. It is the only thing that moves the cursor.
  - The cursor is shared by every request in the process, so concurrent requests
    interleave their use of the pool. A lock makes each read-and-advance atomic.

An empty pool is allowed. take_next() raises PoolEmpty; callers check first.
"""

import threading
from typing import Iterable, Optional, Tuple

from fitness_chat.errors import PoolEmpty
from fitness_chat.utils.masking import mask_key


class KeyPool:
    """Ordered, fixed set of API keys with a round-robin cursor."""

    def __init__(self, credentials: Tuple[str, ...]):
        self._credentials = tuple(credentials)
        self._cursor = 0
        self._lock = threading.Lock()

    @classmethod
    def initialize(cls, candidate_values: Iterable[Optional[str]]) -> "KeyPool":
        """Build a pool from raw config values, skipping None and blank entries."""
        credentials = []
        for value in candidate_values:
            # Whitespace-only counts as blank; real values are kept as configured.
            if value is not None and value.strip():
                credentials.append(value)
        return cls(tuple(credentials))

    @property
    def credentials(self) -> Tuple[str, ...]:
        return self._credentials

    @property
    def size(self) -> int:
        return len(self._credentials)

    def __len__(self) -> int:
        return len(self._credentials)

    def __bool__(self) -> bool:
        return bool(self._credentials)

    def take_next(self) -> str:
        """Return the key under the cursor and advance the cursor by one (mod pool size)."""
        if not self._credentials:
            raise PoolEmpty()
        with self._lock:
            key = self._credentials[self._cursor]
            self._cursor = (self._cursor + 1) % len(self._credentials)
        return key

    def status(self) -> dict:
        """Snapshot for debugging; keys are masked."""
        with self._lock:
            cursor = self._cursor
        return {
            "total_keys": len(self._credentials),
            "cursor": cursor,
            "keys": [mask_key(k) for k in self._credentials],
        }
