"""
AI Gateway — Rotation State (Health Tracker + Cursor)
======================================================

What:  The only mutable state shared by every in-flight request: which keys
       are believed exhausted, when that belief was last reset, and which key
       to try first.
Why:   Requests arrive concurrently. Two of them must never corrupt the
       unhealthy set or both "advance" the cursor past the same failing key.
How:   One lock guards cursor, set and timestamp as a unit. No method awaits
       or calls out while holding it, so the lock works for coroutines on one
       event loop and for threads alike.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, FrozenSet, Set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """
    Result of choosing a key for the next attempt.

    swept is True when every key was unhealthy at selection time; the set
    has been cleared and the caller must cool down before using the key.
    """
    index: int
    swept: bool = False


class RotationState:
    """
    Health tracker plus round-robin cursor for one credential pool.

    State Machine (per index):
        HEALTHY
            → quota failure: mark UNHEALTHY, cursor moves to the next index
        UNHEALTHY
            → reset window elapsed (checked on entry to each request): HEALTHY
            → every index UNHEALTHY at once: all forced back to HEALTHY
            → success on this index (another request raced us): HEALTHY

    The cursor only moves on failure. Successive successful calls keep
    reusing the same key.

    Invariant: unhealthy ⊆ {0, ..., pool_size - 1}.
    """

    def __init__(
        self,
        pool_size: int,
        reset_window: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if pool_size < 1:
            raise ValueError("pool_size must be at least 1")
        self.pool_size = pool_size
        self.reset_window = reset_window
        self._clock = clock
        self._lock = threading.Lock()
        self._cursor = 0
        self._unhealthy: Set[int] = set()
        self._last_reset = clock()

    # ── Read-only views ───────────────────────────────────────────────────

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    @property
    def unhealthy(self) -> FrozenSet[int]:
        with self._lock:
            return frozenset(self._unhealthy)

    def is_healthy(self, index: int) -> bool:
        with self._lock:
            return index not in self._unhealthy

    # ── Mutations ─────────────────────────────────────────────────────────

    def mark_unhealthy(self, index: int) -> None:
        self._check_index(index)
        with self._lock:
            self._unhealthy.add(index)

    def reset_if_stale(self) -> bool:
        """
        Clear the unhealthy set if the reset window has elapsed.

        Returns:
            True if the set was cleared by this call.
        """
        with self._lock:
            now = self._clock()
            if now - self._last_reset <= self.reset_window:
                return False
            had_unhealthy = bool(self._unhealthy)
            self._unhealthy.clear()
            self._last_reset = now
        if had_unhealthy:
            logger.info("Reset window elapsed; all API keys are selectable again")
        return True

    def select(self) -> Selection:
        """
        Advance the cursor past unhealthy indices and return it.

        If every index is unhealthy the cursor stays put, the set is cleared
        and the selection is flagged as a sweep.
        """
        with self._lock:
            if len(self._unhealthy) >= self.pool_size:
                self._unhealthy.clear()
                return Selection(index=self._cursor, swept=True)
            while self._cursor in self._unhealthy:
                self._cursor = (self._cursor + 1) % self.pool_size
            return Selection(index=self._cursor)

    def record_quota_failure(self, index: int) -> bool:
        """
        Mark index exhausted and rotate away from it.

        The cursor moves by one only if it still points at index; a
        concurrent request may already have rotated past it.

        Returns:
            True if this failure left every key unhealthy. In that case the
            set has already been cleared and the caller owes a cooldown.
        """
        self._check_index(index)
        with self._lock:
            self._unhealthy.add(index)
            if self._cursor == index:
                self._cursor = (index + 1) % self.pool_size
            if len(self._unhealthy) < self.pool_size:
                return False
            # TODO: replace the forced clear with per-key exponential backoff so
            # a key whose quota has not recovered is not re-admitted early.
            self._unhealthy.clear()
            return True

    def record_success(self, index: int) -> None:
        with self._lock:
            self._unhealthy.discard(index)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.pool_size:
            raise IndexError(f"credential index {index} outside pool of {self.pool_size}")
