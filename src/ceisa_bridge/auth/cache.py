"""In-memory token cache guarded by a read/write lock.

:class:`TokenCache` holds at most one :class:`~ceisa_bridge.models.TokenRecord`.
Readers run concurrently; a write waits for active readers and excludes
everyone else, so a reader sees either the whole previous record or the
whole new one. The lock itself is never handed out.

Nothing here touches disk: tokens live only as long as the process.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from ceisa_bridge.models import TokenRecord

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class ReadWriteLock:
    """Many concurrent readers or a single writer.

    Built on a :class:`threading.Condition`. Not reentrant: a thread holding
    the write side must not acquire either side again.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class TokenCache:
    """Holds the current token record.

    Args:
        clock: Returns the current time; injectable so tests can simulate
            expiry without sleeping.

    Example::

        cache = TokenCache()
        cache.set(record)
        if cache.is_valid():
            token = cache.get().access_token
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or utc_now
        self._lock = ReadWriteLock()
        self._record: Optional[TokenRecord] = None

    def get(self) -> Optional[TokenRecord]:
        """Return the current record, or ``None`` when nothing is cached."""
        with self._lock.read():
            return self._record

    def set(self, record: TokenRecord) -> None:
        """Replace the current record as one step."""
        with self._lock.write():
            self._record = record

    def clear(self) -> None:
        """Drop the current record."""
        with self._lock.write():
            self._record = None

    def is_valid(self) -> bool:
        """True iff a record exists and the clock is strictly before its expiry."""
        with self._lock.read():
            record = self._record
        if record is None:
            return False
        return self._clock() < record.expires_at
