"""Per-series locks for read-compute-write operations."""
import logging
import threading
from contextlib import contextmanager
from uuid import UUID

from meeting_series.core.config import settings
from meeting_series.core.exceptions import ConflictError

logger = logging.getLogger(__name__)


class SeriesLocks:
    """Track one lock per series_id within this process."""

    _locks: dict[UUID, threading.Lock] = {}
    _registry_lock = threading.Lock()

    @classmethod
    def get_lock(cls, series_id: UUID) -> threading.Lock:
        with cls._registry_lock:
            return cls._locks.setdefault(series_id, threading.Lock())

    @classmethod
    @contextmanager
    def hold(cls, series_id: UUID, timeout: float | None = None):
        """
        Hold the series lock for the duration of the block.

        Raises ConflictError if the lock is not acquired within ``timeout``
        seconds (``settings.series_lock_timeout_seconds`` by default).
        """
        if timeout is None:
            timeout = settings.series_lock_timeout_seconds
        lock = cls.get_lock(series_id)
        if not lock.acquire(timeout=timeout):
            logger.warning(f"Timed out waiting for lock on series {series_id}")
            raise ConflictError(
                "Another change to this series is in progress",
                {"series_id": str(series_id)},
            )
        try:
            yield
        finally:
            lock.release()

    @classmethod
    def discard(cls, series_id: UUID) -> None:
        """Forget the lock of a series that no longer exists."""
        with cls._registry_lock:
            cls._locks.pop(series_id, None)

    @classmethod
    def clear(cls) -> None:
        with cls._registry_lock:
            cls._locks.clear()
