from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
import logging
import threading
import time
from typing import Dict, Iterator, Optional

from redis import Redis
from redis.exceptions import LockError, RedisError
from redis.lock import Lock

from menu_booking.core.config import settings
from menu_booking.core.exceptions import (
    BookingLockTimeoutException,
    BookingLockUnavailableException,
)
from menu_booking.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()


def _lock_key(item_id: str, booking_date: date) -> str:
    return f"booking:{item_id}:{booking_date.isoformat()}:mutex"


def _namespaced_key(key: str) -> str:
    return f"{settings.lock_namespace}:lock:{key}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
            client.ping()
        except RedisError as exc:
            logger.warning("booking_lock_sync_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


@dataclass
class _LocalEntry:
    lock: threading.Lock
    refs: int = 0


class BookingLockRegistry:
    """
    Mutual exclusion keyed by ``(item_id, booking_date)``.

    Requests for different keys never contend. The local backend keeps one
    ``threading.Lock`` per key for as long as anyone holds or waits on it.
    The redis backend serializes across processes; when redis cannot be
    reached the request fails with a retryable error instead of running unlocked.
    """

    def __init__(
        self,
        backend: str = "local",
        timeout_seconds: float = 5.0,
        ttl_seconds: int = 30,
        redis_client: Optional[Redis] = None,
        retry_after_seconds: int = 2,
    ) -> None:
        self.backend = backend
        self.timeout_seconds = timeout_seconds
        self.ttl_seconds = ttl_seconds
        self.retry_after_seconds = retry_after_seconds
        self._redis = redis_client
        self._entries: Dict[str, _LocalEntry] = {}
        self._entries_lock = threading.Lock()

    def active_keys(self) -> int:
        with self._entries_lock:
            return len(self._entries)

    @contextmanager
    def hold(self, item_id: str, booking_date: date) -> Iterator[str]:
        """
        Hold the slot lock for the duration of the block.

        Raises BookingLockTimeoutException when the key stays busy, and, on the
        redis backend, BookingLockUnavailableException when redis cannot be
        reached. The redis backend never degrades to the process-local lock.
        """
        key = _lock_key(item_id, booking_date)
        if self.backend == "redis":
            redis_lock = self._acquire_redis(key)
            try:
                yield key
            finally:
                self._release_redis(redis_lock, key)
            return
        with self._hold_local(key):
            yield key

    @contextmanager
    def _hold_local(self, key: str) -> Iterator[None]:
        with self._entries_lock:
            entry = self._entries.setdefault(key, _LocalEntry(threading.Lock()))
            entry.refs += 1
        started = time.monotonic()
        try:
            acquired = entry.lock.acquire(timeout=self.timeout_seconds)
            waited = time.monotonic() - started
            if not acquired:
                prometheus_metrics.record_booking_lock("acquire", "timeout", "local", waited)
                logger.warning(
                    "booking_lock_timeout",
                    extra={"lock_key": key, "waited_seconds": waited, "backend": "local"},
                )
                raise BookingLockTimeoutException(key, waited, self.retry_after_seconds)
            prometheus_metrics.record_booking_lock("acquire", "success", "local", waited)
            try:
                yield
            finally:
                entry.lock.release()
                prometheus_metrics.record_booking_lock("release", "success", "local")
        finally:
            with self._entries_lock:
                entry.refs -= 1
                if entry.refs == 0:
                    self._entries.pop(key, None)

    def _acquire_redis(self, key: str) -> Lock:
        """Return a held redis lock or raise a retryable error."""
        client = self._redis or _get_sync_redis()
        if client is None:
            prometheus_metrics.record_booking_lock("acquire", "redis_unavailable", "redis")
            logger.error("booking_lock_redis_unavailable", extra={"lock_key": key})
            raise BookingLockUnavailableException(key, "redis", self.retry_after_seconds)
        lock = client.lock(
            _namespaced_key(key),
            timeout=self.ttl_seconds,
            blocking_timeout=self.timeout_seconds,
        )
        started = time.monotonic()
        try:
            acquired = lock.acquire()
        except RedisError as exc:
            prometheus_metrics.record_booking_lock("acquire", "error", "redis")
            logger.error(
                "booking_lock_redis_unavailable",
                extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
            )
            raise BookingLockUnavailableException(
                key, "redis", self.retry_after_seconds
            ) from exc
        waited = time.monotonic() - started
        if not acquired:
            prometheus_metrics.record_booking_lock("acquire", "timeout", "redis", waited)
            logger.warning(
                "booking_lock_timeout",
                extra={"lock_key": key, "waited_seconds": waited, "backend": "redis"},
            )
            raise BookingLockTimeoutException(key, waited, self.retry_after_seconds)
        prometheus_metrics.record_booking_lock("acquire", "success", "redis", waited)
        return lock

    def _release_redis(self, lock: Lock, key: str) -> None:
        try:
            lock.release()
            prometheus_metrics.record_booking_lock("release", "success", "redis")
        except (LockError, RedisError) as exc:
            # TTL elapsed or redis went away; the transaction already finished.
            prometheus_metrics.record_booking_lock("release", "error", "redis")
            logger.warning(
                "booking_lock_release_failed",
                extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
            )


_REGISTRY: Optional[BookingLockRegistry] = None
_REGISTRY_LOCK = threading.Lock()


def get_booking_lock_registry() -> BookingLockRegistry:
    """Process-wide registry built from settings."""
    global _REGISTRY
    if _REGISTRY is not None:
        return _REGISTRY
    with _REGISTRY_LOCK:
        if _REGISTRY is None:
            _REGISTRY = BookingLockRegistry(
                backend=settings.booking_lock_backend,
                timeout_seconds=settings.booking_lock_timeout_seconds,
                ttl_seconds=settings.booking_lock_ttl_seconds,
                retry_after_seconds=settings.booking_retry_after_seconds,
            )
        return _REGISTRY
