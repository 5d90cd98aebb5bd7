"""
Exclusive locks held across a reservation's check-then-write.

Every reservation write takes one lock per seat and one per user. Locks are
always taken in sorted key order so two writers never deadlock on each other.

Two layers:
- a process-local `threading.Lock` per key, always held;
- a Redis `SET NX EX` mutex per key when `settings.redis_url` is configured, so
  several worker processes serialise on the same key. If Redis cannot be
  reached the local lock plus the database row lock still apply.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
import logging
import threading
import time
from typing import Iterable, Iterator, List, Optional
import uuid
import weakref

from redis import Redis

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings
from .exceptions import BookingConflictException

logger = logging.getLogger(__name__)

_SPIN_INTERVAL_SECONDS = 0.05

# Delete the key only if we still own it
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""

# Entries disappear once no thread holds or waits on the lock
_LOCAL_LOCKS: weakref.WeakValueDictionary[str, threading.Lock] = (
    weakref.WeakValueDictionary()
)
_LOCAL_LOCKS_GUARD = threading.Lock()

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()


def seat_key(seat_id: int) -> str:
    return f"seat:{seat_id}"


def user_key(user_name: str) -> str:
    return f"user:{user_name}"


def _namespaced_key(key: str) -> str:
    return f"{settings.lock_namespace}:lock:{key}"


def _local_lock(key: str) -> threading.Lock:
    with _LOCAL_LOCKS_GUARD:
        lock = _LOCAL_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _LOCAL_LOCKS[key] = lock
        return lock


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if not settings.redis_url:
        return None
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            client.ping()
        except Exception as exc:
            logger.warning("reservation_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def _busy(key: str) -> BookingConflictException:
    return BookingConflictException(
        "The seat is busy with another reservation request, try again",
        details={"lock": key},
    )


@contextmanager
def _hold_local(key: str, deadline: float) -> Iterator[None]:
    lock = _local_lock(key)
    if not lock.acquire(timeout=max(deadline - time.monotonic(), 0)):
        prometheus_metrics.record_reservation_lock("acquire", "timeout")
        logger.warning("reservation_lock_local_timeout", extra={"lock_key": key})
        raise _busy(key)
    try:
        yield
    finally:
        lock.release()


@contextmanager
def _hold_redis(client: Redis, key: str, deadline: float) -> Iterator[None]:
    name = _namespaced_key(key)
    token = uuid.uuid4().hex
    acquired = False
    try:
        while not client.set(name, token, nx=True, ex=settings.lock_ttl_seconds):
            if time.monotonic() >= deadline:
                prometheus_metrics.record_reservation_lock("acquire", "timeout")
                logger.warning("reservation_lock_redis_timeout", extra={"lock_key": key})
                raise _busy(key)
            time.sleep(_SPIN_INTERVAL_SECONDS)
        acquired = True
        prometheus_metrics.record_reservation_lock("acquire", "success")
    except BookingConflictException:
        raise
    except Exception as exc:
        # Redis dropped mid-request: continue under the local lock only
        prometheus_metrics.record_reservation_lock("acquire", "error")
        logger.warning(
            "reservation_lock_redis_acquire_failed",
            extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
        )

    try:
        yield
    finally:
        if acquired:
            _release_redis(client, key, name, token)


def _release_redis(client: Redis, key: str, name: str, token: str) -> None:
    try:
        client.eval(_RELEASE_SCRIPT, 1, name, token)
        prometheus_metrics.record_reservation_lock("release", "success")
    except Exception as exc:
        prometheus_metrics.record_reservation_lock("release", "error")
        logger.warning(
            "reservation_lock_redis_release_failed",
            extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
        )


@contextmanager
def reservation_locks(
    keys: Iterable[str], wait_seconds: Optional[float] = None
) -> Iterator[List[str]]:
    """
    Hold exclusive locks on every key for the duration of the block.

    Raises:
        BookingConflictException: a lock could not be taken within `wait_seconds`
    """
    ordered = sorted(set(keys))
    wait = settings.lock_wait_seconds if wait_seconds is None else wait_seconds
    deadline = time.monotonic() + wait
    client = _get_sync_redis()
    if settings.redis_url and client is None:
        prometheus_metrics.record_reservation_lock("acquire", "redis_unavailable")

    with ExitStack() as stack:
        for key in ordered:
            stack.enter_context(_hold_local(key, deadline))
            if client is not None:
                stack.enter_context(_hold_redis(client, key, deadline))
        yield ordered
