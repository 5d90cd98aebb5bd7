# backend/seatbook/services/base.py
"""
Base Service Pattern for the seat reservation engine.

Every service receives a session and an optional clock. The base class owns
transaction boundaries, the mapping from store failures onto
StoreUnavailableException, and operation timing.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException, StoreUnavailableException
from ..database import with_db_retry
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..schemas.interval import to_utc

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
T = TypeVar("T")

SLOW_OPERATION_SECONDS = 1.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OperationStats:
    count: int = 0
    success_count: int = 0
    total_time: float = 0.0
    max_time: float = 0.0

    def add(self, elapsed: float, success: bool) -> None:
        self.count += 1
        self.success_count += int(success)
        self.total_time += elapsed
        self.max_time = max(self.max_time, elapsed)

    def summary(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "failure_count": self.count - self.success_count,
            "success_rate": self.success_count / self.count,
            "avg_time": self.total_time / self.count,
            "max_time": self.max_time,
        }


class BaseService:
    """Base class for all service layer components."""

    # Per service class, per operation
    _class_metrics: Dict[str, Dict[str, OperationStats]] = {}

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        """
        Args:
            db: Database session
            clock: Source of the current instant (tz-aware); defaults to UTC wall clock
        """
        self.db = db
        self.clock: Clock = clock or utc_now
        self.logger = logging.getLogger(type(self).__name__)

    def now(self) -> datetime:
        return to_utc(self.clock())

    @contextmanager
    def transaction(self, operation: str = "") -> Iterator[Session]:
        """
        Context manager for database transactions.

        Commits on success and rolls back on any error. IntegrityError is
        re-raised for the caller to classify; other store failures become
        StoreUnavailableException.

        Usage:
            with self.transaction("create_reservation"):
                self.repository.create(...)
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except IntegrityError:
            self.db.rollback()
            raise
        except (SQLAlchemyError, RepositoryException) as e:
            self.logger.error(
                f"Transaction failed: {str(e)}",
                extra={"operation": operation, "error_type": type(e).__name__},
            )
            self.db.rollback()
            raise StoreUnavailableException(operation=operation) from e
        except Exception:
            self.db.rollback()
            raise

    def read(self, operation: str, func: Callable[[], T]) -> T:
        """
        Run a read-only query with transient-failure retries.

        Store failures surface as StoreUnavailableException.
        """
        try:
            return with_db_retry(operation, func, on_retry=self.db.rollback)
        except (SQLAlchemyError, RepositoryException) as e:
            self.logger.error(
                f"Read failed: {str(e)}",
                extra={"operation": operation, "error_type": type(e).__name__},
            )
            self.db.rollback()
            raise StoreUnavailableException(operation=operation) from e

    @staticmethod
    def measure_operation(operation_name: str) -> Callable:
        """
        Time a service method and record the outcome.

        Feeds the per-class stats returned by `get_metrics` and the Prometheus
        registry; calls slower than SLOW_OPERATION_SECONDS are logged.

        Usage:
            @BaseService.measure_operation("create_reservation")
            def create(self, ...):
                ...
        """

        F = TypeVar("F", bound=Callable[..., Any])

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    elapsed = time.perf_counter() - started
                    self._record_metric(operation_name, elapsed, error_type is None)
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )
                    prometheus_metrics.record_service_operation(
                        service=type(self).__name__,
                        operation=operation_name,
                        duration=elapsed,
                        status="success" if error_type is None else "error",
                        error_type=error_type,
                    )

            wrapper._operation_name = operation_name  # type: ignore[attr-defined]
            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log an operation with context."""
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        per_class = BaseService._class_metrics.setdefault(type(self).__name__, {})
        per_class.setdefault(operation, OperationStats()).add(elapsed, success)

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation counts, success rate and timings for this service class."""
        per_class = BaseService._class_metrics.get(type(self).__name__, {})
        return {name: stats.summary() for name, stats in per_class.items() if stats.count}

    def reset_metrics(self) -> None:
        BaseService._class_metrics.pop(type(self).__name__, None)
