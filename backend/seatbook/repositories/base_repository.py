# backend/seatbook/repositories/base_repository.py
"""
Base Repository Pattern for the seat reservation engine.

Repositories own every query against the store and never commit; the service
layer decides transaction boundaries.

Error contract:
- IntegrityError propagates untouched so services can classify constraint
  violations (overlap, duplicate window) as conflicts
- any other SQLAlchemyError is logged and wrapped in RepositoryException
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Shared data access for one mapped model.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        """Dialect of the session's bind; upserts are written per dialect."""
        return self.db.get_bind().dialect.name

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"{self.model.__name__} {action} failed: {str(e)}")
            raise RepositoryException(
                f"Failed to {action} {self.model.__name__}: {str(e)}"
            ) from e

    def get_by_id(self, id: Any) -> Optional[T]:
        with self._guard("load"):
            return self.db.get(self.model, id)

    def create(self, **kwargs) -> T:
        """
        Add a new row and flush it.

        Flushing inside the caller's transaction surfaces constraint
        violations here rather than at commit.
        """
        with self._guard("create"):
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity

    def update(self, entity: T, **fields) -> T:
        with self._guard("update"):
            for key, value in fields.items():
                setattr(entity, key, value)
            self.db.flush()
            return entity

    def delete(self, entity: T) -> None:
        with self._guard("delete"):
            self.db.delete(entity)
            self.db.flush()

    def count(self) -> int:
        with self._guard("count"):
            return self._build_query().count()

    # Helpers for subclasses

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        with self._guard("query"):
            return query.all()

    def _execute_first(self, query: Query) -> Optional[T]:
        with self._guard("query"):
            return query.first()

    def _execute_exists(self, query: Query) -> bool:
        """EXISTS over `query`; the database stops at the first match."""
        with self._guard("query"):
            return bool(self.db.query(query.exists()).scalar())
