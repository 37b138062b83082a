"""
SQLAlchemy implementation of the Base Repository.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from card_platform.core.exceptions import PersistenceException
from card_platform.domain.repositories.base import BaseRepository
from card_platform.infrastructure.database import Base

ModelType = TypeVar("ModelType", bound=Base)

logger = structlog.get_logger(__name__)


class SQLAlchemyRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic repository implementation for SQLAlchemy models."""

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    @contextmanager
    def _transaction(self, operation: str, commit: bool = True) -> Iterator[None]:
        """Commit on success; roll back and raise PersistenceException on store failure."""
        try:
            yield
            if commit:
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Store operation failed", table=self.model.__tablename__, operation=operation, error=str(exc))
            raise PersistenceException(
                f"Failed to {operation} {self.model.__tablename__}",
                details={"operation": operation},
            ) from exc

    def _filtered(self, filters: Optional[Dict[str, Any]]) -> Query:
        return self.db.query(self.model).filter_by(**(filters or {}))

    def find_by_id(self, id: int) -> Optional[ModelType]:
        with self._transaction("read", commit=False):
            return self.db.query(self.model).filter(self.model.id == id).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[ModelType]:
        with self._transaction("list", commit=False):
            return self._filtered(filters).order_by(self.model.id.desc()).all()

    def delete(self, id: int, filters: Optional[Dict[str, Any]] = None) -> int:
        with self._transaction("delete"):
            deleted = (
                self._filtered(filters)
                .filter(self.model.id == id)
                .delete(synchronize_session=False)
            )
        return deleted
