"""
SQLAlchemy Implementation of User Repository.
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

from card_platform.core.exceptions import ConflictException
from card_platform.domain.models.user import User
from card_platform.domain.repositories.user_repository import UserRepository
from card_platform.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def find_by_username(self, username: str) -> Optional[User]:
        with self._transaction("read", commit=False):
            return self.db.query(User).filter(User.username == username).first()

    def insert(self, user: User) -> int:
        with self._transaction("insert"):
            self.db.add(user)
            try:
                self.db.flush()
            except IntegrityError as exc:
                self.db.rollback()
                raise ConflictException(
                    "Username already exists", details={"username": user.username}
                ) from exc
        return user.id

    def update_fields(self, id: int, fields: Dict[str, Any]) -> int:
        with self._transaction("update"):
            matched = (
                self.db.query(User)
                .filter(User.id == id)
                .update(fields, synchronize_session=False)
            )
        return matched
