"""
User Repository Interface.
Defines data access operations for the credential store.
"""

from typing import Any, Dict, Optional

from card_platform.domain.repositories.base import BaseRepository
from card_platform.domain.models.user import User


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def find_by_username(self, username: str) -> Optional[User]:
        ...

    def insert(self, user: User) -> int:
        """Persist a new user and return its id."""
        ...

    def update_fields(self, id: int, fields: Dict[str, Any]) -> int:
        """Overwrite the given fields. Returns the matched count."""
        ...
