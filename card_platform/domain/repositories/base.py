"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import TypeVar, List, Optional, Any, Dict, Protocol

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations."""

    def find_by_id(self, id: int) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """List entities, optionally restricted by equality filters."""
        ...

    def delete(self, id: int, filters: Optional[Dict[str, Any]] = None) -> int:
        """Delete an entity by ID (and filters). Returns the deleted count."""
        ...
