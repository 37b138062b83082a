"""
Card Repository Interface.
Defines data access operations for Cards.
"""

from typing import Any, Dict, List, Optional

from card_platform.domain.repositories.base import BaseRepository
from card_platform.domain.models.card import Card


class CardRepository(BaseRepository[Card]):
    """Interface for Card-specific operations."""

    def find_by_code(self, code: str) -> Optional[Card]:
        """Get a card by its redemption code."""
        ...

    def insert_many(self, cards: List[Card]) -> List[int]:
        """Insert a batch in a single transaction. Nothing is stored on failure."""
        ...

    def conditional_update(self, code: str, precondition: Dict[str, Any], fields: Dict[str, Any]) -> int:
        """Atomically set `fields` on the card only while `precondition` holds.

        Returns the number of rows modified (0 when the precondition no
        longer held at write time).
        """
        ...
