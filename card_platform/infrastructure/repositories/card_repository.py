"""
SQLAlchemy Implementation of Card Repository.
"""

from typing import Any, Dict, List, Optional

from card_platform.domain.models.card import Card
from card_platform.domain.repositories.card_repository import CardRepository
from card_platform.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyCardRepository(SQLAlchemyRepository[Card], CardRepository):
    """Card repository implementation using SQLAlchemy."""

    def find_by_code(self, code: str) -> Optional[Card]:
        with self._transaction("read", commit=False):
            return self.db.query(Card).filter(Card.code == code).first()

    def insert_many(self, cards: List[Card]) -> List[int]:
        with self._transaction("insert"):
            self.db.add_all(cards)
            self.db.flush()
            ids = [card.id for card in cards]
        return ids

    def conditional_update(self, code: str, precondition: Dict[str, Any], fields: Dict[str, Any]) -> int:
        # Single UPDATE ... WHERE code = :code AND <precondition>; the database
        # decides the winner when two requests race on the same code.
        with self._transaction("update"):
            modified = (
                self.db.query(Card)
                .filter(Card.code == code)
                .filter_by(**precondition)
                .update(fields, synchronize_session=False)
            )
        return modified
