"""Card service: generation, one-time activation, verification and export.

The service holds no state of its own. Activation correctness under
concurrent requests comes from the repository's conditional update: the
write only applies while ``is_activated`` is still false, and the caller
that sees zero modified rows has lost the race.

Note that ``verify_or_auto_activate`` activates an unused card on first
verification, so a verification-only caller starts the card's validity
window.
"""

import secrets
import string
from datetime import datetime, timedelta
from typing import List, Optional

import pandas as pd
import pytz
import structlog

from card_platform.application.services.common import Clock, parse_id
from card_platform.config import Settings
from card_platform.core.exceptions import (
    CardAlreadyActivatedException,
    CardExpiredException,
    EntityNotFoundException,
    ValidationException,
)
from card_platform.domain.models.card import Card, as_utc, utcnow
from card_platform.domain.repositories.card_repository import CardRepository
from card_platform.domain.schemas.auth import AuthenticatedUser
from card_platform.domain.schemas.card import CardRead

logger = structlog.get_logger(__name__)

CODE_ALPHABET = string.ascii_letters + string.digits

EXPORT_COLUMNS = [
    "code",
    "duration_days",
    "status",
    "activated_at",
    "expires_at",
    "created_at",
    "created_by_username",
    "used_by_identifier",
]


def _snapshot(card: Card) -> dict:
    return CardRead.model_validate(card).model_dump(mode="json")


class CardService:
    def __init__(self, settings: Settings, cards: CardRepository, clock: Clock = utcnow):
        self._code_length = settings.CARD_CODE_LENGTH
        self._batch_max = settings.CARD_BATCH_MAX
        self._tz = pytz.timezone(settings.TIMEZONE)
        self._cards = cards
        self._clock = clock

    def _new_code(self) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(self._code_length))

    def generate(self, owner: AuthenticatedUser, duration_days: int, count: int = 1) -> List[Card]:
        """Create a batch of unused cards. ``count`` is clamped into [1, batch max]."""
        if duration_days < 1:
            raise ValidationException("duration_days must be at least 1", details={"duration_days": duration_days})
        count = max(1, min(count, self._batch_max))

        # Collisions with stored codes are left to the unique index
        codes: set[str] = set()
        while len(codes) < count:
            codes.add(self._new_code())

        now = self._clock()
        cards = [
            Card(
                code=code,
                duration_days=duration_days,
                is_activated=False,
                created_at=now,
                created_by=owner.user_id,
                created_by_username=owner.username,
            )
            for code in codes
        ]
        self._cards.insert_many(cards)
        logger.info("Cards generated", count=count, duration_days=duration_days, owner=owner.username)
        return cards

    def _claim(self, card: Card, used_by: Optional[str], user_identifier: Optional[str]) -> bool:
        """Attempt the one-time transition. Returns False when another request won."""
        now = self._clock()
        modified = self._cards.conditional_update(
            card.code,
            precondition={"is_activated": False},
            fields={
                "is_activated": True,
                "activated_at": now,
                "expires_at": now + timedelta(days=card.duration_days),
                "used_by": used_by,
                "used_by_identifier": user_identifier,
            },
        )
        return modified > 0

    def _reload(self, code: str) -> Card:
        card = self._cards.find_by_code(code)
        if card is None:
            logger.error("Card not found after update", code=code)
            raise EntityNotFoundException("Card not found", details={"code": code})
        return card

    @staticmethod
    def _already_activated(card: Card) -> CardAlreadyActivatedException:
        return CardAlreadyActivatedException(card, _snapshot(card))

    def _find(self, code: str) -> Card:
        card = self._cards.find_by_code(code)
        if card is None:
            logger.warning("Card not found", code=code)
            raise EntityNotFoundException("Card not found", details={"code": code})
        return card

    def activate(
        self,
        code: str,
        used_by: Optional[str] = None,
        user_identifier: Optional[str] = None,
    ) -> Card:
        card = self._find(code)
        if card.is_activated:
            logger.warning("Card already activated", code=code)
            raise self._already_activated(card)

        if not self._claim(card, used_by, user_identifier):
            logger.warning("Card activation lost race", code=code)
            raise self._already_activated(self._reload(code))

        card = self._reload(code)
        logger.info("Card activated", code=code, used_by=used_by)
        return card

    def verify_or_auto_activate(self, code: str, user_identifier: Optional[str] = None) -> Card:
        """Return a valid card, activating it first if it has never been used.

        Raises CardExpiredException (carrying the card) once the validity
        window has elapsed, and CardAlreadyActivatedException when another
        request activated the card between the read and the conditional write.
        """
        card = self._find(code)
        if not card.is_activated:
            if self._claim(card, None, user_identifier):
                card = self._reload(code)
                logger.info("Card auto-activated on verify", code=code, user_identifier=user_identifier)
                return card
            logger.warning("Card verification lost activation race", code=code)
            raise self._already_activated(self._reload(code))

        if card.is_expired(self._clock()):
            logger.info("Card expired", code=code, expires_at=str(card.expires_at))
            raise CardExpiredException(card, _snapshot(card))
        return card

    def list(self, identity: AuthenticatedUser) -> List[Card]:
        filters = None if identity.is_admin else {"created_by": identity.user_id}
        return self._cards.list(filters)

    def delete(self, card_id: "str | int", identity: AuthenticatedUser) -> None:
        """Delete a card. Non-admins only match their own cards, so someone
        else's card looks exactly like a missing one."""
        id_ = parse_id(card_id, "card")
        filters = None if identity.is_admin else {"created_by": identity.user_id}
        if self._cards.delete(id_, filters) == 0:
            logger.warning("Card not found for deletion or not owned", card_id=id_, username=identity.username)
            raise EntityNotFoundException("Card not found", details={"id": str(card_id)})
        logger.info("Card deleted", card_id=id_, username=identity.username)

    def _format_time(self, value: Optional[datetime]) -> str:
        if value is None:
            return "-"
        return as_utc(value).astimezone(self._tz).isoformat()

    def export_all(self) -> str:
        """Render every card as CSV text."""
        rows = [
            {
                "code": card.code,
                "duration_days": card.duration_days,
                "status": "activated" if card.is_activated else "unactivated",
                "activated_at": self._format_time(card.activated_at),
                "expires_at": self._format_time(card.expires_at),
                "created_at": self._format_time(card.created_at),
                "created_by_username": card.created_by_username or "-",
                "used_by_identifier": card.used_by_identifier or "-",
            }
            for card in self._cards.list()
        ]
        df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
        return df.to_csv(index=False)
