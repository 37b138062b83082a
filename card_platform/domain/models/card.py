"""Card domain model: maps to the 'cards' table."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from card_platform.infrastructure.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on the way back; treat stored naive values as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Card(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), unique=True, nullable=False, index=True)
    duration_days = Column(Integer, nullable=False)

    # Activation: is_activated flips once; activated_at/expires_at are written with it
    is_activated = Column(Boolean, nullable=False, default=False)
    activated_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_by = Column(String(64), nullable=True, index=True)
    created_by_username = Column(String(150), nullable=True)
    used_by = Column(String(64), nullable=True)
    used_by_identifier = Column(String(255), nullable=True)

    def is_expired(self, now: datetime) -> bool:
        expires_at = as_utc(self.expires_at)
        return expires_at is None or expires_at <= now

    def __repr__(self):
        return f"<Card {self.code} activated={self.is_activated}>"
