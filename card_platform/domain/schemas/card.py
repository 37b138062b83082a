"""Pydantic schemas for the Card domain."""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from card_platform.domain.models.card import as_utc

# Older clients send "card_number" instead of "code"
_CODE_ALIASES = AliasChoices("code", "card_number")


class CardGenerateRequest(BaseModel):
    duration_days: int = Field(ge=1)
    count: int = 1


class CardActivateRequest(BaseModel):
    code: str = Field(min_length=1, validation_alias=_CODE_ALIASES)


class CardVerifyRequest(BaseModel):
    code: str = Field(min_length=1, validation_alias=_CODE_ALIASES)
    user_identifier: Optional[str] = None


class CardRead(BaseModel):
    id: int
    code: str
    duration_days: int
    is_activated: bool
    activated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_by_username: Optional[str] = None
    used_by: Optional[str] = None
    used_by_identifier: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("activated_at", "expires_at", "created_at")
    @classmethod
    def _utc(cls, value):
        return as_utc(value)


class CardVerifyResponse(BaseModel):
    message: str
    card: CardRead
