"""
API Dependencies: repositories and services wired per request.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from card_platform.application.services.auth_service import TokenAuthority
from card_platform.application.services.card_service import CardService
from card_platform.application.services.user_service import UserService
from card_platform.config import Settings, get_settings
from card_platform.domain.models.card import Card
from card_platform.domain.models.user import User
from card_platform.domain.repositories.card_repository import CardRepository
from card_platform.domain.repositories.user_repository import UserRepository
from card_platform.infrastructure.database import get_db
from card_platform.infrastructure.repositories.card_repository import SQLAlchemyCardRepository
from card_platform.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db, User)


def get_card_repository(db: Session = Depends(get_db)) -> CardRepository:
    """Get card repository instance."""
    return SQLAlchemyCardRepository(db, Card)


def get_token_authority(
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
) -> TokenAuthority:
    return TokenAuthority(settings, users)


def get_user_service(
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenAuthority = Depends(get_token_authority),
) -> UserService:
    return UserService(users, tokens)


def get_card_service(
    cards: CardRepository = Depends(get_card_repository),
    settings: Settings = Depends(get_settings),
) -> CardService:
    return CardService(settings, cards)
