"""
Shared pytest fixtures for card platform tests.

Provides:
- Settings bound to a throwaway SQLite file
- Repositories and services over a real SQLAlchemy session
- A controllable clock for expiry arithmetic
- FastAPI test client with dependency overrides
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from card_platform.application.services.auth_service import TokenAuthority
from card_platform.application.services.card_service import CardService
from card_platform.application.services.user_service import UserService
from card_platform.config import Settings, get_settings
from card_platform.domain.models.card import Card
from card_platform.domain.models.user import User, UserRole
from card_platform.domain.schemas.auth import AuthenticatedUser, UserCreate
from card_platform.infrastructure.database import Base, create_db_engine, get_db
from card_platform.infrastructure.repositories.card_repository import SQLAlchemyCardRepository
from card_platform.infrastructure.repositories.user_repository import SQLAlchemyUserRepository
from card_platform.main import app


class FrozenClock:
    """Clock returning a fixed instant until advanced."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'cards.db'}",
        JWT_SECRET="test-secret",
        ENVIRONMENT="test",
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def user_repo(db):
    return SQLAlchemyUserRepository(db, User)


@pytest.fixture
def card_repo(db):
    return SQLAlchemyCardRepository(db, Card)


@pytest.fixture
def token_authority(settings, user_repo):
    return TokenAuthority(settings, user_repo)


@pytest.fixture
def user_service(user_repo, token_authority):
    return UserService(user_repo, token_authority)


@pytest.fixture
def card_service(settings, card_repo, clock):
    return CardService(settings, card_repo, clock=clock)


def identity_of(user: User) -> AuthenticatedUser:
    return AuthenticatedUser(user_id=str(user.id), username=user.username, role=user.role)


@pytest.fixture
def alice(user_service):
    return user_service.register(UserCreate(username="alice", password="alice-pass"))


@pytest.fixture
def bob(user_service):
    return user_service.register(UserCreate(username="bob", password="bob-pass"))


@pytest.fixture
def admin(user_service):
    return user_service.register(UserCreate(username="root", password="root-pass", role=UserRole.ADMIN))


@pytest.fixture
def client(settings, session_factory):
    """Test client sharing the fixture database; lifespan is not run."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
