"""FastAPI application: main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI

from card_platform.config import get_settings
from card_platform.infrastructure.database import engine, Base, SessionLocal
from card_platform.core.logging import configure_logging
from card_platform.core.middleware import setup_middleware
from card_platform.core.exceptions import AppError, global_exception_handler

# Import all models so SQLAlchemy knows about them
from card_platform.domain.models.card import Card
from card_platform.domain.models.user import User

from card_platform.application.services.auth_service import TokenAuthority
from card_platform.application.services.user_service import UserService
from card_platform.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

from card_platform.interfaces.api.cards import router as cards_router
from card_platform.interfaces.api.users import router as users_router

settings = get_settings()

configure_logging(settings)
logger = structlog.get_logger(__name__)


def bootstrap_admin() -> None:
    """Create the configured admin account if it does not exist yet."""
    db = SessionLocal()
    try:
        users = SQLAlchemyUserRepository(db, User)
        service = UserService(users, TokenAuthority(settings, users))
        service.ensure_admin(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting card platform service...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only: use migrations in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified", tables=[Card.__tablename__, User.__tablename__])

    bootstrap_admin()

    yield

    logger.info("Card platform service stopped")


app = FastAPI(
    title="Card Platform",
    description="Redemption code issuing, activation and verification API",
    version="1.0.0",
    lifespan=lifespan,
)

setup_middleware(app, settings.CORS_ORIGINS)

app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(users_router)
app.include_router(cards_router)


@app.get("/")
def root():
    return {
        "name": "Card Platform",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
