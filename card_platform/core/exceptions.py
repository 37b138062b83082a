"""
Global exception handling for the application.
Every domain failure is an AppError carrying a machine-readable code,
an HTTP status and optional structured details (e.g. the current card).
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class ValidationException(AppError):
    """Malformed input, e.g. an unparseable id."""
    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class ConflictException(AppError):
    """Unique constraint would be violated."""
    def __init__(self, message: str = "Conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_409_CONFLICT, details)


class UnauthorizedException(AppError):
    """Authentication failure error."""
    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, details)


class ForbiddenException(AppError):
    """Authorization failure error (role check failed)."""
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


class PersistenceException(AppError):
    """Store-level failure."""
    def __init__(self, message: str = "Storage operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


class HashingException(AppError):
    """Password hashing or verification failed internally."""
    def __init__(self, message: str = "Password hashing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


# --- Token outcomes ---

class InvalidCredentialsException(UnauthorizedException):
    def __init__(self, message: str = "Invalid username or password", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class InvalidTokenSignatureException(UnauthorizedException):
    def __init__(self, message: str = "Invalid token", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class TokenExpiredException(UnauthorizedException):
    def __init__(self, message: str = "Token expired", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class TokenSupersededException(UnauthorizedException):
    """A newer token has been issued for the same user."""
    def __init__(self, message: str = "Token has been superseded by a newer login", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class UnknownSubjectException(UnauthorizedException):
    def __init__(self, message: str = "Token subject no longer exists", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


# --- Card lifecycle outcomes ---

class CardError(AppError):
    """Lifecycle outcome that carries the current card and its rendered snapshot."""
    def __init__(
        self,
        message: str,
        status_code: int,
        card: Any = None,
        snapshot: Optional[Dict[str, Any]] = None,
    ):
        self.card = card
        super().__init__(message, status_code, {"card": snapshot} if snapshot is not None else None)


class CardAlreadyActivatedException(CardError):
    def __init__(
        self,
        card: Any = None,
        snapshot: Optional[Dict[str, Any]] = None,
        message: str = "Card already activated",
    ):
        super().__init__(message, status.HTTP_409_CONFLICT, card, snapshot)


class CardExpiredException(CardError):
    def __init__(
        self,
        card: Any = None,
        snapshot: Optional[Dict[str, Any]] = None,
        message: str = "Card expired",
    ):
        super().__init__(message, status.HTTP_410_GONE, card, snapshot)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.__class__.__name__,
                    "message": exc.message,
                    "details": exc.details,
                    "path": request.url.path,
                }
            },
            headers={"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None,
        )

    logger.exception("Unexpected error occurred", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "InternalServerError",
                "message": "An unexpected error occurred. Please try again later.",
                "path": request.url.path,
            }
        },
    )
