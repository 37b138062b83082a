"""FastAPI dependency: bearer token authentication gate."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from card_platform.application.services.auth_service import TokenAuthority, require_role
from card_platform.core.exceptions import UnauthorizedException
from card_platform.domain.models.user import UserRole
from card_platform.domain.schemas.auth import AuthenticatedUser
from card_platform.interfaces.deps import get_token_authority

security = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenAuthority = Depends(get_token_authority),
) -> Optional[AuthenticatedUser]:
    """Identity for routes where authentication is optional. A presented
    token must still be valid."""
    if credentials is None:
        return None
    claims = tokens.validate(credentials.credentials)
    return AuthenticatedUser.from_claims(claims)


def get_current_user(
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> AuthenticatedUser:
    """Extract and validate the current user from the bearer token."""
    if user is None:
        raise UnauthorizedException("Authorization header missing or invalid")
    return user


def require_admin(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    """Require admin role."""
    return require_role(user, UserRole.ADMIN)
