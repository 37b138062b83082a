"""Pydantic schemas for User and Auth."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from card_platform.domain.models.user import UserRole


class _RoleField(BaseModel):
    @field_validator("role", mode="before", check_fields=False)
    @classmethod
    def _parse_role(cls, value):
        if value is None:
            return value
        return UserRole.parse(value)


class UserCreate(_RoleField):
    username: str = Field(min_length=3, max_length=150)
    password: str = Field(min_length=6)
    email: Optional[str] = None
    role: UserRole = UserRole.USER


class UserUpdate(_RoleField):
    username: Optional[str] = Field(default=None, min_length=3, max_length=150)
    password: Optional[str] = Field(default=None, min_length=6)
    email: Optional[str] = None
    role: Optional[UserRole] = None


class UserRead(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRead


class TokenClaims(BaseModel):
    """Decoded bearer token payload."""
    sub: str
    username: str
    role: UserRole
    exp: int
    iat: int
    jti: str


class AuthenticatedUser(BaseModel):
    """Identity context produced by the authentication gate."""
    user_id: str
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "AuthenticatedUser":
        return cls(user_id=claims.sub, username=claims.username, role=claims.role)
