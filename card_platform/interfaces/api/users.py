"""User API routes: register, login, me, admin user management."""

from typing import List

from fastapi import APIRouter, Depends, status

from card_platform.application.services.auth_service import TokenAuthority
from card_platform.application.services.user_service import UserService
from card_platform.domain.schemas.auth import (
    AuthenticatedUser,
    LoginRequest,
    TokenResponse,
    UserCreate,
    UserRead,
    UserUpdate,
)
from card_platform.interfaces.api.deps import get_current_user, require_admin
from card_platform.interfaces.deps import get_token_authority, get_user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, service: UserService = Depends(get_user_service)):
    return UserRead.model_validate(service.register(body))


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    service: UserService = Depends(get_user_service),
    tokens: TokenAuthority = Depends(get_token_authority),
):
    token, user = service.login(body.username, body.password)
    return TokenResponse(
        token=token,
        expires_in=tokens.ttl_seconds,
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=AuthenticatedUser)
@router.get("/current", response_model=AuthenticatedUser)
def get_me(user: AuthenticatedUser = Depends(get_current_user)):
    return user


@router.get("", response_model=List[UserRead])
def list_users(
    service: UserService = Depends(get_user_service),
    admin: AuthenticatedUser = Depends(require_admin),
):
    return [UserRead.model_validate(u) for u in service.list()]


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    admin: AuthenticatedUser = Depends(require_admin),
):
    return UserRead.model_validate(service.get(user_id))


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: str,
    body: UserUpdate,
    service: UserService = Depends(get_user_service),
    admin: AuthenticatedUser = Depends(require_admin),
):
    return UserRead.model_validate(service.update(user_id, body))


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    admin: AuthenticatedUser = Depends(require_admin),
):
    service.delete(user_id)
    return {"message": "User deleted successfully"}
