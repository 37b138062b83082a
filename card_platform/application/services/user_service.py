"""User service: registration, login and admin user management."""

from typing import List, Tuple

import structlog

from card_platform.application.services.auth_service import TokenAuthority
from card_platform.application.services.common import Clock, parse_id
from card_platform.application.services.password_hasher import hash_password, verify_password
from card_platform.core.exceptions import (
    ConflictException,
    EntityNotFoundException,
    InvalidCredentialsException,
)
from card_platform.domain.models.card import utcnow
from card_platform.domain.models.user import User, UserRole
from card_platform.domain.repositories.user_repository import UserRepository
from card_platform.domain.schemas.auth import UserCreate, UserUpdate

logger = structlog.get_logger(__name__)


class UserService:
    def __init__(self, users: UserRepository, tokens: TokenAuthority, clock: Clock = utcnow):
        self._users = users
        self._tokens = tokens
        self._clock = clock

    def register(self, data: UserCreate) -> User:
        if self._users.find_by_username(data.username):
            logger.warning("Username already exists", username=data.username)
            raise ConflictException("Username already exists", details={"username": data.username})

        now = self._clock()
        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role,
            created_at=now,
            updated_at=now,
        )
        self._users.insert(user)
        logger.info("User registered", username=user.username, role=user.role.value)
        return user

    def authenticate(self, username: str, password: str) -> User:
        user = self._users.find_by_username(username)
        if user is None:
            logger.warning("Login attempt with unknown username", username=username)
            raise InvalidCredentialsException()
        if not verify_password(password, user.password_hash):
            logger.warning("Invalid password attempt", username=username)
            raise InvalidCredentialsException()
        return user

    def login(self, username: str, password: str) -> Tuple[str, User]:
        """Authenticate and issue a token, superseding any earlier one."""
        user = self.authenticate(username, password)
        token = self._tokens.issue(user)
        logger.info("User logged in", username=username)
        return token, user

    def get(self, user_id: "str | int") -> User:
        user = self._users.find_by_id(parse_id(user_id, "user"))
        if user is None:
            raise EntityNotFoundException("User not found")
        return user

    def list(self) -> List[User]:
        return self._users.list()

    def update(self, user_id: "str | int", data: UserUpdate) -> User:
        """Apply an admin edit. Changing the role or password revokes the
        user's current token, so stale role claims cannot outlive the edit."""
        id_ = parse_id(user_id, "user")
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "username" in changes:
            existing = self._users.find_by_username(changes["username"])
            if existing is not None and existing.id != id_:
                raise ConflictException("Username already exists", details={"username": changes["username"]})
        if "password" in changes:
            changes["password_hash"] = hash_password(changes.pop("password"))
        if "role" in changes or "password_hash" in changes:
            changes["last_token"] = None
        changes["updated_at"] = self._clock()

        if self._users.update_fields(id_, changes) == 0:
            raise EntityNotFoundException("User not found")
        logger.info("User updated", user_id=id_, fields=sorted(k for k in changes if k not in ("password_hash", "last_token")))
        return self.get(id_)

    def delete(self, user_id: "str | int") -> None:
        id_ = parse_id(user_id, "user")
        if self._users.delete(id_) == 0:
            raise EntityNotFoundException("User not found")
        logger.info("User deleted", user_id=id_)

    def ensure_admin(self, username: str, password: str) -> User:
        """Create the bootstrap admin account unless it already exists."""
        existing = self._users.find_by_username(username)
        if existing is not None:
            logger.info("Admin user already exists", username=username)
            return existing
        admin = self.register(UserCreate(username=username, password=password, role=UserRole.ADMIN))
        logger.info("Admin user created", username=username)
        return admin
