"""Auth service: bearer token issuance and validation with single active session."""

import uuid
from datetime import timedelta

import structlog
from jose import JWTError, jwt
from pydantic import ValidationError

from card_platform.application.services.common import Clock
from card_platform.config import Settings
from card_platform.core.exceptions import (
    ForbiddenException,
    InvalidTokenSignatureException,
    PersistenceException,
    TokenExpiredException,
    TokenSupersededException,
    UnknownSubjectException,
)
from card_platform.domain.models.card import utcnow
from card_platform.domain.models.user import User, UserRole
from card_platform.domain.repositories.user_repository import UserRepository
from card_platform.domain.schemas.auth import AuthenticatedUser, TokenClaims

logger = structlog.get_logger(__name__)


class TokenAuthority:
    """Issues signed, time-boxed tokens and accepts only the latest one per user.

    Signature and expiry are checked first; a valid token is then compared
    with the user's recorded ``last_token``, so issuing a new token
    invalidates every earlier one for that user.
    """

    def __init__(self, settings: Settings, users: UserRepository, clock: Clock = utcnow):
        self._secret = settings.JWT_SECRET
        self._algorithm = settings.JWT_ALGORITHM
        self._ttl = timedelta(hours=settings.JWT_EXPIRATION_HOURS)
        self._users = users
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, user: User) -> str:
        now = self._clock()
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "role": UserRole.parse(user.role).value,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)

        # Login must not fail because the bookkeeping write failed
        try:
            self._users.update_fields(user.id, {"last_token": token})
        except PersistenceException:
            logger.warning("Failed to record last token", user_id=user.id, username=user.username, exc_info=True)

        logger.info("Token issued", user_id=user.id, username=user.username)
        return token

    def decode(self, token: str) -> TokenClaims:
        """Stateless checks only: signature, expiry and claim shape.

        Expiry is judged against the injected clock, the same one that
        stamped ``iat`` and ``exp`` at issuance.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidTokenSignatureException() from exc

        try:
            claims = TokenClaims.model_validate(payload)
        except ValidationError as exc:
            raise InvalidTokenSignatureException("Token claims are malformed") from exc

        if claims.exp <= int(self._clock().timestamp()):
            raise TokenExpiredException()
        return claims

    def validate(self, token: str) -> TokenClaims:
        claims = self.decode(token)

        try:
            user_id = int(claims.sub)
        except ValueError:
            raise InvalidTokenSignatureException("Token subject is malformed") from None

        user = self._users.find_by_id(user_id)
        if user is None:
            raise UnknownSubjectException(details={"sub": claims.sub})
        if user.last_token != token:
            logger.info("Rejected superseded token", user_id=user_id)
            raise TokenSupersededException()
        return claims


def require_role(identity: AuthenticatedUser, role: UserRole) -> AuthenticatedUser:
    if identity.role != role:
        raise ForbiddenException(
            f"{role.value.capitalize()} privileges required",
            details={"required_role": role.value},
        )
    return identity
