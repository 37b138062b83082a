"""Unit tests for the token authority."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from jose import jwt

from card_platform.application.services.auth_service import TokenAuthority, require_role
from card_platform.core.exceptions import (
    ForbiddenException,
    InvalidTokenSignatureException,
    PersistenceException,
    TokenExpiredException,
    TokenSupersededException,
    UnknownSubjectException,
)
from card_platform.domain.models.user import User, UserRole
from card_platform.domain.schemas.auth import AuthenticatedUser

from conftest import identity_of


def test_issue_records_last_token(token_authority, user_repo, alice):
    token = token_authority.issue(alice)

    assert user_repo.find_by_id(alice.id).last_token == token


def test_validate_returns_claims(token_authority, alice):
    token = token_authority.issue(alice)

    claims = token_authority.validate(token)

    assert claims.sub == str(alice.id)
    assert claims.username == "alice"
    assert claims.role is UserRole.USER
    assert claims.exp - claims.iat == 24 * 3600


def test_relogin_supersedes_previous_token(token_authority, alice):
    first = token_authority.issue(alice)
    second = token_authority.issue(alice)

    assert first != second
    with pytest.raises(TokenSupersededException):
        token_authority.validate(first)
    assert token_authority.validate(second).username == "alice"


def test_tokens_are_per_user(token_authority, alice, bob):
    alice_token = token_authority.issue(alice)
    token_authority.issue(bob)

    assert token_authority.validate(alice_token).username == "alice"


def test_expired_token(settings, user_repo, alice):
    past = datetime.now(timezone.utc) - timedelta(hours=25)
    authority = TokenAuthority(settings, user_repo, clock=lambda: past)
    token = authority.issue(alice)

    with pytest.raises(TokenExpiredException):
        TokenAuthority(settings, user_repo).validate(token)


def test_expiry_follows_injected_clock(settings, user_repo, alice, clock):
    authority = TokenAuthority(settings, user_repo, clock=clock)
    token = authority.issue(alice)

    clock.advance(hours=23, minutes=59)
    assert authority.validate(token).username == "alice"

    clock.advance(minutes=1)
    with pytest.raises(TokenExpiredException):
        authority.validate(token)


def test_token_signed_with_other_secret(token_authority, alice):
    forged = jwt.encode(
        {"sub": str(alice.id), "username": "alice", "role": "ADMIN", "exp": 4102444800, "iat": 0, "jti": "x"},
        "not-the-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenSignatureException):
        token_authority.validate(forged)


def test_garbage_token(token_authority):
    with pytest.raises(InvalidTokenSignatureException):
        token_authority.validate("definitely.not.ajwt")


def test_token_with_missing_claims(token_authority, settings):
    token = jwt.encode({"sub": "1", "exp": 4102444800}, settings.JWT_SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenSignatureException):
        token_authority.validate(token)


def test_deleted_subject(token_authority, user_repo, alice):
    token = token_authority.issue(alice)
    user_repo.delete(alice.id)

    with pytest.raises(UnknownSubjectException):
        token_authority.validate(token)


def test_issue_survives_bookkeeping_failure(settings):
    users = MagicMock()
    users.update_fields.side_effect = PersistenceException("disk full")
    authority = TokenAuthority(settings, users)
    user = User(id=7, username="dave", role=UserRole.USER, password_hash="x")

    token = authority.issue(user)

    assert authority.decode(token).username == "dave"
    users.update_fields.assert_called_once_with(7, {"last_token": token})


def test_require_role_allows_matching_role(admin):
    identity = identity_of(admin)
    assert require_role(identity, UserRole.ADMIN) is identity


def test_require_role_rejects_other_role():
    identity = AuthenticatedUser(user_id="3", username="erin", role=UserRole.USER)

    with pytest.raises(ForbiddenException):
        require_role(identity, UserRole.ADMIN)
