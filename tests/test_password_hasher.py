"""Tests for bcrypt password hashing."""

import pytest

from card_platform.application.services.password_hasher import hash_password, verify_password
from card_platform.core.exceptions import HashingException


def test_hash_then_verify_same_password():
    digest = hash_password("correct horse")
    assert verify_password("correct horse", digest) is True


def test_verify_other_password_returns_false():
    digest = hash_password("correct horse")
    assert verify_password("battery staple", digest) is False


def test_hash_is_salted():
    assert hash_password("same") != hash_password("same")


def test_verify_malformed_digest_raises():
    with pytest.raises(HashingException):
        verify_password("anything", "not-a-bcrypt-hash")
