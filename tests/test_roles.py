"""Role parsing at the input boundary."""

import pytest
from pydantic import ValidationError

from card_platform.domain.models.user import UserRole
from card_platform.domain.schemas.auth import UserCreate, UserUpdate


@pytest.mark.parametrize("raw", ["admin", "Admin", "ADMIN", " admin "])
def test_admin_aliases(raw):
    assert UserRole.parse(raw) is UserRole.ADMIN


@pytest.mark.parametrize("raw", ["user", "User", "USER"])
def test_user_aliases(raw):
    assert UserRole.parse(raw) is UserRole.USER


def test_unknown_role_rejected():
    with pytest.raises(ValueError):
        UserRole.parse("root")


def test_schemas_normalize_role():
    assert UserCreate(username="carol", password="secret1", role="admin").role is UserRole.ADMIN
    assert UserUpdate(role="User").role is UserRole.USER
    assert UserUpdate().role is None


def test_schema_rejects_unknown_role():
    with pytest.raises(ValidationError):
        UserCreate(username="carol", password="secret1", role="superuser")
