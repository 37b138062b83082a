"""Store-level behavior the card lifecycle relies on."""

from datetime import datetime, timezone

import pytest

from card_platform.core.exceptions import PersistenceException
from card_platform.domain.models.card import Card


def _card(code: str, owner: str = "1") -> Card:
    return Card(code=code, duration_days=5, is_activated=False, created_by=owner)


def test_conditional_update_applies_once(card_repo):
    card_repo.insert_many([_card("ABC")])
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    fields = {"is_activated": True, "activated_at": now}

    assert card_repo.conditional_update("ABC", {"is_activated": False}, fields) == 1
    assert card_repo.conditional_update("ABC", {"is_activated": False}, fields) == 0
    assert card_repo.find_by_code("ABC").is_activated is True


def test_conditional_update_unknown_code(card_repo):
    assert card_repo.conditional_update("NOPE", {"is_activated": False}, {"is_activated": True}) == 0


def test_insert_many_is_all_or_nothing(card_repo):
    card_repo.insert_many([_card("DUP")])

    with pytest.raises(PersistenceException):
        card_repo.insert_many([_card("FRESH"), _card("DUP")])

    assert card_repo.find_by_code("FRESH") is None
    assert len(card_repo.list()) == 1


def test_delete_with_owner_filter(card_repo):
    ids = card_repo.insert_many([_card("MINE", owner="1"), _card("THEIRS", owner="2")])

    assert card_repo.delete(ids[1], {"created_by": "1"}) == 0
    assert card_repo.delete(ids[0], {"created_by": "1"}) == 1
    assert [c.code for c in card_repo.list()] == ["THEIRS"]


def test_list_with_owner_filter(card_repo):
    card_repo.insert_many([_card("A1", owner="1"), _card("B1", owner="2"), _card("A2", owner="1")])

    assert sorted(c.code for c in card_repo.list({"created_by": "1"})) == ["A1", "A2"]
    assert len(card_repo.list()) == 3
