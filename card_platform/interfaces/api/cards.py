"""Card API routes: generate, activate, verify, list, export, delete."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from card_platform.application.services.card_service import CardService
from card_platform.domain.schemas.auth import AuthenticatedUser
from card_platform.domain.schemas.card import (
    CardActivateRequest,
    CardGenerateRequest,
    CardRead,
    CardVerifyRequest,
    CardVerifyResponse,
)
from card_platform.interfaces.api.deps import get_current_user, get_optional_user, require_admin
from card_platform.interfaces.deps import get_card_service

router = APIRouter(prefix="/api/cards", tags=["Cards"])


@router.post("/generate", response_model=List[CardRead])
def generate_cards(
    body: CardGenerateRequest,
    service: CardService = Depends(get_card_service),
    user: AuthenticatedUser = Depends(get_current_user),
):
    cards = service.generate(user, body.duration_days, body.count)
    return [CardRead.model_validate(c) for c in cards]


@router.post("/activate", response_model=CardRead)
def activate_card(
    body: CardActivateRequest,
    service: CardService = Depends(get_card_service),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    card = service.activate(body.code, used_by=user.user_id if user else None)
    return CardRead.model_validate(card)


@router.post("/verify", response_model=CardVerifyResponse)
def verify_card(
    body: CardVerifyRequest,
    service: CardService = Depends(get_card_service),
):
    """Verify a card. An unused card is activated by this call."""
    card = service.verify_or_auto_activate(body.code, body.user_identifier)
    return CardVerifyResponse(message="Card is valid", card=CardRead.model_validate(card))


@router.get("", response_model=List[CardRead])
def list_cards(
    service: CardService = Depends(get_card_service),
    user: AuthenticatedUser = Depends(get_current_user),
):
    return [CardRead.model_validate(c) for c in service.list(user)]


@router.get("/export")
def export_cards(
    service: CardService = Depends(get_card_service),
    admin: AuthenticatedUser = Depends(require_admin),
):
    return Response(
        content=service.export_all(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="cards.csv"'},
    )


@router.delete("/{card_id}")
def delete_card(
    card_id: str,
    service: CardService = Depends(get_card_service),
    user: AuthenticatedUser = Depends(get_current_user),
):
    service.delete(card_id, user)
    return {"message": "Card deleted successfully"}
