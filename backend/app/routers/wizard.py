"""Booking wizard router: server-held wizard state, one per device."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_client_id, get_current_user
from app.models.user import User
from app.routers.calculator import quote
from app.schemas.wizard import WizardStateResponse
from app.services.booking_wizard import BookingWizard, Identity, wizard_registry

router = APIRouter()


def get_wizard(
    client_id: str = Depends(get_client_id),
    user: User = Depends(get_current_user),
) -> BookingWizard:
    return wizard_registry.get(client_id, Identity(id=user.id, role=user.role))


def _state(wizard: BookingWizard) -> WizardStateResponse:
    return WizardStateResponse(**wizard.snapshot())


@router.get("", response_model=WizardStateResponse)
async def get_state(wizard: BookingWizard = Depends(get_wizard)):
    return _state(wizard)


@router.patch("/data", response_model=WizardStateResponse)
async def update_data(
    changes: dict[str, Any] = Body(...),
    wizard: BookingWizard = Depends(get_wizard),
):
    wizard.update_form_data(**changes)
    return _state(wizard)


@router.post("/next", response_model=WizardStateResponse)
async def next_step(wizard: BookingWizard = Depends(get_wizard)):
    wizard.next_step()
    return _state(wizard)


@router.post("/prev", response_model=WizardStateResponse)
async def prev_step(wizard: BookingWizard = Depends(get_wizard)):
    wizard.prev_step()
    return _state(wizard)


@router.post("/reset", response_model=WizardStateResponse)
async def reset(wizard: BookingWizard = Depends(get_wizard)):
    wizard.reset()
    return _state(wizard)


@router.post("/submit", response_model=WizardStateResponse)
async def submit(
    wizard: BookingWizard = Depends(get_wizard),
    db: AsyncSession = Depends(get_db),
):
    await wizard.submit(lambda config: quote(config, db))
    return _state(wizard)


@router.delete("")
async def discard(
    client_id: str = Depends(get_client_id),
    user: User = Depends(get_current_user),
):
    """Drop the device's wizard (navigation away or after a completed booking)."""
    discarded = wizard_registry.discard(client_id)
    return {"discarded": discarded}
