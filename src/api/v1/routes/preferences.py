"""Notification preference API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_preference_service
from api.v1.schemas.preferences import (
    PreferencesDetailResponse,
    PreferencesResponse,
    PreferencesUpdate,
)
from core.rate_limit import limiter
from domain.entities.preferences import PreferencesPatch
from domain.services.preference_service import PreferenceService

router = APIRouter(prefix="/recipients/{recipient_id}/preferences", tags=["preferences"])


@router.get(
    "",
    response_model=PreferencesDetailResponse,
    summary="Get notification preferences",
    responses={
        200: {"description": "Stored preferences, created with defaults on first access"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_preferences(
    request: Request,
    recipient_id: UUID,
    service: PreferenceService = Depends(get_preference_service),
) -> PreferencesDetailResponse:
    """Get a recipient's preferences."""
    prefs = await service.get_preferences(recipient_id)
    return PreferencesDetailResponse(data=PreferencesResponse.from_entity(prefs))


@router.patch(
    "",
    response_model=PreferencesDetailResponse,
    summary="Update notification preferences",
    responses={
        200: {"description": "Preferences updated"},
        400: {"description": "Invalid preference value"},
    },
)
@limiter.limit("20/minute")  # type: ignore[untyped-decorator]
async def update_preferences(
    request: Request,
    recipient_id: UUID,
    body: PreferencesUpdate,
    service: PreferenceService = Depends(get_preference_service),
) -> PreferencesDetailResponse:
    """
    Partially update a recipient's preferences.

    Only fields present in the body change. Quiet hours take `HH:MM` values
    and must be set together; send `clear_quiet_hours: true` to remove them.
    """
    patch = PreferencesPatch.from_mapping(body.model_dump(exclude_unset=True))
    prefs = await service.update_preferences(recipient_id, patch)
    return PreferencesDetailResponse(data=PreferencesResponse.from_entity(prefs))
