"""
Profile Router
Display name, avatar and preferred currency of the signed-in user
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from finance_tracker.core.config import settings
from finance_tracker.core.security import get_current_user_id
from finance_tracker.db import dynamo
from finance_tracker.models.profile import CURRENCY_SYMBOLS, Currency, ProfileInDB, ProfilePublic, ProfileUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


def currency_symbol(profile: Optional[Dict[str, Any]]) -> str:
    """Symbol for a stored profile's currency, or the configured default."""
    if profile and profile.get("currency"):
        return CURRENCY_SYMBOLS[Currency(profile["currency"])]
    return settings.CURRENCY_SYMBOL


def _public(profile: Dict[str, Any]) -> ProfilePublic:
    return ProfilePublic(**profile, currency_symbol=currency_symbol(profile))


@router.get("/", response_model=ProfilePublic)
def get_profile(user_id: str = Depends(get_current_user_id)):
    profile = dynamo.get_profile(user_id)
    if not profile:
        # Nothing saved yet: answer with an unsaved blank profile
        profile = ProfileInDB(user_id=user_id).model_dump(mode="json")
    return _public(profile)


@router.put("/", response_model=ProfilePublic)
def update_profile(profile_update: ProfileUpdate, user_id: str = Depends(get_current_user_id)):
    """
    Create the profile on first save, otherwise merge the given fields into it.
    """
    mutable_fields = profile_update.model_dump(mode="json", exclude_unset=True)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    existing = dynamo.get_profile(user_id) or {}
    profile = ProfileInDB(**{
        **existing,
        **mutable_fields,
        "user_id": user_id,
        "updated_at": datetime.utcnow().isoformat(),
    })
    stored = profile.model_dump(mode="json")
    if not dynamo.put_profile(stored):
        raise HTTPException(status_code=500, detail="Failed to update profile")

    logger.info(f"Updated profile for user {user_id}: {sorted(mutable_fields)}")
    return _public(stored)
