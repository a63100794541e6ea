"""
Profile lookup endpoint
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
import logging

from partnur.app.api.errors import service_error
from partnur.app.dependencies import Services, get_services
from partnur.app.models.schemas import ProfileResponse
from partnur.app.services.profile_store import ProfileStoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Profile"])


@router.get("/profile/{mobile_number}", response_model=ProfileResponse)
def get_profile(mobile_number: str, services: Services = Depends(get_services)):
    """
    Get a user's business profile with its completion score

    Args:
        mobile_number: The user's mobile number
    """
    try:
        profile = services.store.get_by_mobile(mobile_number)
    except ProfileStoreError as e:
        logger.error(f"❌ Profile fetch error: {str(e)}")
        raise service_error("Failed to fetch profile", e)

    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    return {
        "profile": jsonable_encoder(profile),
        "completion_score": services.scorer.score(profile),
    }
