"""
Analytics endpoints - per-user conversation stats and platform-wide trends
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from datetime import datetime
import logging

from partnur.app.api.errors import service_error
from partnur.app.config import settings
from partnur.app.dependencies import Services, get_services
from partnur.app.models.schemas import AnalyticsResponse, TrendsResponse
from partnur.app.services.profile_store import ProfileStoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analytics"])


@router.get("/analytics/{mobile_number}", response_model=AnalyticsResponse)
def get_analytics(
    mobile_number: str,
    days: int = Query(default=settings.ANALYTICS_DEFAULT_DAYS, ge=0, le=3650, description="Trailing window in days"),
    services: Services = Depends(get_services)
):
    """
    Conversation analytics for one user

    Args:
        mobile_number: The user's mobile number
        days: Size of the trailing window (default 30)
    """
    logger.info(f"📊 Getting analytics for {mobile_number}")

    try:
        profile = services.store.get_by_mobile(mobile_number)
        if not profile:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        analytics = services.analytics.windowed_stats(profile["user_id"], days)
        activity_summary = services.analytics.activity_summary(profile["user_id"])
    except ProfileStoreError as e:
        logger.error(f"❌ Analytics endpoint error: {str(e)}")
        raise service_error("Failed to get analytics", e)

    return {
        "success": True,
        "mobile_number": mobile_number,
        "analytics": jsonable_encoder(analytics),
        "activity_summary": jsonable_encoder(activity_summary),
        "profile_completion": services.scorer.score(profile),
        "generated_at": datetime.now().isoformat(),
    }


@router.get("/trends", response_model=TrendsResponse)
def get_trends(
    limit: int = Query(default=settings.TRENDS_DEFAULT_LIMIT, ge=1, le=1000, description="Maximum profiles to include"),
    services: Services = Depends(get_services)
):
    """
    Profile completion trends across all users, newest profiles first
    """
    logger.info("📈 Getting profile completion trends")

    try:
        trends = services.analytics.completion_trend(limit)
    except ProfileStoreError as e:
        logger.error(f"❌ Trends endpoint error: {str(e)}")
        raise service_error("Failed to get trends", e)

    return {
        "success": True,
        "summary": services.analytics.trend_summary(trends),
        "trends": jsonable_encoder(trends),
        "generated_at": datetime.now().isoformat(),
    }
