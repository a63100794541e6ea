"""
Chat endpoints - the conversational intake entry point
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.concurrency import run_in_threadpool
from datetime import datetime
import logging
import time

from partnur.app.api.errors import service_error
from partnur.app.config import settings
from partnur.app.dependencies import Services, get_services
from partnur.app.models.schemas import ChatRequest, ChatResponse, EnhancedChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED
)

CHAT_FIELDS = ("mobile_number", "message", "session_id")

CHAT_EXAMPLE = {
    "mobile_number": "+919876543210",
    "message": "How can I increase my restaurant sales?",
    "session_id": "optional-session-id",
}


async def read_chat_request(request: Request) -> ChatRequest:
    """
    Read chat parameters from the JSON body, falling back to the query string

    Raises:
        HTTPException 400: If mobile_number or message is missing
    """
    body = {}
    if await request.body():
        try:
            body = await request.json()
        except ValueError:
            body = {}
    if not isinstance(body, dict):
        body = {}

    data = {}
    for name in CHAT_FIELDS:
        value = body.get(name) or request.query_params.get(name)
        if value is not None:
            data[name] = str(value).strip() if name != "message" else str(value)

    try:
        return ChatRequest(**data)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "mobile_number and message are required", "example": CHAT_EXAMPLE}
        )


def _started_at(request: Request) -> float:
    return getattr(request.state, "start_time", None) or time.perf_counter()


@router.post("/chat", response_model=ChatResponse)
@limiter.limit(settings.RATE_LIMIT_CHAT)
async def chat(request: Request, services: Services = Depends(get_services)):
    """
    Main chat endpoint

    Resolves the user's profile, extracts new business details from the
    message, merges them, and replies with advice plus follow-up suggestions.
    """
    chat_request = await read_chat_request(request)
    logger.info(f"💬 New message from {chat_request.mobile_number}: {chat_request.message}")

    try:
        result = await run_in_threadpool(
            services.pipeline.process,
            chat_request.mobile_number,
            chat_request.message,
            session_id=chat_request.session_id,
            started_at=_started_at(request),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": str(e)})
    except Exception as e:
        logger.error(f"❌ Chat endpoint error: {str(e)}")
        raise service_error("Something went wrong. Please try again.", e)

    return result.to_response()


@router.post("/chat/enhanced", response_model=EnhancedChatResponse)
@limiter.limit(settings.RATE_LIMIT_CHAT)
async def chat_enhanced(request: Request, services: Services = Depends(get_services)):
    """
    Enhanced chat endpoint

    Same pipeline as /chat plus smart questions, a seasonal tip, business
    insights, contextual tips and a 7-day analytics preview.
    """
    chat_request = await read_chat_request(request)
    logger.info(f"💬 Enhanced chat from {chat_request.mobile_number}: {chat_request.message}")

    try:
        result = await run_in_threadpool(
            services.pipeline.process,
            chat_request.mobile_number,
            chat_request.message,
            session_id=chat_request.session_id,
            enhanced=True,
            started_at=_started_at(request),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": str(e)})
    except Exception as e:
        logger.error(f"❌ Enhanced chat endpoint error: {str(e)}")
        raise service_error("Something went wrong. Please try again.", e)

    return {
        "success": True,
        "response": result.response,
        "profile_completion": result.profile_completion,
        "extracted_info": result.extracted_info,
        "suggestions": result.suggestions,
        "smart_features": result.smart_features,
        "analytics_preview": result.analytics_preview,
        "context_used": result.context_used,
        "response_time_ms": result.response_time_ms,
        "timestamp": datetime.now().isoformat(),
    }
