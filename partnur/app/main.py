"""
FastAPI application entry point
"""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from datetime import datetime
import logging
import time

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from partnur.app.api.routes import chat, profile, analytics
from partnur.app.config import settings
from partnur.app.models.schemas import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Partnur Backend",
    description="Conversational business-profile intake and advice for Indian small businesses",
    version="1.0.0"
)

# Rate limiting for the chat endpoints
app.state.limiter = chat.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
logger.info(f"Rate limiting {'enabled' if settings.RATE_LIMIT_ENABLED else 'disabled'}: {settings.RATE_LIMIT_CHAT} on chat")

# Parse CORS origins from comma-separated string
allowed_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    max_age=3600,
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Stamp the request start time so handlers can report response latency"""

    async def dispatch(self, request: Request, call_next):
        request.state.start_time = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - request.state.start_time) * 1000
        response.headers["X-Response-Time-ms"] = f"{elapsed_ms:.0f}"
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestTimingMiddleware)

# Include API routers
app.include_router(chat.router)
app.include_router(profile.router)
app.include_router(analytics.router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return {"status": "Partnur Backend is running!", "timestamp": datetime.now().isoformat()}


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info("Starting Partnur Backend...")

    # Initialize database
    try:
        from partnur.app.database import init_db
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")

    from partnur.app.dependencies import build_services
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services()

    logger.info("🚀 Partnur Backend ready")
    logger.info("📱 Chat endpoint: POST /chat")
    logger.info("🧠 Enhanced chat: POST /chat/enhanced")
    logger.info("👤 Profile endpoint: GET /profile/{mobile_number}")
    logger.info("📊 Analytics endpoint: GET /analytics/{mobile_number}")
    logger.info("📈 Trends endpoint: GET /trends")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Partnur Backend...")

    services = getattr(app.state, "services", None)
    if services is not None:
        try:
            services.shutdown()
        except Exception as e:
            logger.error(f"Error stopping conversation log writer: {str(e)}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "partnur.app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD
    )
