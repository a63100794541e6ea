"""
HTTP error helpers shared by the route modules
"""
from fastapi import HTTPException, status

from partnur.app.config import settings


def service_error(message: str, error: Exception) -> HTTPException:
    """
    Generic 500 error; the underlying error text is only exposed in development
    """
    detail = {"error": message}
    if settings.is_development:
        detail["details"] = str(error)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
