# edutrack/routers/errors.py
import logging
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from ..services.errors import (
    ContentGenerationError,
    InvalidInputError,
    LevelLockedError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)


def http_error(exc: Exception, action: str) -> HTTPException:
    """Map a service-layer exception to the HTTPException the client sees."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, LevelLockedError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, InvalidInputError):
        logger.error(f"Validation error while {action}: {str(exc)}")
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ContentGenerationError):
        logger.error(f"Content generation failed while {action}: {str(exc)}")
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, SQLAlchemyError):
        message = getattr(exc, "orig", None) or exc
        logger.error(f"Database error while {action}: {message}")
        return HTTPException(status_code=500, detail=f"Database error: {message}")
    logger.error(f"Error while {action}: {str(exc)}")
    return HTTPException(status_code=500, detail=f"Failed {action}")
