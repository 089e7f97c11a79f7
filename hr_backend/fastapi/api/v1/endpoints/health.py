"""
Health check endpoint.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_backend.fastapi.core.init_settings import global_settings
from hr_backend.fastapi.dependencies.database import get_sync_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health Check")
def health_check(db: Session = Depends(get_sync_db)):
    """
    Report service and database liveness.

    **Errors:**
    - **503**: Database unreachable
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e.__class__.__name__)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable"
        ) from e

    return {
        "status": "ok",
        "app": global_settings.APP_NAME,
        "version": global_settings.APP_VERSION,
        "database": "ok"
    }
