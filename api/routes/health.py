"""Health check routes"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db
from app.config import settings

router = APIRouter(tags=["Health"])
logger = logging.getLogger("freezer.api.health")


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Report service status and database connectivity"""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        database = "unavailable"

    body = {
        "status": "ok" if database == "ok" else "degraded",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": database,
    }
    return JSONResponse(status_code=200 if database == "ok" else 503, content=body)
