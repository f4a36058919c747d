"""
Health check endpoints.

Provides basic health and status information about the server.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime

from brainwave.database import get_db
from brainwave.config import get_settings

router = APIRouter()
settings = get_settings()

FORUM_TABLES = ("users", "topics", "messages")


@router.get("/health")
async def health_check(db: Session = Depends(get_db)) -> dict:
    """
    Basic health check endpoint.

    Returns:
        dict: Server status information including version.

    Example response:
        {
            "status": "healthy",
            "version": "0.1.0",
            "timestamp": "2026-10-17T23:00:00Z",
            "database": "connected"
        }
    """
    # Test database connection
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "database": db_status,
    }


@router.get("/health/ready")
async def readiness_check(db: Session = Depends(get_db)) -> dict:
    """
    Readiness check for the service.

    Verifies that each forum table can be queried.

    Returns:
        dict: Readiness status.
    """
    checks = {}
    for table in FORUM_TABLES:
        try:
            db.execute(text(f"SELECT COUNT(*) FROM {table}"))
            checks[table] = "ok"
        except SQLAlchemyError as e:
            db.rollback()
            checks[table] = f"failed: {str(e)}"

    return {
        "ready": all(status == "ok" for status in checks.values()),
        "checks": checks,
    }
