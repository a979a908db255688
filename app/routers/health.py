"""
CareMatch - Health Check Router
Provides API and database health status endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone

from app.database import get_db
from app.config import get_settings
from app.models.models import Assignment, CandidateProfile

router = APIRouter()
settings = get_settings()


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Health check for API and database.

    Returns:
        - API status
        - Database connection status
        - Current timestamp
        - Environment info
    """
    try:
        db.execute(text("SELECT 1")).fetchone()
        db_status = "healthy"
        db_message = "Database reachable"
    except SQLAlchemyError as e:
        db_status = "unhealthy"
        db_message = str(e)

    return {
        "status": "ok" if db_status == "healthy" else "degraded",
        "service": "carematch-api",
        "version": settings.app_version,
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": {
                "status": db_status,
                "message": db_message
            }
        }
    }


@router.get("/health/db")
def database_health(db: Session = Depends(get_db)):
    """
    Database health check with candidate pool and assignment counts.
    """
    try:
        counts = {
            "candidate_profiles": db.query(CandidateProfile).count(),
            "active_candidates": db.query(CandidateProfile).filter(CandidateProfile.is_active.is_(True)).count(),
            "assignments": db.query(Assignment).count(),
        }
        return {
            "status": "healthy",
            "tables": counts,
        }
    except SQLAlchemyError as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
