"""Health check endpoints."""

from fastapi import APIRouter

from agenpay.config import get_settings
from agenpay.ledger.database import check_db

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "agenpay"}


@router.get("/health/detailed")
async def detailed_health():
    """Detailed health check with configuration and database status."""
    settings = get_settings()
    db_ok = await check_db()
    return {
        "status": "healthy" if db_ok else "degraded",
        "service": "agenpay",
        "version": "0.1.0",
        "database": "ok" if db_ok else "unavailable",
        "config": settings.get_safe_dict(),
    }
