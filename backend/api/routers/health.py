"""Health check router"""
from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from infrastructure.persistence.database import get_session

router = APIRouter(tags=["System"])


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """Service liveness plus registry reachability"""
    try:
        await session.execute(text("SELECT 1"))
        registry = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Registry database unreachable: {e}")
        registry = "unavailable"
    return {
        "status": "healthy" if registry == "ok" else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "registry": registry,
    }


@router.get("/")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "verify": "/api/certificates/verify/{certificate_number}",
    }
