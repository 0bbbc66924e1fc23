"""
Version and metadata endpoint
"""
from fastapi import APIRouter
from ems.core.config import settings

router = APIRouter()


@router.get("/version")
async def get_version():
    """
    Get application version and metadata

    Returns:
        Version information including service name, version and environment
    """
    return {
        "service": "ems-directory-backend",
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
    }
