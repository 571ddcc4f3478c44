"""
Basic routes
Root and health check
"""
# Standard library imports
import logging

# Third-party imports
from fastapi import APIRouter

# Local imports
from config import settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Basic"]
)


@router.get("/", summary="Service info")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@router.get("/health", summary="Health check")
async def health_check():
    """
    Liveness probe for load balancers and monitoring

    Returns:
        service health
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "checks": {
            "api": "ok",
        }
    }
