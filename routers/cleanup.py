"""
Cleanup routes
Triggered by a scheduler to delete expired cards
"""
# Standard library imports
import logging
import secrets
from typing import Optional

# Third-party imports
from fastapi import APIRouter, HTTPException, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

# Local imports
from config import settings
from exceptions import Unauthorized
from models import CleanupErrorDetail, CleanupResponse, CleanupSummary
from storage.database import get_session
from routers.services.cleanup_service import CleanupService
from routers.utils import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cleanup",
    tags=["Cleanup"]
)


def get_cleanup_service(session: AsyncSession = Depends(get_session)) -> CleanupService:
    return CleanupService(session)


def verify_cleanup_token(authorization: Optional[str] = Header(None)) -> None:
    """Require Authorization: Bearer <CLEANUP_AUTH_TOKEN> when a token is configured"""
    expected = settings.CLEANUP_AUTH_TOKEN
    if not expected:
        return

    if not authorization or not secrets.compare_digest(authorization, f"Bearer {expected}"):
        raise to_http_exception(Unauthorized(cause="Cleanup token missing or wrong"))


@router.post("", response_model=CleanupResponse, summary="Delete expired cards")
async def run_cleanup(
    _: None = Depends(verify_cleanup_token),
    cleanup_service: CleanupService = Depends(get_cleanup_service)
):
    """
    Run one sweep

    Per-card failures are reported in error_details and do not fail the request.
    """
    try:
        result = await cleanup_service.sweep()
    except Exception as e:
        logger.error(f"Cleanup job failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Cleanup job failed: {str(e)}")

    return CleanupResponse(
        success=True,
        result=CleanupSummary(
            total_expired=result.total_expired,
            deleted=result.deleted,
            errors=len(result.errors),
            error_details=[CleanupErrorDetail(**error) for error in result.errors],
            duration_ms=result.duration_ms
        )
    )


@router.get("", summary="Cleanup endpoint status")
async def cleanup_status():
    return {
        "message": "Cleanup endpoint is active",
        "endpoint": "/api/cleanup",
        "method": "POST",
    }
