"""
Card routes
Create, publish, regenerate and view holiday cards
"""
# Standard library imports
import logging
from typing import Optional

# Third-party imports
from fastapi import APIRouter, HTTPException, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

# Local imports
from exceptions import HolidayCardError
from models import (
    CallerInfo,
    CardRateLimits,
    CardResponse,
    CardViewResponse,
    CreateCardRequest,
    CreateCardResponse,
    PublishCardResponse,
    RateLimitInfo,
    RegenerateCoverResponse,
    RegenerateMessageRequest,
    RegenerateMessageResponse,
)
from rate_limit import RateLimitStatus
from storage.database import get_session
from routers.services.card_service import CardService
from routers.utils import rate_limit_headers, to_http_exception
from utils import get_caller_info

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cards",
    tags=["Cards"]
)


def get_card_service(session: AsyncSession = Depends(get_session)) -> CardService:
    return CardService(session)


def _card_to_response(card) -> CardResponse:
    return CardResponse(
        id=card.id,
        slug=card.slug,
        occasion=card.occasion_id,
        vibe=card.vibe,
        clean_message=card.clean_message,
        cover_image_url=card.cover_image_url,
        status=card.status,
        created_at=card.created_at,
        expires_at=card.expires_at
    )


def _rate_limit_info(status: RateLimitStatus) -> RateLimitInfo:
    return RateLimitInfo(limit=status.limit, remaining=status.remaining, reset_at=status.reset_at)


@router.post("", response_model=CreateCardResponse, summary="Create a draft card")
async def create_card(
    request: CreateCardRequest,
    response: Response,
    caller: CallerInfo = Depends(get_caller_info),
    card_service: CardService = Depends(get_card_service)
):
    """
    Moderate the message, rewrite it in the chosen vibe, generate a cover
    and save the result as a draft

    Remaining quota is returned in the body and in X-RateLimit-* headers.
    """
    try:
        created = await card_service.create_card(
            occasion=request.occasion,
            vibe=request.vibe,
            message=request.message,
            caller_ip=caller.ip,
            caller_user_agent=caller.user_agent
        )
    except HolidayCardError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create card: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create card")

    response.headers.update(rate_limit_headers(created.allowance))

    return CreateCardResponse(
        success=True,
        message="Card created",
        data=_card_to_response(created.card),
        rate_limit=CardRateLimits(
            ip=_rate_limit_info(created.allowance.ip),
            device=_rate_limit_info(created.allowance.device)
        )
    )


@router.post("/{card_id}/publish", response_model=PublishCardResponse, summary="Publish a card")
async def publish_card(
    card_id: str,
    caller: CallerInfo = Depends(get_caller_info),
    card_service: CardService = Depends(get_card_service)
):
    """Publish a draft and return its share link"""
    try:
        published = await card_service.publish_card(card_id, caller.base_url)
    except HolidayCardError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to publish card {card_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to publish card")

    return PublishCardResponse(
        id=published.card.id,
        slug=published.card.slug,
        deep_link=published.deep_link,
        status=published.card.status
    )


@router.post("/{card_id}/regenerate-cover", response_model=RegenerateCoverResponse, summary="Regenerate the cover")
async def regenerate_cover(
    card_id: str,
    card_service: CardService = Depends(get_card_service)
):
    try:
        cover_image_url = await card_service.regenerate_cover(card_id)
    except HolidayCardError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to regenerate cover for card {card_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to regenerate cover")

    return RegenerateCoverResponse(cover_image_url=cover_image_url)


@router.post("/{card_id}/regenerate-message", response_model=RegenerateMessageResponse, summary="Regenerate the message")
async def regenerate_message(
    card_id: str,
    request: Optional[RegenerateMessageRequest] = None,
    card_service: CardService = Depends(get_card_service)
):
    """
    Rewrite the message again

    A supplied originalMessage is moderated before use; otherwise the
    message the card was created from is rewritten.
    """
    original_message = request.original_message if request else None
    try:
        clean_message = await card_service.regenerate_message(card_id, original_message)
    except HolidayCardError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to regenerate message for card {card_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to regenerate message")

    return RegenerateMessageResponse(clean_message=clean_message)


@router.get("/{occasion_id}/{slug}", response_model=CardViewResponse, summary="View a card by its share link")
async def view_card(
    occasion_id: str,
    slug: str,
    card_service: CardService = Depends(get_card_service)
):
    try:
        card = await card_service.get_card(occasion_id, slug)
    except HolidayCardError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to load card {occasion_id}/{slug}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load card")

    return CardViewResponse(
        id=card.id,
        slug=card.slug,
        occasion=card.occasion_id,
        occasion_name=card.occasion.name,
        vibe=card.vibe,
        clean_message=card.clean_message,
        cover_image_url=card.cover_image_url,
        status=card.status,
        expires_at=card.expires_at,
        style_guide=card.occasion.style_guide or {},
        font_set=card.occasion.font_set or []
    )
