"""
Occasion routes
"""
# Standard library imports
import logging
from typing import List

# Third-party imports
from fastapi import APIRouter, HTTPException, Depends

# Local imports
from models import OccasionResponse
from routers.cards import get_card_service
from routers.services.card_service import CardService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/occasions",
    tags=["Occasions"]
)


@router.get("", response_model=List[OccasionResponse], summary="List active occasions")
async def list_occasions(card_service: CardService = Depends(get_card_service)):
    """Occasions a visitor can pick, ordered by name"""
    try:
        occasions = await card_service.list_occasions()
    except Exception as e:
        logger.error(f"Failed to fetch occasions: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch occasions")

    return [OccasionResponse(id=occasion.id, name=occasion.name) for occasion in occasions]
