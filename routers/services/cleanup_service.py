"""
Cleanup service
Deletes cards past their expiry together with their cover images
"""
# Standard library imports
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession

# Local imports
from storage.models.card import Card
from storage.object_store import ObjectStore, extract_storage_key, make_object_store
from storage.repositories.card_repository import CardRepository
from utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    total_expired: int = 0
    deleted: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)
    duration_ms: int = 0


class CleanupService:
    """Expiration sweeper

    One bad card never aborts the sweep: storage failures are logged and
    ignored, database failures are recorded and the card is left for the
    next run.
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        card_repo: Optional[CardRepository] = None,
        object_store: Optional[ObjectStore] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.card_repo = card_repo or CardRepository(session)
        self.object_store = object_store or make_object_store()
        self._clock = clock

    async def sweep(self, limit: Optional[int] = None) -> CleanupResult:
        """
        Delete every expired card

        Args:
            limit: max cards handled in this run, all when None

        Returns:
            CleanupResult with totals, per-card errors and duration
        """
        started = time.monotonic()
        result = CleanupResult()

        expired = await self.card_repo.list_expired(self._clock(), limit=limit)
        result.total_expired = len(expired)
        if expired:
            logger.info(f"Found {len(expired)} expired card(s) to clean up")

        for card in expired:
            try:
                await self._delete_card(card)
                result.deleted += 1
                logger.info(f"Deleted expired card: {card.id} (slug: {card.slug})")
            except Exception as e:
                result.errors.append({"card_id": card.id, "error": str(e)})
                logger.error(f"Failed to delete card {card.id}: {str(e)}")

        result.duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"Cleanup finished: expired={result.total_expired}, deleted={result.deleted}, "
            f"errors={len(result.errors)}, duration={result.duration_ms}ms"
        )
        return result

    async def _delete_card(self, card: Card) -> None:
        storage_key = extract_storage_key(card.cover_image_url)
        if storage_key:
            try:
                await self.object_store.delete(storage_key)
            except Exception as e:
                # Already gone or unreachable, the row still goes
                logger.warning(f"Failed to delete image for card {card.id}: {str(e)}")

        await self.card_repo.delete_card(card.id)
