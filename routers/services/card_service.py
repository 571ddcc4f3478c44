"""
Card service
Card lifecycle: create a draft, regenerate its cover or message, publish it, view it by share link
"""
# Standard library imports
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession

# Local imports
from exceptions import (
    AlreadyPublished,
    CardExpired,
    GenerationFailed,
    ModerationBlocked,
    NotFound,
    ValidationError,
)
from llm.generation import GenerationClient
from models import VIBES, CardStatus
from moderation import Moderator, moderate
from rate_limit import CreationAllowance, CreationRateLimiter, make_creation_rate_limiter
from storage.models.card import Card
from storage.models.occasion import Occasion
from storage.object_store import ObjectStore, build_cover_key, extract_storage_key, make_object_store
from storage.repositories.card_repository import CardRepository
from storage.repositories.occasion_repository import OccasionRepository
from utils.clock import calculate_expiration, utcnow
from utils.request_identity import generate_creator_hash, get_device_identifier
from utils.slug import generate_slug

logger = logging.getLogger(__name__)

MAX_SLUG_ATTEMPTS = 5


@dataclass
class CreatedCard:
    """A new draft and the quota left after creating it"""
    card: Card
    allowance: CreationAllowance


@dataclass
class PublishedCard:
    card: Card
    deep_link: str


class CardService:
    """Card lifecycle service

    draft -> published is one way; regenerate and publish are refused once published.
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        card_repo: Optional[CardRepository] = None,
        occasion_repo: Optional[OccasionRepository] = None,
        generator: Optional[GenerationClient] = None,
        object_store: Optional[ObjectStore] = None,
        rate_limiter: Optional[CreationRateLimiter] = None,
        moderator: Optional[Moderator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            session: database session, used to build repositories that are not passed in
            card_repo: cards repository
            occasion_repo: occasions repository
            generator: text and image generation client
            object_store: cover image storage
            rate_limiter: IP + device creation limiter
            moderator: message classifier, the heuristic one when None
            clock: naive UTC clock
        """
        self.session = session
        self.card_repo = card_repo or CardRepository(session)
        self.occasion_repo = occasion_repo or OccasionRepository(session)
        self.generator = generator or GenerationClient()
        self.object_store = object_store or make_object_store()
        self.rate_limiter = rate_limiter or make_creation_rate_limiter()
        self.moderator = moderator
        self._clock = clock

    async def list_occasions(self) -> List[Occasion]:
        return await self.occasion_repo.list_active()

    async def create_card(
        self,
        occasion: Optional[str],
        vibe: Optional[str],
        message: Optional[str],
        caller_ip: str = "unknown",
        caller_user_agent: str = "unknown",
    ) -> CreatedCard:
        """
        Create a draft card

        Validate, rate limit, moderate, rewrite the message, generate and
        upload the cover, then persist.

        Args:
            occasion: occasion id
            vibe: warm/funny/fancy/chaotic
            message: visitor's raw message
            caller_ip: resolved client IP
            caller_user_agent: client user agent

        Returns:
            CreatedCard with the draft and both rate limit dimensions

        Raises:
            ValidationError: missing fields, unknown vibe or occasion
            RateLimitExceeded: IP or device window exhausted
            ModerationBlocked: message rejected by moderation
            UpstreamContentBlocked, UpstreamUnavailable, GenerationFailed,
            ConfigurationError, StorageError: generation or upload failed
        """
        if not occasion or not vibe or not message:
            raise ValidationError("Missing required fields: occasion, vibe, message")

        if vibe not in VIBES:
            raise ValidationError(f"Invalid vibe. Must be one of: {', '.join(VIBES)}")

        occasion_row = await self.occasion_repo.get_active(occasion)
        if occasion_row is None:
            raise ValidationError(f"Unknown occasion: {occasion}")

        device_hash = get_device_identifier(caller_ip, caller_user_agent)
        allowance = await self.rate_limiter.check(caller_ip, device_hash)

        verdict = moderate(message, self.moderator)
        if not verdict.allowed:
            raise ModerationBlocked(verdict.reason)

        clean_message = await self.generator.rewrite_text(verdict.cleaned, vibe, occasion_row.name)

        card_id = str(uuid.uuid4())
        slug = await self._allocate_slug()

        image = await self.generator.generate_image(vibe, occasion_row.name)
        cover_key = build_cover_key(card_id)
        cover_image_url = await self.object_store.put(cover_key, image)

        created_at = self._clock()
        try:
            card = await self.card_repo.create(
                id=card_id,
                slug=slug,
                occasion_id=occasion_row.id,
                vibe=vibe,
                original_message=verdict.cleaned,
                clean_message=clean_message,
                cover_image_url=cover_image_url,
                status=CardStatus.DRAFT.value,
                created_at=created_at,
                expires_at=calculate_expiration(created_at),
                creator_hash=generate_creator_hash(caller_ip, caller_user_agent),
            )
        except Exception:
            await self._discard_object(cover_key, card_id)
            raise

        logger.info(f"Card created: id={card.id}, slug={card.slug}, occasion={card.occasion_id}")
        return CreatedCard(card=card, allowance=allowance)

    async def publish_card(self, card_id: str, base_url: str) -> PublishedCard:
        """
        Publish a draft and build its share link

        Args:
            card_id: card id
            base_url: origin the link should point at, usually from the request

        Returns:
            PublishedCard with the deep link {base_url}/c/{occasion}/{slug}
        """
        card = await self._load_draft(card_id)
        card = await self._write_draft(card.id, status=CardStatus.PUBLISHED.value)

        deep_link = f"{base_url.rstrip('/')}/c/{card.occasion_id}/{card.slug}"
        logger.info(f"Card published: id={card.id}, slug={card.slug}")
        return PublishedCard(card=card, deep_link=deep_link)

    async def regenerate_cover(self, card_id: str) -> str:
        """
        Generate a new cover for a draft

        The new object gets a timestamped key; the replaced object is
        deleted once the row points at the new one.

        Returns:
            the new cover URL
        """
        card = await self._load_draft(card_id)
        occasion = await self._load_occasion(card)

        image = await self.generator.generate_image(card.vibe, occasion.name)
        cover_key = build_cover_key(card.id, str(int(time.time() * 1000)))
        cover_image_url = await self.object_store.put(cover_key, image)

        old_key = extract_storage_key(card.cover_image_url)
        try:
            await self._write_draft(card.id, cover_image_url=cover_image_url)
        except Exception:
            await self._discard_object(cover_key, card.id)
            raise

        if old_key and old_key != cover_key:
            await self._discard_object(old_key, card.id)

        logger.info(f"Cover regenerated: id={card.id}, key={cover_key}")
        return cover_image_url

    async def regenerate_message(self, card_id: str, original_message: Optional[str] = None) -> str:
        """
        Rewrite a draft's message again

        Args:
            card_id: card id
            original_message: replacement source text; moderated again before use.
                The stored original is used when omitted, and the current
                message for rows that have none.

        Returns:
            the new message
        """
        card = await self._load_draft(card_id)
        occasion = await self._load_occasion(card)

        updates = {}
        if original_message and original_message.strip():
            verdict = moderate(original_message, self.moderator)
            if not verdict.allowed:
                raise ModerationBlocked(verdict.reason)
            source = verdict.cleaned
            updates["original_message"] = source
        else:
            source = card.original_message or card.clean_message

        clean_message = await self.generator.rewrite_text(source, card.vibe, occasion.name)
        updates["clean_message"] = clean_message
        await self._write_draft(card.id, **updates)

        logger.info(f"Message regenerated: id={card.id}")
        return clean_message

    async def get_card(self, occasion_id: str, slug: str) -> Card:
        """
        Look a card up by its share link

        Raises:
            NotFound: no such card, or its occasion is missing
            CardExpired: the card is past its expiry
        """
        card = await self.card_repo.get_by_occasion_and_slug(occasion_id, slug)
        if card is None or card.occasion is None:
            raise NotFound(cause=f"No card for {occasion_id}/{slug}")

        if self._clock() > card.expires_at:
            raise CardExpired(cause=f"Card {card.id} expired at {card.expires_at.isoformat()}")

        return card

    async def _load_draft(self, card_id: str) -> Card:
        card = await self.card_repo.get_by_id(card_id)
        if card is None:
            raise NotFound(cause=f"Card {card_id} does not exist")
        if card.is_published:
            raise AlreadyPublished(cause=f"Card {card_id} is already published")
        return card

    async def _write_draft(self, card_id: str, **values) -> Card:
        """Apply an update that must only land on a draft"""
        card = await self.card_repo.update_draft(card_id, **values)
        if card is None:
            if await self.card_repo.get_by_id(card_id) is None:
                raise NotFound(cause=f"Card {card_id} does not exist")
            raise AlreadyPublished(cause=f"Card {card_id} was published during the update")
        return card

    async def _load_occasion(self, card: Card) -> Occasion:
        occasion = await self.occasion_repo.get_by_id(card.occasion_id)
        if occasion is None:
            raise NotFound(cause=f"Occasion {card.occasion_id} for card {card.id} does not exist")
        return occasion

    async def _allocate_slug(self) -> str:
        for _ in range(MAX_SLUG_ATTEMPTS):
            slug = generate_slug()
            if not await self.card_repo.slug_exists(slug):
                return slug
        raise GenerationFailed(cause=f"No free slug after {MAX_SLUG_ATTEMPTS} attempts")

    async def _discard_object(self, key: str, card_id: str) -> None:
        """Best-effort delete of a cover that no row points at"""
        try:
            await self.object_store.delete(key)
        except Exception as e:
            logger.warning(f"Failed to delete cover {key} for card {card_id}: {str(e)}")
