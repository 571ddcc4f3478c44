import os

# Settings are read at import time
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("STORAGE_BUCKET_NAME", "holiday-test")
os.environ.setdefault("STORAGE_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("STORAGE_SECRET_ACCESS_KEY", "test-secret-key")
os.environ.setdefault("STORAGE_ENDPOINT", "https://storage.example.com")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("CLEANUP_AUTH_TOKEN", "")
os.environ.setdefault("APP_URL", "https://cards.example.com")

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from rate_limit import CreationRateLimiter, InMemoryRateLimitStore, RateLimiter
from routers.services.card_service import CardService
from routers.services.cleanup_service import CleanupService
from storage.models import Card, Occasion

NOW = datetime(2025, 12, 1, 12, 0, 0)
STORE_BASE_URL = "https://storage.example.com/holiday-test"


class FakeOccasionRepository:
    def __init__(self, occasions=None):
        self.occasions = {occasion.id: occasion for occasion in occasions or []}

    async def get_by_id(self, id):
        return self.occasions.get(id)

    async def get_active(self, occasion_id):
        occasion = self.occasions.get(occasion_id)
        return occasion if occasion is not None and occasion.is_active else None

    async def list_active(self):
        return sorted(
            (occasion for occasion in self.occasions.values() if occasion.is_active),
            key=lambda occasion: occasion.name,
        )


class FakeCardRepository:
    def __init__(self, occasion_repo=None):
        self.cards = {}
        self.occasion_repo = occasion_repo or FakeOccasionRepository()
        self.fail_create = None
        self.fail_delete_for = set()

    async def get_by_id(self, id):
        return self.cards.get(id)

    async def create(self, **kwargs):
        if self.fail_create is not None:
            raise self.fail_create
        card = Card(**kwargs)
        self.cards[card.id] = card
        return card

    async def update_by_id(self, id, **kwargs):
        card = self.cards.get(id)
        if card is None:
            return None
        for key, value in kwargs.items():
            setattr(card, key, value)
        return card

    async def update_draft(self, card_id, **values):
        card = self.cards.get(card_id)
        if card is None or card.status != "draft":
            return None
        return await self.update_by_id(card_id, **values)

    async def slug_exists(self, slug):
        return any(card.slug == slug for card in self.cards.values())

    async def get_by_occasion_and_slug(self, occasion_id, slug):
        for card in self.cards.values():
            if card.occasion_id == occasion_id and card.slug == slug:
                card.occasion = self.occasion_repo.occasions.get(occasion_id)
                return card
        return None

    async def list_expired(self, now, limit=None):
        expired = sorted(
            (card for card in self.cards.values() if card.expires_at < now),
            key=lambda card: card.expires_at,
        )
        return expired[:limit] if limit else expired

    async def delete_card(self, card_id):
        if card_id in self.fail_delete_for:
            raise RuntimeError("database is locked")
        return self.cards.pop(card_id, None) is not None


class FakeObjectStore:
    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_put = None
        self.fail_delete = None

    async def put(self, key, data, content_type="image/png"):
        if self.fail_put is not None:
            raise self.fail_put
        self.objects[key] = data
        return f"{STORE_BASE_URL}/{key}"

    async def delete(self, key):
        if self.fail_delete is not None:
            raise self.fail_delete
        self.deleted.append(key)
        self.objects.pop(key, None)


def make_occasion(occasion_id="christmas", name="Christmas", is_active=True):
    return Occasion(
        id=occasion_id,
        name=name,
        is_active=is_active,
        style_guide={"color_palette": ["#C8102E", "#006B3C"], "motifs": ["trees"], "tone": "festive"},
        font_set=["Playfair Display", "Montserrat"],
    )


def make_card(card_id, expires_at, slug=None, cover_image_url=None, status="draft", occasion_id="christmas"):
    return Card(
        id=card_id,
        slug=slug or card_id[:6],
        occasion_id=occasion_id,
        vibe="warm",
        original_message="Happy holidays!",
        clean_message="Wishing you a cozy season.",
        cover_image_url=cover_image_url or f"{STORE_BASE_URL}/cards/{card_id}/cover-1.png",
        theme_version="1.0",
        status=status,
        created_at=expires_at - timedelta(days=30),
        expires_at=expires_at,
        creator_hash="0123456789abcdef",
    )


@pytest.fixture
def occasion_repo():
    return FakeOccasionRepository([
        make_occasion(),
        make_occasion("hanukkah", "Hanukkah"),
        make_occasion("easter", "Easter", is_active=False),
    ])


@pytest.fixture
def card_repo(occasion_repo):
    return FakeCardRepository(occasion_repo)


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def generator():
    generator = MagicMock()
    generator.rewrite_text = AsyncMock(return_value="Wishing you a cozy, glowing holiday season!")
    generator.generate_image = AsyncMock(return_value=b"\x89PNG\r\n\x1a\nfake")
    return generator


@pytest.fixture
def rate_limit_store():
    return InMemoryRateLimitStore()


@pytest.fixture
def rate_limiter(rate_limit_store):
    return CreationRateLimiter(
        RateLimiter(rate_limit_store, clock=lambda: 1_764_590_400_000),
        ip_max=10,
        device_max=3,
        window_ms=24 * 60 * 60 * 1000,
    )


@pytest.fixture
def card_service(card_repo, occasion_repo, generator, object_store, rate_limiter):
    return CardService(
        card_repo=card_repo,
        occasion_repo=occasion_repo,
        generator=generator,
        object_store=object_store,
        rate_limiter=rate_limiter,
        clock=lambda: NOW,
    )


@pytest.fixture
def cleanup_service(card_repo, object_store):
    return CleanupService(card_repo=card_repo, object_store=object_store, clock=lambda: NOW)
