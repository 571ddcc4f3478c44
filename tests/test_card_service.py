import asyncio
from datetime import timedelta

import pytest

from conftest import NOW, STORE_BASE_URL, make_card
from exceptions import (
    AlreadyPublished,
    CardExpired,
    ConfigurationError,
    ModerationBlocked,
    NotFound,
    RateLimitExceeded,
    StorageError,
    UpstreamUnavailable,
    ValidationError,
)
from moderation import ModerationReason, ModerationVerdict
from routers.services.card_service import CardService

IP = "203.0.113.7"
UA = "Mozilla/5.0 (X11; Linux x86_64)"


def _create(card_service, message="Happy holidays!", occasion="christmas", vibe="warm", ip=IP):
    return asyncio.run(card_service.create_card(occasion, vibe, message, ip, UA))


def test_create_card_end_to_end(card_service, card_repo, object_store, generator):
    created = _create(card_service)
    card = created.card

    assert card.status == "draft"
    assert card.clean_message == "Wishing you a cozy, glowing holiday season!"
    assert card.original_message == "Happy holidays!"
    assert card.occasion_id == "christmas"
    assert card.vibe == "warm"
    assert card.expires_at == NOW + timedelta(days=30)
    assert len(card.slug) == 6
    assert len(card.creator_hash) == 16
    assert card.cover_image_url == f"{STORE_BASE_URL}/cards/{card.id}/cover-1.png"
    assert f"cards/{card.id}/cover-1.png" in object_store.objects
    assert card_repo.cards[card.id] is card

    generator.rewrite_text.assert_awaited_once_with("Happy holidays!", "warm", "Christmas")
    generator.generate_image.assert_awaited_once_with("warm", "Christmas")

    assert (created.allowance.ip.limit, created.allowance.ip.remaining) == (10, 9)
    assert (created.allowance.device.limit, created.allowance.device.remaining) == (3, 2)


def test_create_card_rewrites_scrubbed_text(card_service, generator):
    created = _create(card_service, message="Merry Christmas! Email me at elf@northpole.com")

    source = generator.rewrite_text.await_args.args[0]
    assert "elf@northpole.com" not in source
    assert "[email removed]" in source
    assert created.card.original_message == source


@pytest.mark.parametrize("occasion, vibe, message", [
    (None, "warm", "Happy holidays!"),
    ("christmas", None, "Happy holidays!"),
    ("christmas", "warm", ""),
    ("christmas", "grumpy", "Happy holidays!"),
    ("arbor-day", "warm", "Happy holidays!"),
    ("easter", "warm", "Happy holidays!"),
])
def test_invalid_input_fails_before_rate_limit(card_service, rate_limit_store, generator, occasion, vibe, message):
    with pytest.raises(ValidationError):
        _create(card_service, message=message, occasion=occasion, vibe=vibe)

    assert asyncio.run(rate_limit_store.size()) == 0
    generator.rewrite_text.assert_not_awaited()


def test_moderation_rejection_skips_generation(card_service, card_repo, generator):
    with pytest.raises(ModerationBlocked) as exc_info:
        _create(card_service, message="John stole the money from the office party")

    assert exc_info.value.reason is ModerationReason.DEFAMATORY
    assert exc_info.value.status_code == 400
    generator.rewrite_text.assert_not_awaited()
    assert card_repo.cards == {}


def test_pluggable_moderator(card_repo, occasion_repo, generator, object_store, rate_limiter):
    class TooCheerful:
        def classify(self, text):
            return ModerationVerdict(False, text, ModerationReason.INAPPROPRIATE)

    service = CardService(
        card_repo=card_repo,
        occasion_repo=occasion_repo,
        generator=generator,
        object_store=object_store,
        rate_limiter=rate_limiter,
        moderator=TooCheerful(),
        clock=lambda: NOW,
    )

    with pytest.raises(ModerationBlocked):
        _create(service)


def test_device_limit_is_enforced(card_service):
    for _ in range(3):
        _create(card_service)

    with pytest.raises(RateLimitExceeded) as exc_info:
        _create(card_service)

    assert exc_info.value.dimension == "device"
    assert exc_info.value.remaining == 0


def test_ip_limit_is_enforced_across_devices(card_service):
    for n in range(10):
        asyncio.run(card_service.create_card("christmas", "warm", "Happy holidays!", IP, f"agent-{n}"))

    with pytest.raises(RateLimitExceeded) as exc_info:
        asyncio.run(card_service.create_card("christmas", "warm", "Happy holidays!", IP, "agent-new"))

    assert exc_info.value.dimension == "ip"


def test_image_failure_aborts_creation(card_service, card_repo, generator):
    generator.generate_image.side_effect = UpstreamUnavailable(cause="Failed to generate cover image after 3 attempts")

    with pytest.raises(UpstreamUnavailable):
        _create(card_service)

    assert card_repo.cards == {}


def test_storage_misconfiguration_aborts_creation(card_service, card_repo, object_store):
    object_store.fail_put = ConfigurationError(cause="Storage bucket does not exist")

    with pytest.raises(ConfigurationError):
        _create(card_service)

    assert card_repo.cards == {}


def test_failed_insert_removes_uploaded_cover(card_service, card_repo, object_store):
    card_repo.fail_create = RuntimeError("duplicate entry")

    with pytest.raises(RuntimeError):
        _create(card_service)

    assert object_store.objects == {}
    assert len(object_store.deleted) == 1


def test_publish_builds_deep_link_and_is_one_way(card_service):
    card = _create(card_service).card

    published = asyncio.run(card_service.publish_card(card.id, "https://cards.example.com/"))

    assert published.card.status == "published"
    assert published.deep_link == f"https://cards.example.com/c/christmas/{card.slug}"

    with pytest.raises(AlreadyPublished):
        asyncio.run(card_service.publish_card(card.id, "https://cards.example.com"))


def test_publish_unknown_card(card_service):
    with pytest.raises(NotFound):
        asyncio.run(card_service.publish_card("missing", "https://cards.example.com"))


def test_regenerate_on_published_card_changes_nothing(card_service, generator):
    card = _create(card_service).card
    asyncio.run(card_service.publish_card(card.id, "https://cards.example.com"))
    generator.rewrite_text.reset_mock()
    generator.generate_image.reset_mock()
    before = (card.clean_message, card.cover_image_url)

    with pytest.raises(AlreadyPublished):
        asyncio.run(card_service.regenerate_cover(card.id))
    with pytest.raises(AlreadyPublished):
        asyncio.run(card_service.regenerate_message(card.id))

    assert (card.clean_message, card.cover_image_url) == before
    generator.rewrite_text.assert_not_awaited()
    generator.generate_image.assert_not_awaited()


def test_publish_during_cover_generation_keeps_published_cover(card_service, generator, object_store):
    card = _create(card_service).card
    before = card.cover_image_url
    image = generator.generate_image.return_value

    async def publish_then_draw(vibe, occasion_name):
        await card_service.publish_card(card.id, "https://cards.example.com")
        return image

    generator.generate_image.side_effect = publish_then_draw

    with pytest.raises(AlreadyPublished):
        asyncio.run(card_service.regenerate_cover(card.id))

    assert card.status == "published"
    assert card.cover_image_url == before
    assert list(object_store.objects) == [f"cards/{card.id}/cover-1.png"]
    assert f"cards/{card.id}/cover-1.png" not in object_store.deleted


def test_publish_during_message_rewrite_keeps_published_message(card_service, generator):
    card = _create(card_service).card
    before = card.clean_message

    async def publish_then_rewrite(text, vibe, occasion_name):
        await card_service.publish_card(card.id, "https://cards.example.com")
        return "Too late for this one"

    generator.rewrite_text.side_effect = publish_then_rewrite

    with pytest.raises(AlreadyPublished):
        asyncio.run(card_service.regenerate_message(card.id))

    assert card.status == "published"
    assert card.clean_message == before


def test_second_publish_racing_the_first_is_refused(card_service, card_repo):
    card = _create(card_service).card

    async def published_elsewhere(card_id, **values):
        card_repo.cards[card_id].status = "published"
        return None

    card_repo.update_draft = published_elsewhere

    with pytest.raises(AlreadyPublished):
        asyncio.run(card_service.publish_card(card.id, "https://cards.example.com"))


def test_regenerate_cover_replaces_object(card_service, object_store):
    card = _create(card_service).card
    old_key = f"cards/{card.id}/cover-1.png"

    new_url = asyncio.run(card_service.regenerate_cover(card.id))

    assert new_url != f"{STORE_BASE_URL}/{old_key}"
    assert new_url.startswith(f"{STORE_BASE_URL}/cards/{card.id}/cover-")
    assert card.cover_image_url == new_url
    assert old_key in object_store.deleted
    assert old_key not in object_store.objects


def test_regenerate_cover_failure_keeps_old_cover(card_service, generator):
    card = _create(card_service).card
    before = card.cover_image_url
    generator.generate_image.side_effect = StorageError(cause="boom")

    with pytest.raises(StorageError):
        asyncio.run(card_service.regenerate_cover(card.id))

    assert card.cover_image_url == before


def test_regenerate_message_uses_stored_original(card_service, generator):
    card = _create(card_service).card
    generator.rewrite_text.return_value = "A brand new twinkly greeting!"

    message = asyncio.run(card_service.regenerate_message(card.id))

    assert message == "A brand new twinkly greeting!"
    assert card.clean_message == message
    assert generator.rewrite_text.await_args.args == ("Happy holidays!", "warm", "Christmas")


def test_regenerate_message_falls_back_to_clean_message(card_service, card_repo, generator):
    card = make_card("legacy-card-id", NOW + timedelta(days=3))
    card.original_message = None
    card_repo.cards[card.id] = card

    asyncio.run(card_service.regenerate_message(card.id))

    assert generator.rewrite_text.await_args.args[0] == "Wishing you a cozy season."


def test_regenerate_message_moderates_supplied_text(card_service, generator):
    card = _create(card_service).card
    before = card.clean_message

    with pytest.raises(ModerationBlocked):
        asyncio.run(card_service.regenerate_message(card.id, "Go to hell"))

    assert card.clean_message == before
    assert card.original_message == "Happy holidays!"

    asyncio.run(card_service.regenerate_message(card.id, "Season's greetings to the whole team"))

    assert generator.rewrite_text.await_args.args[0] == "Season's greetings to the whole team"
    assert card.original_message == "Season's greetings to the whole team"


def test_get_card_by_share_link(card_service):
    card = _create(card_service).card

    found = asyncio.run(card_service.get_card("christmas", card.slug))

    assert found is card
    assert found.occasion.name == "Christmas"


def test_get_card_wrong_occasion_is_not_found(card_service):
    card = _create(card_service).card

    with pytest.raises(NotFound):
        asyncio.run(card_service.get_card("hanukkah", card.slug))


def test_get_expired_card(card_service, card_repo):
    card = make_card("expired-card-id", NOW - timedelta(seconds=1))
    card_repo.cards[card.id] = card

    with pytest.raises(CardExpired) as exc_info:
        asyncio.run(card_service.get_card("christmas", card.slug))

    assert exc_info.value.status_code == 410


def test_list_occasions_only_active_sorted(card_service):
    occasions = asyncio.run(card_service.list_occasions())

    assert [occasion.id for occasion in occasions] == ["christmas", "hanukkah"]
