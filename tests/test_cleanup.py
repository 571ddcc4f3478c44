import asyncio
from datetime import timedelta

from conftest import NOW, make_card
from exceptions import StorageError


def _seed(card_repo, object_store):
    cards = [
        make_card("expired-a", NOW - timedelta(days=2)),
        make_card("expired-b", NOW - timedelta(minutes=1)),
        make_card("still-live", NOW + timedelta(days=5)),
    ]
    for card in cards:
        card_repo.cards[card.id] = card
        object_store.objects[f"cards/{card.id}/cover-1.png"] = b"png"
    return cards


def test_sweep_deletes_only_expired_cards(cleanup_service, card_repo, object_store):
    _seed(card_repo, object_store)

    result = asyncio.run(cleanup_service.sweep())

    assert result.total_expired == 2
    assert result.deleted == 2
    assert result.errors == []
    assert result.duration_ms >= 0
    assert list(card_repo.cards) == ["still-live"]
    assert sorted(object_store.deleted) == ["cards/expired-a/cover-1.png", "cards/expired-b/cover-1.png"]
    assert "cards/still-live/cover-1.png" in object_store.objects


def test_sweep_with_nothing_expired(cleanup_service, card_repo):
    card_repo.cards["fresh"] = make_card("fresh", NOW + timedelta(days=1))

    result = asyncio.run(cleanup_service.sweep())

    assert (result.total_expired, result.deleted, result.errors) == (0, 0, [])


def test_storage_failure_does_not_block_row_deletion(cleanup_service, card_repo, object_store):
    _seed(card_repo, object_store)
    object_store.fail_delete = StorageError(cause="bucket unreachable")

    result = asyncio.run(cleanup_service.sweep())

    assert result.deleted == 2
    assert result.errors == []
    assert list(card_repo.cards) == ["still-live"]


def test_database_failure_is_reported_and_sweep_continues(cleanup_service, card_repo, object_store):
    _seed(card_repo, object_store)
    card_repo.fail_delete_for = {"expired-a"}

    result = asyncio.run(cleanup_service.sweep())

    assert result.total_expired == 2
    assert result.deleted == 1
    assert result.errors == [{"card_id": "expired-a", "error": "database is locked"}]
    assert "expired-a" in card_repo.cards
    assert "expired-b" not in card_repo.cards


def test_placeholder_cover_skips_storage(cleanup_service, card_repo, object_store):
    card = make_card("legacy", NOW - timedelta(days=1), cover_image_url="/placeholder-cover.jpg")
    card_repo.cards[card.id] = card

    result = asyncio.run(cleanup_service.sweep())

    assert result.deleted == 1
    assert object_store.deleted == []
