"""
tests/test_message_sync.py — Message & Reaction Synchronization Tests
======================================================================
"""

from __future__ import annotations

import pytest

from factories import (
    GUILD_ID,
    ME_ID,
    OTHER_ID,
    USER_ID,
    apply,
    attachment,
    embed,
    message,
    reaction_event,
    ready,
    run_async,
)
from mirrorcache.engine.models import embed_id
from mirrorcache.errors import CurrentUserMissing


def _rich_message(message_id: int = 50) -> dict:
    return message(
        message_id,
        embeds=[embed("first", fields=[("a", "1"), ("b", "2")]), embed("second")],
        attachments=[attachment(60), attachment(61, "notes.txt")],
        sticker_items=[{"id": "70", "name": "wave", "format_type": 1}],
    )


def _owned_rows(backend, message_id: int = 50) -> dict:
    async def _inner():
        embeds = await backend.list_message_embeds(message_id)
        return {
            "message": await backend.get_message(message_id),
            "embeds": embeds,
            "fields": {e.id: await backend.list_embed_fields(e.id) for e in embeds},
            "attachments": await backend.list_message_attachments(message_id),
            "reactions": await backend.list_message_reactions(message_id),
            "stickers": await backend.list_message_stickers(message_id),
        }

    return run_async(_inner())


# ---------------------------------------------------------------------------
# MESSAGE_CREATE
# ---------------------------------------------------------------------------
class TestMessageCreate:
    def test_create_caches_message_and_owned_rows(self, sync, backend):
        apply(sync, "MESSAGE_CREATE", _rich_message())

        rows = _owned_rows(backend)
        assert rows["message"].content == "hello"
        assert rows["message"].guild_id == GUILD_ID
        assert [e.title for e in rows["embeds"]] == ["first", "second"]
        assert [f.name for f in rows["fields"][embed_id(50, 0)]] == ["a", "b"]
        assert rows["fields"][embed_id(50, 1)] == []
        assert [a.filename for a in rows["attachments"]] == ["file.png", "notes.txt"]
        assert [s.name for s in rows["stickers"]] == ["wave"]

    def test_reapplying_create_does_not_duplicate(self, sync, backend):
        apply(sync, "MESSAGE_CREATE", _rich_message())
        apply(sync, "MESSAGE_CREATE", _rich_message())

        rows = _owned_rows(backend)
        assert len(rows["embeds"]) == 2
        assert len(rows["fields"][embed_id(50, 0)]) == 2
        assert len(rows["attachments"]) == 2

    def test_own_reactions_need_the_current_user(self, sync, backend):
        data = message(50, reactions=[{"count": 2, "me": True, "emoji": {"id": None, "name": "🔥"}}])
        with pytest.raises(CurrentUserMissing):
            apply(sync, "MESSAGE_CREATE", data)
        assert run_async(backend.get_message(50)) is None

    def test_own_reactions_are_recorded_for_current_user(self, sync, backend):
        apply(sync, "READY", ready())
        apply(sync, "MESSAGE_CREATE", message(50, reactions=[
            {"count": 2, "me": True, "emoji": {"id": None, "name": "🔥"}},
            {"count": 1, "me": False, "emoji": {"id": "123", "name": "blob"}},
        ]))

        [reaction] = _owned_rows(backend)["reactions"]
        assert (reaction.user_id, reaction.emoji) == (ME_ID, "🔥")

    def test_reactions_by_others_need_no_current_user(self, sync, backend):
        apply(sync, "MESSAGE_CREATE", message(50, reactions=[
            {"count": 1, "me": False, "emoji": {"id": None, "name": "🔥"}},
        ]))
        assert _owned_rows(backend)["reactions"] == []


# ---------------------------------------------------------------------------
# MESSAGE_UPDATE
# ---------------------------------------------------------------------------
class TestMessageUpdate:
    def test_update_replaces_sent_collections(self, sync, backend):
        apply(sync, "MESSAGE_CREATE", _rich_message())
        apply(sync, "MESSAGE_UPDATE", {
            "id": "50", "channel_id": "10", "guild_id": str(GUILD_ID),
            "content": "edited", "embeds": [embed("only")],
        })

        rows = _owned_rows(backend)
        assert rows["message"].content == "edited"
        assert [e.title for e in rows["embeds"]] == ["only"]
        assert rows["fields"][embed_id(50, 0)] == []
        # Not sent, so left alone.
        assert len(rows["attachments"]) == 2
        assert len(rows["stickers"]) == 1

    def test_update_without_content_keeps_content(self, sync, backend):
        apply(sync, "MESSAGE_CREATE", _rich_message())
        apply(sync, "MESSAGE_UPDATE", {"id": "50", "channel_id": "10", "pinned": True})

        cached = run_async(backend.get_message(50))
        assert cached.pinned is True
        assert cached.content == "hello"

    def test_update_of_uncached_message_is_skipped(self, sync, backend):
        apply(sync, "MESSAGE_UPDATE", {"id": "51", "channel_id": "10", "embeds": [embed("x")]})

        assert run_async(backend.get_message(51)) is None
        assert run_async(backend.list_message_embeds(51)) == []


# ---------------------------------------------------------------------------
# MESSAGE_DELETE / MESSAGE_DELETE_BULK
# ---------------------------------------------------------------------------
class TestMessageDelete:
    def test_delete_removes_every_owned_row(self, sync, backend):
        apply(sync, "MESSAGE_CREATE", _rich_message())
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, USER_ID))
        apply(sync, "MESSAGE_DELETE", {"id": "50", "channel_id": "10", "guild_id": str(GUILD_ID)})

        rows = _owned_rows(backend)
        assert rows["message"] is None
        assert rows["embeds"] == rows["attachments"] == rows["reactions"] == rows["stickers"] == []
        assert run_async(backend.list_embed_fields(embed_id(50, 0))) == []

    def test_bulk_delete(self, sync, backend):
        for message_id in (50, 51, 52):
            apply(sync, "MESSAGE_CREATE", _rich_message(message_id))
        apply(sync, "MESSAGE_DELETE_BULK", {"ids": ["50", "51"], "channel_id": "10"})

        assert _owned_rows(backend, 50)["message"] is None
        assert _owned_rows(backend, 51)["embeds"] == []
        assert _owned_rows(backend, 52)["message"] is not None


# ---------------------------------------------------------------------------
# Reactions
# ---------------------------------------------------------------------------
class TestReactions:
    def test_add_and_remove(self, sync, backend):
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, USER_ID))
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, USER_ID))
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, OTHER_ID))
        assert len(_owned_rows(backend)["reactions"]) == 2

        apply(sync, "MESSAGE_REACTION_REMOVE", reaction_event(50, USER_ID))
        [left] = _owned_rows(backend)["reactions"]
        assert left.user_id == OTHER_ID

    def test_custom_emoji_keyed_by_id(self, sync, backend):
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, USER_ID, "blob", emoji_id=123))
        [reaction] = _owned_rows(backend)["reactions"]
        assert reaction.emoji == "123"

    def test_remove_all(self, sync, backend):
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, USER_ID))
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, OTHER_ID, "🔥"))
        apply(sync, "MESSAGE_REACTION_REMOVE_ALL", {"channel_id": "10", "message_id": "50"})
        assert _owned_rows(backend)["reactions"] == []

    def test_remove_emoji_keeps_other_emojis(self, sync, backend):
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, USER_ID, "👍"))
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, OTHER_ID, "👍"))
        apply(sync, "MESSAGE_REACTION_ADD", reaction_event(50, USER_ID, "🔥"))
        apply(sync, "MESSAGE_REACTION_REMOVE_EMOJI", {
            "channel_id": "10", "message_id": "50", "emoji": {"id": None, "name": "👍"},
        })

        assert [r.emoji for r in _owned_rows(backend)["reactions"]] == ["🔥"]
