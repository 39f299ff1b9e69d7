"""
tests/test_events.py — GatewayEvent Parsing Tests
==================================================
"""

from __future__ import annotations

import inspect

import pytest
from pydantic import ValidationError

from factories import GUILD_ID, channel, dm_channel, guild, message, ready, run_async
from mirrorcache.engine.events import PAYLOAD_MODELS, EventType, GatewayEvent, parse_event
from mirrorcache.engine.payloads import GuildPayload, MessagePayload
from mirrorcache.services.synchronizer import EventSynchronizer


class TestParseEvent:
    def test_unknown_dispatch_name_returns_none(self):
        assert parse_event("SOMETHING_NEW", {}) is None

    def test_known_but_uncached_dispatch_returns_none(self):
        assert parse_event("TYPING_START", {"channel_id": "1"}) is None

    def test_payload_is_validated_and_coerced(self):
        event = parse_event("MESSAGE_CREATE", message(50))
        assert isinstance(event, GatewayEvent)
        assert event.type is EventType.MESSAGE_CREATE
        assert isinstance(event.payload, MessagePayload)
        assert event.payload.id == 50
        assert event.payload.guild_id == GUILD_ID

    def test_unknown_keys_are_ignored(self):
        event = parse_event("GUILD_CREATE", guild(member_count=3, soundboard_sounds=[]))
        assert isinstance(event.payload, GuildPayload)

    def test_malformed_payload_raises(self):
        with pytest.raises(ValidationError):
            parse_event("MESSAGE_CREATE", {"content": "no ids"})


class TestPartition:
    def test_guild_events_partition_by_guild_id(self):
        assert parse_event("GUILD_CREATE", guild()).partition == GUILD_ID
        assert parse_event("GUILD_DELETE", {"id": str(GUILD_ID)}).partition == GUILD_ID
        assert parse_event("CHANNEL_CREATE", channel(10)).partition == GUILD_ID

    def test_user_global_events_have_no_partition(self):
        assert parse_event("READY", ready()).partition is None
        assert parse_event("CHANNEL_CREATE", dm_channel(30, [1, 2])).partition is None
        assert parse_event("MESSAGE_CREATE", message(50, guild_id=None)).partition is None


class TestPresence:
    def test_present_tracks_sent_fields(self):
        payload = parse_event(
            "MESSAGE_UPDATE", {"id": "50", "channel_id": "10", "embeds": []}
        ).payload
        assert payload.present("embeds")
        assert not payload.present("attachments")
        assert not payload.present("content")


class TestDispatchTable:
    def test_every_parsed_event_type_has_a_handler(self, backend):
        sync = EventSynchronizer(backend)
        for event_type in PAYLOAD_MODELS:
            assert sync.handles(event_type), event_type

    def test_handlers_map_event_types_to_coroutines(self, backend):
        sync = EventSynchronizer(backend)
        for part in (sync.users, sync.channels, sync.members, sync.guilds, sync.messages):
            for event_type, handler in part.handlers().items():
                assert isinstance(event_type, EventType)
                assert inspect.iscoroutinefunction(handler), event_type

    def test_uncached_event_types_have_no_handler(self, backend):
        sync = EventSynchronizer(backend)
        assert not sync.handles(EventType.TYPING_START)
        assert not sync.handles(EventType.VOICE_STATE_UPDATE)

    def test_apply_dispatch_parses_and_applies(self, sync, backend):
        run_async(sync.apply_dispatch("GUILD_CREATE", guild()))
        run_async(sync.apply_dispatch("TYPING_START", {"channel_id": "10"}))
        assert run_async(backend.get_guild(GUILD_ID)) is not None
