"""
tests/test_bot.py — Gateway Client Bridge Tests
================================================
Feeds raw gateway frames to MirrorClient and checks what reaches the
partition router.  No connection to Discord is made.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

from factories import GUILD_ID, channel, message, run_async
from mirrorcache.bot.core import MirrorClient, build_intents
from mirrorcache.config import MirrorConfig
from mirrorcache.engine.events import EventType
from mirrorcache.services.partitions import PartitionRouter


def _make_client(cfg: MirrorConfig | None = None) -> MirrorClient:
    client = MirrorClient(cfg or MirrorConfig(), MagicMock())
    client.router = MagicMock(spec=PartitionRouter)
    return client


def _frame(op: int, name: str | None = None, data: dict | None = None) -> str:
    return json.dumps({"op": op, "t": name, "s": 1, "d": data})


def _feed(client: MirrorClient, *frames: str) -> None:
    async def _inner():
        for raw in frames:
            await client.on_socket_raw_receive(raw)

    run_async(_inner())


def _submitted(client: MirrorClient) -> list:
    return [c.args[0] for c in client.router.submit.call_args_list]


class TestBuildIntents:
    def test_privileged_intents_follow_config(self):
        intents = build_intents(MirrorConfig(intent_presences=False))
        assert intents.members is True
        assert intents.presences is False
        assert intents.message_content is True
        assert intents.guilds is True


class TestRawFrames:
    def test_dispatch_is_parsed_and_submitted(self):
        client = _make_client()
        _feed(client, _frame(0, "MESSAGE_CREATE", message(50)))

        [submitted] = _submitted(client)
        assert submitted.type is EventType.MESSAGE_CREATE
        assert submitted.partition == GUILD_ID

    def test_frames_are_submitted_in_arrival_order(self):
        client = _make_client()
        _feed(
            client,
            _frame(0, "CHANNEL_CREATE", channel(10)),
            _frame(0, "MESSAGE_CREATE", message(50)),
            _frame(0, "CHANNEL_DELETE", channel(10)),
        )
        assert [e.type for e in _submitted(client)] == [
            EventType.CHANNEL_CREATE, EventType.MESSAGE_CREATE, EventType.CHANNEL_DELETE,
        ]

    def test_non_dispatch_frames_are_ignored(self):
        client = _make_client()
        _feed(client, _frame(11), _frame(10, data={"heartbeat_interval": 41250}))
        client.router.submit.assert_not_called()

    def test_unhandled_dispatch_is_ignored(self):
        client = _make_client()
        _feed(client, _frame(0, "TYPING_START", {"channel_id": "10"}), _frame(0, "BRAND_NEW", {}))
        client.router.submit.assert_not_called()

    def test_malformed_payload_is_dropped(self):
        client = _make_client()
        _feed(client, _frame(0, "MESSAGE_CREATE", {"content": "no ids"}))
        client.router.submit.assert_not_called()

    def test_undecodable_frame_is_dropped(self):
        client = _make_client()
        _feed(client, "{not json")
        client.router.submit.assert_not_called()
