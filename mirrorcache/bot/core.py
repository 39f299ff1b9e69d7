"""
mirrorcache.bot.core — Gateway Client
======================================

A :class:`discord.Client` subclass that feeds every gateway dispatch into
the cache.  discord.py keeps the connection alive (identify, heartbeat,
resume, reconnect); with ``enable_debug_events`` it also hands us each
decoded frame through ``on_socket_raw_receive``, before its own parsing.

Dispatch frames (``op == 0``) are parsed into
:class:`~mirrorcache.engine.events.GatewayEvent` objects and submitted to
the :class:`~mirrorcache.services.partitions.PartitionRouter` in arrival
order.  Everything else (heartbeat ACKs, hello, ...) is ignored.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import discord
from pydantic import ValidationError

from mirrorcache.config import MirrorConfig
from mirrorcache.engine.events import parse_event
from mirrorcache.services.partitions import PartitionRouter
from mirrorcache.services.synchronizer import EventSynchronizer

logger = logging.getLogger(__name__)

DISPATCH_OPCODE = 0


def build_intents(cfg: MirrorConfig) -> discord.Intents:
    intents = discord.Intents.default()
    intents.members = cfg.intent_members
    intents.presences = cfg.intent_presences
    intents.message_content = cfg.intent_message_content
    return intents


class MirrorClient(discord.Client):
    """Client that mirrors gateway state into a cache backend.

    Parameters
    ----------
    cfg:
        The parsed :class:`MirrorConfig` from ``config.yaml``.
    synchronizer:
        The :class:`EventSynchronizer` that writes to the backend.
    """

    def __init__(self, cfg: MirrorConfig, synchronizer: EventSynchronizer) -> None:
        super().__init__(intents=build_intents(cfg), enable_debug_events=True)
        self.cfg = cfg
        self.synchronizer = synchronizer
        self.router = PartitionRouter(synchronizer)

    # -----------------------------------------------------------------------
    # Raw gateway frames
    # -----------------------------------------------------------------------
    async def on_socket_raw_receive(self, msg: str) -> None:
        try:
            frame = json.loads(msg)
        except ValueError:
            logger.warning("Dropping undecodable gateway frame (%d bytes)", len(msg))
            return
        if frame.get("op") != DISPATCH_OPCODE:
            return
        self.handle_dispatch(frame.get("t"), frame.get("d") or {})

    def handle_dispatch(self, name: str | None, data: dict[str, Any]) -> None:
        """Parse one dispatch and queue it for its partition."""
        if not name:
            return
        try:
            event = parse_event(name, data)
        except ValidationError as exc:
            logger.warning("Dropping malformed %s payload: %s", name, exc)
            return
        if event is None:
            return
        self.router.submit(event)

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def on_ready(self) -> None:
        assert self.user is not None  # guaranteed after on_ready
        logger.info(
            "Connected as %s (ID: %s), mirroring %d guild(s)",
            self.user.name, self.user.id, len(self.guilds),
        )

    async def close(self) -> None:
        logger.info("Client shutting down…")
        await self.router.close()
        await super().close()
