"""
mirrorcache.services.synchronizer — Event Synchronizer
=======================================================

Turns each gateway event into the ordered backend calls that keep the
cache in step with the remote state.

The work is split across one sub-synchronizer per entity family; each
publishes an ``EventType → coroutine`` table and this class merges them
into a single dispatch table.  Event types without a handler are no-ops.

Concurrency contract: never call :meth:`EventSynchronizer.apply` twice at
once for the same partition (guild, or the user-global stream); different
partitions may run in parallel.  Multi-step sequences are not wrapped in a
transaction, so a failure part-way leaves partial state behind, which the
next GUILD_CREATE snapshot repairs.

Usage::

    sync = EventSynchronizer(SqlBackend(engine))
    await sync.apply(parse_event("GUILD_CREATE", data))
"""

from __future__ import annotations

import logging
from typing import Any

from mirrorcache.engine.backend import Backend
from mirrorcache.engine.events import EventType, GatewayEvent, Handler, parse_event
from mirrorcache.services.channel_sync import ChannelSync
from mirrorcache.services.guild_sync import GuildSync
from mirrorcache.services.member_sync import MemberSync
from mirrorcache.services.message_sync import MessageSync
from mirrorcache.services.user_sync import UserSync

logger = logging.getLogger(__name__)


class EventSynchronizer:
    """Applies gateway events to a :class:`Backend`."""

    def __init__(self, backend: Backend) -> None:
        self.backend = backend
        self.users = UserSync(backend)
        self.channels = ChannelSync(backend)
        self.members = MemberSync(backend)
        self.guilds = GuildSync(backend, self.channels, self.members)
        self.messages = MessageSync(backend)

        self._handlers: dict[EventType, Handler] = {}
        for part in (self.users, self.channels, self.members, self.guilds, self.messages):
            self._handlers.update(part.handlers())

    def handles(self, event_type: EventType) -> bool:
        return event_type in self._handlers

    async def apply(self, event: GatewayEvent) -> None:
        """Apply one event.  Raises a :class:`~mirrorcache.errors.MirrorCacheError`
        subclass on failure.
        """
        handler = self._handlers.get(event.type)
        if handler is None:
            logger.debug("No handler for %s", event.type)
            return
        await handler(event.payload)
        logger.debug("Applied %s (partition %s)", event.type, event.partition)

    async def apply_dispatch(self, name: str, data: dict[str, Any]) -> None:
        """Parse a raw dispatch (``t``, ``d``) and apply it."""
        event = parse_event(name, data)
        if event is not None:
            await self.apply(event)
