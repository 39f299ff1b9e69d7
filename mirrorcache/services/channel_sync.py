"""
mirrorcache.services.channel_sync — Channels, Threads & DMs
============================================================

Guild channels and threads are cached as :class:`CachedChannel` rows with
their permission overwrites replaced wholesale on every create/update.

DM channels are cached differently: only the pair (channel id, the user on
the other end) is kept.  Working out "the other end" needs the current
user, so a DM event before READY fails with ``CurrentUserMissing``, and a
DM whose recipients are only the current user fails with
``PrivateChannelMissingRecipient``.
"""

from __future__ import annotations

import logging

from mirrorcache.constants import PRIVATE_CHANNEL
from mirrorcache.engine.backend import Backend
from mirrorcache.engine.events import EventType, Handler
from mirrorcache.engine.models import (
    CachedChannel,
    CachedPermissionOverwrite,
    CachedPrivateChannel,
)
from mirrorcache.engine.payloads import ChannelPayload, ThreadListSyncPayload
from mirrorcache.errors import PrivateChannelMissingRecipient
from mirrorcache.services.user_sync import require_current_user

logger = logging.getLogger(__name__)


class ChannelSync:
    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    def handlers(self) -> dict[EventType, Handler]:
        return {
            EventType.CHANNEL_CREATE: self.add_channel,
            EventType.CHANNEL_UPDATE: self.add_channel,
            EventType.CHANNEL_DELETE: self.remove_channel,
            EventType.THREAD_CREATE: self.add_channel,
            EventType.THREAD_UPDATE: self.add_channel,
            EventType.THREAD_DELETE: self.remove_channel,
            EventType.THREAD_LIST_SYNC: self.on_thread_list_sync,
        }

    # -----------------------------------------------------------------------
    # Create / update
    # -----------------------------------------------------------------------
    async def add_channel(self, channel: ChannelPayload, guild_id: int | None = None) -> None:
        """Cache a channel.  *guild_id* fills in for snapshot channels,
        which are sent without one.
        """
        if channel.type == PRIVATE_CHANNEL:
            recipient_id = await self.private_channel_recipient(channel)
            await self.backend.upsert_private_channel(
                CachedPrivateChannel(channel_id=channel.id, recipient_id=recipient_id)
            )
            return

        await self.backend.upsert_channel(CachedChannel.from_payload(channel, guild_id))
        await self.backend.delete_channel_permission_overwrites(channel.id)
        for overwrite in channel.permission_overwrites:
            await self.backend.upsert_permission_overwrite(
                CachedPermissionOverwrite.from_payload(overwrite, channel.id)
            )

    async def private_channel_recipient(self, channel: ChannelPayload) -> int:
        """The first recipient of a DM channel that isn't the current user."""
        current_user = await require_current_user(self.backend)
        for user in channel.recipients:
            if user.id != current_user.id:
                return user.id
        raise PrivateChannelMissingRecipient(channel.id)

    async def on_thread_list_sync(self, sync: ThreadListSyncPayload) -> None:
        for thread in sync.threads:
            await self.add_channel(thread, sync.guild_id)

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------
    async def remove_channel(self, channel: ChannelPayload) -> None:
        if channel.type == PRIVATE_CHANNEL:
            await self.backend.delete_private_channel(channel.id)
            return

        await self.backend.delete_channel_permission_overwrites(channel.id)
        await self.backend.delete_channel(channel.id)

    async def remove_guild_channels(self, guild_id: int) -> None:
        """Delete every channel of a guild along with its overwrites."""
        for channel in await self.backend.list_guild_channels(guild_id):
            await self.backend.delete_channel_permission_overwrites(channel.id)
        await self.backend.delete_guild_channels(guild_id)
