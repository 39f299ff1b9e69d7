"""
mirrorcache.engine.permissions — Permission Resolver
=====================================================

Computes a user's effective permissions from cached data only.

Resolution order:

  1. Guild owner                          → every permission
  2. @everyone role bits | assigned role bits = base
  3. ADMINISTRATOR in base                → every permission
  4. Channel overwrites, each step "deny then allow":
       a. the @everyone overwrite (id = guild id)
       b. the union of the member's role overwrites
       c. the member's own overwrite
     A thread takes the overwrites of its parent channel.  The channel
     must belong to the guild being resolved (``ChannelNotInGuild``).
  5. Member timed out                     → keep only VIEW_CHANNEL and
                                            READ_MESSAGE_HISTORY

Missing cache entries raise a
:class:`~mirrorcache.errors.MissingPrerequisite` subclass; a timeout
timestamp that doesn't parse raises
:class:`~mirrorcache.errors.BadTimeoutTimestamp`.  Resolution only reads,
so any number of calls may run concurrently.

Usage::

    resolver = PermissionResolver(backend)
    perms = await resolver.channel_permissions(user_id, channel_id)
    if perms.send_messages:
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import discord

from mirrorcache.constants import (
    ADMINISTRATOR,
    ALL_PERMISSIONS,
    THREAD_CHANNELS,
    TIMEOUT_ALLOWED,
    OverwriteKind,
)
from mirrorcache.engine.backend import Backend
from mirrorcache.engine.models import CachedChannel
from mirrorcache.errors import (
    ChannelMissing,
    ChannelNotInGuild,
    CurrentUserMissing,
    EveryoneRoleMissing,
    GuildMissing,
    MemberMissing,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PermissionResolver:
    """Reads guilds, roles, members and overwrites through a :class:`Backend`."""

    def __init__(self, backend: Backend, clock: Callable[[], datetime] | None = None) -> None:
        self.backend = backend
        self._clock = clock or _utcnow

    async def resolve(
        self, user_id: int, guild_id: int, channel_id: int | None = None
    ) -> discord.Permissions:
        """Permissions of *user_id* in a guild, or in one of its channels."""
        guild = await self.backend.get_guild(guild_id)
        if guild is None:
            raise GuildMissing(guild_id)

        everyone = await self.backend.get_role(guild_id)
        if everyone is None:
            raise EveryoneRoleMissing(guild_id)

        if user_id == guild.owner_id:
            return discord.Permissions(ALL_PERMISSIONS)

        member = await self.backend.get_member(guild_id, user_id)
        if member is None:
            raise MemberMissing(guild_id, user_id)

        role_ids: set[int] = set()
        permissions = everyone.permissions
        for assignment in await self.backend.list_member_roles(guild_id, user_id):
            role_ids.add(assignment.id)
            definition = await self.backend.get_role(assignment.id)
            permissions |= (definition or assignment).permissions

        if permissions & ADMINISTRATOR:
            return discord.Permissions(ALL_PERMISSIONS)

        if channel_id is not None:
            source_id = await self._overwrite_source(guild_id, channel_id)
            permissions = await self._apply_overwrites(
                permissions, guild_id, user_id, source_id, role_ids
            )

        if not permissions & ADMINISTRATOR and member.communication_disabled(self._clock()):
            permissions &= TIMEOUT_ALLOWED

        return discord.Permissions(permissions)

    async def _overwrite_source(self, guild_id: int, channel_id: int) -> int:
        """Id of the channel whose overwrites apply to *channel_id*.

        Threads carry no overwrites of their own; their parent's apply.
        """
        channel = await self.backend.get_channel(channel_id)
        if channel is None:
            raise ChannelMissing(channel_id)
        if channel.guild_id != guild_id:
            raise ChannelNotInGuild(channel_id, guild_id)
        if channel.kind not in THREAD_CHANNELS:
            return channel_id

        if channel.parent_id is None or await self.backend.get_channel(channel.parent_id) is None:
            raise ChannelMissing(channel.parent_id or channel_id)
        return channel.parent_id

    async def _apply_overwrites(
        self, permissions: int, guild_id: int, user_id: int, channel_id: int, role_ids: set[int]
    ) -> int:
        everyone_allow = everyone_deny = 0
        role_allow = role_deny = 0
        member_allow = member_deny = 0

        for overwrite in await self.backend.list_channel_permission_overwrites(channel_id):
            if overwrite.kind == OverwriteKind.ROLE:
                if overwrite.id == guild_id:
                    everyone_allow, everyone_deny = overwrite.allow, overwrite.deny
                elif overwrite.id in role_ids:
                    role_allow |= overwrite.allow
                    role_deny |= overwrite.deny
            elif overwrite.id == user_id:
                member_allow, member_deny = overwrite.allow, overwrite.deny

        for allow, deny in (
            (everyone_allow, everyone_deny),
            (role_allow, role_deny),
            (member_allow, member_deny),
        ):
            permissions = (permissions & ~deny) | allow
        return permissions

    # -----------------------------------------------------------------------
    # Convenience forms
    # -----------------------------------------------------------------------
    async def guild_permissions(self, user_id: int, guild_id: int) -> discord.Permissions:
        return await self.resolve(user_id, guild_id)

    async def channel_permissions(self, user_id: int, channel_id: int) -> discord.Permissions:
        """Like :meth:`resolve`, with the guild taken from the cached channel."""
        channel = await self._guild_channel(channel_id)
        return await self.resolve(user_id, channel.guild_id, channel_id)

    async def self_guild_permissions(self, guild_id: int) -> discord.Permissions:
        return await self.resolve(await self._current_user_id(), guild_id)

    async def self_channel_permissions(self, channel_id: int) -> discord.Permissions:
        return await self.channel_permissions(await self._current_user_id(), channel_id)

    async def _guild_channel(self, channel_id: int) -> CachedChannel:
        channel = await self.backend.get_channel(channel_id)
        if channel is None:
            raise ChannelMissing(channel_id)
        if channel.guild_id is None:
            raise ChannelNotInGuild(channel_id)
        return channel

    async def _current_user_id(self) -> int:
        user = await self.backend.get_current_user()
        if user is None:
            raise CurrentUserMissing()
        return user.id
