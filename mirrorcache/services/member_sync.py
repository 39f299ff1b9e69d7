"""
mirrorcache.services.member_sync — Members, Roles & Presences
==============================================================

A member's roles are stored as *assignment rows*: copies of the role
definition with ``user_id`` set.  Whenever a member's role list arrives it
replaces the previous assignments outright (delete all, insert one per id).
Every id must resolve to a cached definition; the lookup happens before
anything is deleted, so an unknown role (``MemberRoleMissing``) leaves the
previous assignments in place.

Assignment rows never write to the definition row.  When a definition
changes (GUILD_ROLE_UPDATE) the assignment copies are rewritten from it.

Presences keep one row per (guild, user); activities are replaced on every
presence update.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mirrorcache.engine.backend import Backend
from mirrorcache.engine.events import EventType, Handler
from mirrorcache.engine.models import CachedActivity, CachedMember, CachedPresence, CachedRole
from mirrorcache.engine.payloads import (
    GuildMemberRemovePayload,
    GuildMembersChunkPayload,
    GuildRoleDeletePayload,
    GuildRolePayload,
    MemberPayload,
    PresencePayload,
    RolePayload,
)
from mirrorcache.errors import MemberRoleMissing

logger = logging.getLogger(__name__)


class MemberSync:
    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    def handlers(self) -> dict[EventType, Handler]:
        return {
            EventType.GUILD_MEMBER_ADD: self.on_member_add,
            EventType.GUILD_MEMBER_UPDATE: self.on_member_update,
            EventType.GUILD_MEMBER_REMOVE: self.on_member_remove,
            EventType.GUILD_MEMBERS_CHUNK: self.on_members_chunk,
            EventType.GUILD_ROLE_CREATE: self.on_role_create,
            EventType.GUILD_ROLE_UPDATE: self.on_role_update,
            EventType.GUILD_ROLE_DELETE: self.on_role_delete,
            EventType.PRESENCE_UPDATE: self.on_presence_update,
        }

    # -----------------------------------------------------------------------
    # Role assignments
    # -----------------------------------------------------------------------
    async def _role_definitions(
        self, guild_id: int, user_id: int, role_ids: Iterable[int]
    ) -> list[CachedRole]:
        definitions = []
        for role_id in role_ids:
            role = await self.backend.get_role(role_id)
            if role is None:
                raise MemberRoleMissing(guild_id, user_id, role_id)
            definitions.append(role)
        return definitions

    async def _write_assignments(
        self, guild_id: int, user_id: int, definitions: list[CachedRole]
    ) -> None:
        await self.backend.delete_member_roles(guild_id, user_id)
        for role in definitions:
            await self.backend.upsert_role(role.assign(user_id))

    async def replace_member_roles(
        self, guild_id: int, user_id: int, role_ids: Iterable[int]
    ) -> None:
        """Make *role_ids* exactly the roles a member holds."""
        definitions = await self._role_definitions(guild_id, user_id, role_ids)
        await self._write_assignments(guild_id, user_id, definitions)

    # -----------------------------------------------------------------------
    # Members
    # -----------------------------------------------------------------------
    async def add_member(self, member: MemberPayload, guild_id: int) -> None:
        """Upsert a full member together with its role assignments."""
        definitions = await self._role_definitions(guild_id, member.user.id, member.roles)
        await self.backend.upsert_member(CachedMember.from_payload(member, guild_id))
        await self._write_assignments(guild_id, member.user.id, definitions)

    async def on_member_add(self, member: MemberPayload) -> None:
        await self.add_member(member, member.guild_id)

    async def on_member_update(self, member: MemberPayload) -> None:
        guild_id, user_id = member.guild_id, member.user.id
        cached = await self.backend.get_member(guild_id, user_id)
        if cached is None:
            logger.debug("Skipping update of uncached member %d in guild %d", user_id, guild_id)
            return

        definitions = None
        if member.present("roles"):
            definitions = await self._role_definitions(guild_id, user_id, member.roles)
        await self.backend.upsert_member(cached.update(member))
        if definitions is not None:
            await self._write_assignments(guild_id, user_id, definitions)

    async def on_member_remove(self, removal: GuildMemberRemovePayload) -> None:
        guild_id, user_id = removal.guild_id, removal.user.id
        await self.backend.delete_member_roles(guild_id, user_id)
        await self.backend.delete_user_activities(guild_id, user_id)
        await self.backend.delete_presence(guild_id, user_id)
        await self.backend.delete_member(guild_id, user_id)

    async def on_members_chunk(self, chunk: GuildMembersChunkPayload) -> None:
        for member in chunk.members:
            await self.add_member(member, chunk.guild_id)
        for presence in chunk.presences:
            await self.apply_presence(presence, chunk.guild_id)

    # -----------------------------------------------------------------------
    # Role definitions
    # -----------------------------------------------------------------------
    async def add_role(self, role: RolePayload, guild_id: int) -> CachedRole:
        definition = CachedRole.from_payload(role, guild_id)
        await self.backend.upsert_role(definition)
        return definition

    async def on_role_create(self, event: GuildRolePayload) -> None:
        await self.add_role(event.role, event.guild_id)

    async def refresh_role(self, role: RolePayload, guild_id: int) -> None:
        """Upsert a definition and rewrite the copies its holders carry."""
        definition = await self.add_role(role, guild_id)
        for assignment in await self.backend.list_role_assignments(definition.id):
            await self.backend.upsert_role(definition.assign(assignment.user_id))

    async def remove_role(self, role_id: int) -> None:
        await self.backend.delete_role_assignments(role_id)
        await self.backend.delete_role(role_id)

    async def replace_guild_roles(self, guild_id: int, roles: Iterable[RolePayload]) -> None:
        """Make *roles* exactly the role definitions of a guild.

        Cached roles missing from *roles* are dropped together with their
        assignments; the rest are refreshed in place.
        """
        roles = list(roles)
        keep = {role.id for role in roles}
        for cached in await self.backend.list_guild_roles(guild_id):
            if cached.id not in keep:
                await self.remove_role(cached.id)
        for role in roles:
            await self.refresh_role(role, guild_id)

    async def on_role_update(self, event: GuildRolePayload) -> None:
        await self.refresh_role(event.role, event.guild_id)

    async def on_role_delete(self, event: GuildRoleDeletePayload) -> None:
        await self.remove_role(event.role_id)

    # -----------------------------------------------------------------------
    # Presences
    # -----------------------------------------------------------------------
    async def apply_presence(self, presence: PresencePayload, guild_id: int) -> None:
        user_id = presence.user.id
        await self.backend.upsert_presence(CachedPresence.from_payload(presence, guild_id))
        await self.backend.delete_user_activities(guild_id, user_id)
        for position, activity in enumerate(presence.activities):
            await self.backend.upsert_activity(
                CachedActivity.from_payload(activity, guild_id, user_id, position)
            )

    async def on_presence_update(self, presence: PresencePayload) -> None:
        if presence.guild_id is None:
            # Presences are only cached per guild.
            return
        await self.apply_presence(presence, presence.guild_id)
