"""
mirrorcache.services.guild_sync — Guild Snapshots & Guild-Owned Entities
=========================================================================

GUILD_CREATE carries a full snapshot.  Everything the guild owns is cached
first and the guild row last, so once a guild is visible its collections
are complete.  Roles go before members because member role assignments
are copied from the definitions.

A snapshot for a guild that is already cached replaces its channels
(with their overwrites), roles, emojis, stickers and stage instances,
so anything missed while disconnected is dropped.  Members are only
added or refreshed: large guilds send a partial member list.

GUILD_DELETE with ``unavailable = true`` is an outage notice and changes
nothing.  A real delete removes every owned collection, then the guild.
"""

from __future__ import annotations

import logging

from mirrorcache.engine.backend import Backend
from mirrorcache.engine.events import EventType, Handler
from mirrorcache.engine.models import (
    CachedAutoModerationRule,
    CachedBan,
    CachedEmoji,
    CachedGuild,
    CachedStageInstance,
    CachedSticker,
)
from mirrorcache.engine.payloads import (
    AutoModerationRulePayload,
    GuildBanPayload,
    GuildEmojisPayload,
    GuildPayload,
    GuildStickersPayload,
    StageInstancePayload,
    UnavailableGuildPayload,
)
from mirrorcache.services.channel_sync import ChannelSync
from mirrorcache.services.member_sync import MemberSync

logger = logging.getLogger(__name__)


class GuildSync:
    def __init__(self, backend: Backend, channels: ChannelSync, members: MemberSync) -> None:
        self.backend = backend
        self.channels = channels
        self.members = members

    def handlers(self) -> dict[EventType, Handler]:
        return {
            EventType.GUILD_CREATE: self.on_guild_create,
            EventType.GUILD_UPDATE: self.on_guild_update,
            EventType.GUILD_DELETE: self.on_guild_delete,
            EventType.GUILD_EMOJIS_UPDATE: self.on_emojis_update,
            EventType.GUILD_STICKERS_UPDATE: self.on_stickers_update,
            EventType.GUILD_BAN_ADD: self.on_ban_add,
            EventType.GUILD_BAN_REMOVE: self.on_ban_remove,
            EventType.STAGE_INSTANCE_CREATE: self.on_stage_instance,
            EventType.STAGE_INSTANCE_UPDATE: self.on_stage_instance,
            EventType.STAGE_INSTANCE_DELETE: self.on_stage_instance_delete,
            EventType.AUTO_MODERATION_RULE_CREATE: self.on_auto_moderation_rule,
            EventType.AUTO_MODERATION_RULE_UPDATE: self.on_auto_moderation_rule,
            EventType.AUTO_MODERATION_RULE_DELETE: self.on_auto_moderation_rule_delete,
        }

    # -----------------------------------------------------------------------
    # Guild lifecycle
    # -----------------------------------------------------------------------
    async def on_guild_create(self, guild: GuildPayload) -> None:
        if guild.unavailable:
            logger.debug("Guild %d is unavailable, nothing to cache", guild.id)
            return

        await self.members.replace_guild_roles(guild.id, guild.roles)
        await self.channels.remove_guild_channels(guild.id)
        for channel in (*guild.channels, *guild.threads):
            await self.channels.add_channel(channel, guild.id)
        await self.backend.delete_guild_emojis(guild.id)
        for emoji in guild.emojis:
            await self.backend.upsert_emoji(CachedEmoji.from_payload(emoji, guild.id))
        await self.backend.delete_guild_stickers(guild.id)
        for sticker in guild.stickers:
            await self.backend.upsert_sticker(CachedSticker.from_payload(sticker, guild.id))
        for member in guild.members:
            await self.members.add_member(member, guild.id)
        for presence in guild.presences:
            await self.members.apply_presence(presence, guild.id)
        await self.backend.delete_guild_stage_instances(guild.id)
        for stage in guild.stage_instances:
            await self.backend.upsert_stage_instance(CachedStageInstance.from_payload(stage))

        await self.backend.upsert_guild(CachedGuild.from_payload(guild))
        logger.info(
            "Cached guild %s (%d): %d channels, %d roles, %d members",
            guild.name, guild.id, len(guild.channels), len(guild.roles), len(guild.members),
        )

    async def on_guild_update(self, guild: GuildPayload) -> None:
        cached = await self.backend.get_guild(guild.id)
        if cached is None:
            logger.debug("Skipping update of uncached guild %d", guild.id)
            return
        await self.backend.upsert_guild(cached.update(guild))

    async def on_guild_delete(self, guild: UnavailableGuildPayload) -> None:
        if guild.unavailable:
            logger.info("Guild %d became unavailable; keeping cached state", guild.id)
            return

        guild_id = guild.id
        await self.channels.remove_guild_channels(guild_id)
        await self.backend.delete_guild_emojis(guild_id)
        await self.backend.delete_guild_stickers(guild_id)
        await self.backend.delete_guild_roles(guild_id)
        await self.backend.delete_guild_members(guild_id)
        await self.backend.delete_guild_activities(guild_id)
        await self.backend.delete_guild_presences(guild_id)
        await self.backend.delete_guild_stage_instances(guild_id)
        await self.backend.delete_guild_auto_moderation_rules(guild_id)
        await self.backend.delete_guild_bans(guild_id)
        await self.backend.delete_guild(guild_id)
        logger.info("Removed guild %d from the cache", guild_id)

    # -----------------------------------------------------------------------
    # Emojis & stickers (full replace)
    # -----------------------------------------------------------------------
    async def on_emojis_update(self, event: GuildEmojisPayload) -> None:
        await self.backend.delete_guild_emojis(event.guild_id)
        for emoji in event.emojis:
            await self.backend.upsert_emoji(CachedEmoji.from_payload(emoji, event.guild_id))

    async def on_stickers_update(self, event: GuildStickersPayload) -> None:
        await self.backend.delete_guild_stickers(event.guild_id)
        for sticker in event.stickers:
            await self.backend.upsert_sticker(CachedSticker.from_payload(sticker, event.guild_id))

    # -----------------------------------------------------------------------
    # Bans
    # -----------------------------------------------------------------------
    async def on_ban_add(self, event: GuildBanPayload) -> None:
        await self.backend.upsert_ban(CachedBan(guild_id=event.guild_id, user_id=event.user.id))

    async def on_ban_remove(self, event: GuildBanPayload) -> None:
        await self.backend.delete_ban(event.guild_id, event.user.id)

    # -----------------------------------------------------------------------
    # Stage instances & auto-moderation rules
    # -----------------------------------------------------------------------
    async def on_stage_instance(self, stage: StageInstancePayload) -> None:
        await self.backend.upsert_stage_instance(CachedStageInstance.from_payload(stage))

    async def on_stage_instance_delete(self, stage: StageInstancePayload) -> None:
        await self.backend.delete_stage_instance(stage.id)

    async def on_auto_moderation_rule(self, rule: AutoModerationRulePayload) -> None:
        await self.backend.upsert_auto_moderation_rule(CachedAutoModerationRule.from_payload(rule))

    async def on_auto_moderation_rule_delete(self, rule: AutoModerationRulePayload) -> None:
        await self.backend.delete_auto_moderation_rule(rule.id)
