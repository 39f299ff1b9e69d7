"""
mirrorcache.engine.backend — Storage Port
==========================================

The abstract storage interface the synchronizer and the permission
resolver depend on.  Every entity gets the same group of operations:

* ``upsert_<entity>`` — insert, or fully replace the row with the same key.
  Never fails on an existing key.
* ``delete_<entity>`` — delete by key.  Deleting a missing key is a no-op.
* ``delete_<parent>_<entities>`` — delete every child of a parent in one
  call; expected to be atomic, or at least monotonic.
* ``get_<entity>`` — ``None`` when absent.
* ``list_<parent>_<entities>`` — all children of a parent.

Implementations report storage failures as
:class:`~mirrorcache.errors.BackendError`.  Nothing in the core catches it.

Role rows come in two flavours sharing one shape: the guild-level
definition (``user_id is None``) and a member's assignment of it
(``user_id`` set).  ``get_role`` and ``list_guild_roles`` only ever see
definitions; ``list_member_roles`` and ``list_role_assignments`` only see
assignments.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mirrorcache.engine.models import (
    CachedActivity,
    CachedAttachment,
    CachedAutoModerationRule,
    CachedBan,
    CachedChannel,
    CachedEmbed,
    CachedEmbedField,
    CachedEmoji,
    CachedGuild,
    CachedMember,
    CachedMessage,
    CachedMessageSticker,
    CachedPermissionOverwrite,
    CachedPresence,
    CachedPrivateChannel,
    CachedReaction,
    CachedRole,
    CachedStageInstance,
    CachedSticker,
    CurrentUser,
)


class Backend(ABC):
    """Port for cache persistence, implemented by a storage layer."""

    # -- current user -------------------------------------------------------
    @abstractmethod
    async def set_current_user(self, user: CurrentUser) -> None:
        """Store the logged-in account, replacing any previous one."""
        ...

    @abstractmethod
    async def get_current_user(self) -> CurrentUser | None:
        """The logged-in account, or ``None`` before READY."""
        ...

    # -- guilds -------------------------------------------------------------
    @abstractmethod
    async def upsert_guild(self, guild: CachedGuild) -> None: ...

    @abstractmethod
    async def delete_guild(self, guild_id: int) -> None: ...

    @abstractmethod
    async def get_guild(self, guild_id: int) -> CachedGuild | None: ...

    # -- channels -----------------------------------------------------------
    @abstractmethod
    async def upsert_channel(self, channel: CachedChannel) -> None: ...

    @abstractmethod
    async def delete_channel(self, channel_id: int) -> None: ...

    @abstractmethod
    async def get_channel(self, channel_id: int) -> CachedChannel | None: ...

    @abstractmethod
    async def list_guild_channels(self, guild_id: int) -> list[CachedChannel]: ...

    @abstractmethod
    async def delete_guild_channels(self, guild_id: int) -> None:
        """Delete every channel and thread of a guild."""
        ...

    # -- private channels ---------------------------------------------------
    @abstractmethod
    async def upsert_private_channel(self, channel: CachedPrivateChannel) -> None: ...

    @abstractmethod
    async def delete_private_channel(self, channel_id: int) -> None:
        """Delete the DM channel row(s) with this channel id."""
        ...

    @abstractmethod
    async def get_private_channel(self, recipient_id: int) -> CachedPrivateChannel | None:
        """The DM channel with *recipient_id*, if one is cached."""
        ...

    # -- permission overwrites ----------------------------------------------
    @abstractmethod
    async def upsert_permission_overwrite(
        self, overwrite: CachedPermissionOverwrite
    ) -> None: ...

    @abstractmethod
    async def delete_permission_overwrite(self, channel_id: int, target_id: int) -> None: ...

    @abstractmethod
    async def list_channel_permission_overwrites(
        self, channel_id: int
    ) -> list[CachedPermissionOverwrite]: ...

    @abstractmethod
    async def delete_channel_permission_overwrites(self, channel_id: int) -> None: ...

    # -- roles --------------------------------------------------------------
    @abstractmethod
    async def upsert_role(self, role: CachedRole) -> None:
        """Upsert a definition or an assignment row, keyed by (id, user_id)."""
        ...

    @abstractmethod
    async def delete_role(self, role_id: int) -> None:
        """Delete a role definition.  Assignment rows are left alone."""
        ...

    @abstractmethod
    async def get_role(self, role_id: int) -> CachedRole | None:
        """A role definition."""
        ...

    @abstractmethod
    async def list_guild_roles(self, guild_id: int) -> list[CachedRole]:
        """Role definitions of a guild."""
        ...

    @abstractmethod
    async def delete_guild_roles(self, guild_id: int) -> None:
        """Delete the role definitions *and* assignment rows of a guild."""
        ...

    @abstractmethod
    async def list_member_roles(self, guild_id: int, user_id: int) -> list[CachedRole]:
        """Assignment rows held by a member."""
        ...

    @abstractmethod
    async def delete_member_roles(self, guild_id: int, user_id: int) -> None: ...

    @abstractmethod
    async def list_role_assignments(self, role_id: int) -> list[CachedRole]:
        """Assignment rows of a role, across all its holders."""
        ...

    @abstractmethod
    async def delete_role_assignments(self, role_id: int) -> None: ...

    # -- members ------------------------------------------------------------
    @abstractmethod
    async def upsert_member(self, member: CachedMember) -> None: ...

    @abstractmethod
    async def delete_member(self, guild_id: int, user_id: int) -> None: ...

    @abstractmethod
    async def get_member(self, guild_id: int, user_id: int) -> CachedMember | None: ...

    @abstractmethod
    async def list_guild_members(self, guild_id: int) -> list[CachedMember]: ...

    @abstractmethod
    async def delete_guild_members(self, guild_id: int) -> None: ...

    # -- emojis -------------------------------------------------------------
    @abstractmethod
    async def upsert_emoji(self, emoji: CachedEmoji) -> None: ...

    @abstractmethod
    async def delete_emoji(self, emoji_id: int) -> None: ...

    @abstractmethod
    async def get_emoji(self, emoji_id: int) -> CachedEmoji | None: ...

    @abstractmethod
    async def list_guild_emojis(self, guild_id: int) -> list[CachedEmoji]: ...

    @abstractmethod
    async def delete_guild_emojis(self, guild_id: int) -> None: ...

    # -- stickers -----------------------------------------------------------
    @abstractmethod
    async def upsert_sticker(self, sticker: CachedSticker) -> None: ...

    @abstractmethod
    async def delete_sticker(self, sticker_id: int) -> None: ...

    @abstractmethod
    async def get_sticker(self, sticker_id: int) -> CachedSticker | None: ...

    @abstractmethod
    async def list_guild_stickers(self, guild_id: int) -> list[CachedSticker]: ...

    @abstractmethod
    async def delete_guild_stickers(self, guild_id: int) -> None: ...

    # -- messages -----------------------------------------------------------
    @abstractmethod
    async def upsert_message(self, message: CachedMessage) -> None: ...

    @abstractmethod
    async def delete_message(self, message_id: int) -> None: ...

    @abstractmethod
    async def get_message(self, message_id: int) -> CachedMessage | None: ...

    # -- embeds -------------------------------------------------------------
    @abstractmethod
    async def upsert_embed(self, embed: CachedEmbed) -> None: ...

    @abstractmethod
    async def delete_embed(self, embed_id: str) -> None: ...

    @abstractmethod
    async def list_message_embeds(self, message_id: int) -> list[CachedEmbed]:
        """Embeds of a message, in position order."""
        ...

    @abstractmethod
    async def upsert_embed_field(self, field: CachedEmbedField) -> None: ...

    @abstractmethod
    async def list_embed_fields(self, embed_id: str) -> list[CachedEmbedField]:
        """Fields of an embed, in position order."""
        ...

    @abstractmethod
    async def delete_embed_fields(self, embed_id: str) -> None: ...

    # -- attachments --------------------------------------------------------
    @abstractmethod
    async def upsert_attachment(self, attachment: CachedAttachment) -> None: ...

    @abstractmethod
    async def list_message_attachments(self, message_id: int) -> list[CachedAttachment]: ...

    @abstractmethod
    async def delete_message_attachments(self, message_id: int) -> None: ...

    # -- reactions ----------------------------------------------------------
    @abstractmethod
    async def upsert_reaction(self, reaction: CachedReaction) -> None: ...

    @abstractmethod
    async def delete_reaction(self, message_id: int, user_id: int, emoji: str) -> None: ...

    @abstractmethod
    async def list_message_reactions(self, message_id: int) -> list[CachedReaction]: ...

    @abstractmethod
    async def delete_message_reactions(self, message_id: int) -> None: ...

    @abstractmethod
    async def delete_emoji_reactions(self, message_id: int, emoji: str) -> None:
        """Delete every user's reaction with *emoji* on a message."""
        ...

    # -- message stickers ---------------------------------------------------
    @abstractmethod
    async def upsert_message_sticker(self, sticker: CachedMessageSticker) -> None: ...

    @abstractmethod
    async def list_message_stickers(self, message_id: int) -> list[CachedMessageSticker]: ...

    @abstractmethod
    async def delete_message_stickers(self, message_id: int) -> None: ...

    # -- presences & activities ---------------------------------------------
    @abstractmethod
    async def upsert_presence(self, presence: CachedPresence) -> None: ...

    @abstractmethod
    async def delete_presence(self, guild_id: int, user_id: int) -> None: ...

    @abstractmethod
    async def get_presence(self, guild_id: int, user_id: int) -> CachedPresence | None: ...

    @abstractmethod
    async def delete_guild_presences(self, guild_id: int) -> None: ...

    @abstractmethod
    async def upsert_activity(self, activity: CachedActivity) -> None: ...

    @abstractmethod
    async def list_user_activities(
        self, guild_id: int, user_id: int
    ) -> list[CachedActivity]:
        """Activities of a member, in the order the presence listed them."""
        ...

    @abstractmethod
    async def delete_user_activities(self, guild_id: int, user_id: int) -> None: ...

    @abstractmethod
    async def delete_guild_activities(self, guild_id: int) -> None: ...

    # -- stage instances ----------------------------------------------------
    @abstractmethod
    async def upsert_stage_instance(self, stage: CachedStageInstance) -> None: ...

    @abstractmethod
    async def delete_stage_instance(self, stage_id: int) -> None: ...

    @abstractmethod
    async def get_stage_instance(self, stage_id: int) -> CachedStageInstance | None: ...

    @abstractmethod
    async def list_guild_stage_instances(self, guild_id: int) -> list[CachedStageInstance]: ...

    @abstractmethod
    async def delete_guild_stage_instances(self, guild_id: int) -> None: ...

    # -- auto-moderation rules ----------------------------------------------
    @abstractmethod
    async def upsert_auto_moderation_rule(self, rule: CachedAutoModerationRule) -> None: ...

    @abstractmethod
    async def delete_auto_moderation_rule(self, rule_id: int) -> None: ...

    @abstractmethod
    async def get_auto_moderation_rule(
        self, rule_id: int
    ) -> CachedAutoModerationRule | None: ...

    @abstractmethod
    async def list_guild_auto_moderation_rules(
        self, guild_id: int
    ) -> list[CachedAutoModerationRule]: ...

    @abstractmethod
    async def delete_guild_auto_moderation_rules(self, guild_id: int) -> None: ...

    # -- bans ---------------------------------------------------------------
    @abstractmethod
    async def upsert_ban(self, ban: CachedBan) -> None: ...

    @abstractmethod
    async def delete_ban(self, guild_id: int, user_id: int) -> None: ...

    @abstractmethod
    async def get_ban(self, guild_id: int, user_id: int) -> CachedBan | None: ...

    @abstractmethod
    async def list_guild_bans(self, guild_id: int) -> list[CachedBan]: ...

    @abstractmethod
    async def delete_guild_bans(self, guild_id: int) -> None: ...
