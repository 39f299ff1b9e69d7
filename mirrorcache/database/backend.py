"""
mirrorcache.database.backend — SQLAlchemy Backend
==================================================

Reference implementation of :class:`~mirrorcache.engine.backend.Backend`
on top of the tables in :mod:`mirrorcache.database.models`.

Each public coroutine ships a small synchronous unit of work to a worker
thread through :func:`run_db` and opens its own session, so every single
call is its own transaction.  Upserts use :meth:`Session.merge`, bulk
deletes are single ``DELETE ... WHERE`` statements.

Rows and cached dataclasses share column/field names, so conversion is
generic; the only special cases are tuples (stored as JSON lists), role
definitions (``user_id`` ``None`` stored as ``0``) and overwrite kinds.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, TypeVar

from sqlalchemy import Engine, delete, select
from sqlalchemy.exc import SQLAlchemyError

from mirrorcache.constants import OverwriteKind
from mirrorcache.database.engine import get_session, run_db
from mirrorcache.database.models import (
    ROLE_DEFINITION_USER,
    ActivityRow,
    AttachmentRow,
    AutoModerationRuleRow,
    BanRow,
    Base,
    ChannelRow,
    CurrentUserRow,
    EmbedFieldRow,
    EmbedRow,
    EmojiRow,
    GuildRow,
    MemberRow,
    MessageRow,
    MessageStickerRow,
    PermissionOverwriteRow,
    PresenceRow,
    PrivateChannelRow,
    ReactionRow,
    RoleRow,
    StageInstanceRow,
    StickerRow,
)
from mirrorcache.engine.backend import Backend
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
from mirrorcache.errors import BackendError

logger = logging.getLogger(__name__)

E = TypeVar("E")

ROW_TYPES: dict[type, type[Base]] = {
    CurrentUser: CurrentUserRow,
    CachedGuild: GuildRow,
    CachedChannel: ChannelRow,
    CachedPrivateChannel: PrivateChannelRow,
    CachedPermissionOverwrite: PermissionOverwriteRow,
    CachedRole: RoleRow,
    CachedMember: MemberRow,
    CachedEmoji: EmojiRow,
    CachedSticker: StickerRow,
    CachedMessageSticker: MessageStickerRow,
    CachedMessage: MessageRow,
    CachedEmbed: EmbedRow,
    CachedEmbedField: EmbedFieldRow,
    CachedAttachment: AttachmentRow,
    CachedReaction: ReactionRow,
    CachedPresence: PresenceRow,
    CachedActivity: ActivityRow,
    CachedStageInstance: StageInstanceRow,
    CachedAutoModerationRule: AutoModerationRuleRow,
    CachedBan: BanRow,
}


# ---------------------------------------------------------------------------
# Row <-> dataclass conversion
# ---------------------------------------------------------------------------
def to_row(entity: Any) -> Base:
    values = {}
    for f in fields(entity):
        value = getattr(entity, f.name)
        values[f.name] = list(value) if isinstance(value, tuple) else value
    if isinstance(entity, CachedRole) and entity.user_id is None:
        values["user_id"] = ROLE_DEFINITION_USER
    return ROW_TYPES[type(entity)](**values)


def to_entity(entity_type: type[E], row: Base) -> E:
    values = {}
    for f in fields(entity_type):
        value = getattr(row, f.name)
        values[f.name] = tuple(value) if isinstance(value, list) else value
    if entity_type is CachedRole and values["user_id"] == ROLE_DEFINITION_USER:
        values["user_id"] = None
    elif entity_type is CachedPermissionOverwrite:
        values["kind"] = OverwriteKind(values["kind"])
    return entity_type(**values)


class SqlBackend(Backend):
    """Cache storage on a SQLAlchemy :class:`Engine` (PostgreSQL or SQLite)."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # -----------------------------------------------------------------------
    # Synchronous units of work (run on a worker thread)
    # -----------------------------------------------------------------------
    def _upsert(self, entity: Any) -> None:
        with get_session(self._engine) as session:
            session.merge(to_row(entity))

    def _delete_where(self, row_type: type[Base], *criteria) -> None:
        with get_session(self._engine) as session:
            session.execute(delete(row_type).where(*criteria))

    def _get(self, entity_type: type[E], key) -> E | None:
        with get_session(self._engine) as session:
            row = session.get(ROW_TYPES[entity_type], key)
            return to_entity(entity_type, row) if row is not None else None

    def _list(self, entity_type: type[E], *criteria, order_by=None) -> list[E]:
        row_type = ROW_TYPES[entity_type]
        stmt = select(row_type).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        with get_session(self._engine) as session:
            return [to_entity(entity_type, row) for row in session.scalars(stmt)]

    def _replace_current_user(self, user: CurrentUser) -> None:
        with get_session(self._engine) as session:
            session.execute(delete(CurrentUserRow))
            session.add(to_row(user))

    async def _call(self, operation: str, func, *args, **kwargs):
        try:
            return await run_db(func, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("Backend operation %s failed: %s", operation, exc)
            raise BackendError(operation, str(exc)) from exc

    # -----------------------------------------------------------------------
    # Current user
    # -----------------------------------------------------------------------
    async def set_current_user(self, user: CurrentUser) -> None:
        await self._call("set_current_user", self._replace_current_user, user)

    async def get_current_user(self) -> CurrentUser | None:
        users = await self._call("get_current_user", self._list, CurrentUser)
        return users[0] if users else None

    # -----------------------------------------------------------------------
    # Guilds
    # -----------------------------------------------------------------------
    async def upsert_guild(self, guild: CachedGuild) -> None:
        await self._call("upsert_guild", self._upsert, guild)

    async def delete_guild(self, guild_id: int) -> None:
        await self._call("delete_guild", self._delete_where, GuildRow, GuildRow.id == guild_id)

    async def get_guild(self, guild_id: int) -> CachedGuild | None:
        return await self._call("get_guild", self._get, CachedGuild, guild_id)

    # -----------------------------------------------------------------------
    # Channels
    # -----------------------------------------------------------------------
    async def upsert_channel(self, channel: CachedChannel) -> None:
        await self._call("upsert_channel", self._upsert, channel)

    async def delete_channel(self, channel_id: int) -> None:
        await self._call(
            "delete_channel", self._delete_where, ChannelRow, ChannelRow.id == channel_id
        )

    async def get_channel(self, channel_id: int) -> CachedChannel | None:
        return await self._call("get_channel", self._get, CachedChannel, channel_id)

    async def list_guild_channels(self, guild_id: int) -> list[CachedChannel]:
        return await self._call(
            "list_guild_channels", self._list, CachedChannel,
            ChannelRow.guild_id == guild_id, order_by=ChannelRow.id,
        )

    async def delete_guild_channels(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_channels", self._delete_where, ChannelRow,
            ChannelRow.guild_id == guild_id,
        )

    # -----------------------------------------------------------------------
    # Private channels
    # -----------------------------------------------------------------------
    async def upsert_private_channel(self, channel: CachedPrivateChannel) -> None:
        await self._call("upsert_private_channel", self._upsert, channel)

    async def delete_private_channel(self, channel_id: int) -> None:
        await self._call(
            "delete_private_channel", self._delete_where, PrivateChannelRow,
            PrivateChannelRow.channel_id == channel_id,
        )

    async def get_private_channel(self, recipient_id: int) -> CachedPrivateChannel | None:
        channels = await self._call(
            "get_private_channel", self._list, CachedPrivateChannel,
            PrivateChannelRow.recipient_id == recipient_id,
            order_by=PrivateChannelRow.channel_id,
        )
        return channels[0] if channels else None

    # -----------------------------------------------------------------------
    # Permission overwrites
    # -----------------------------------------------------------------------
    async def upsert_permission_overwrite(self, overwrite: CachedPermissionOverwrite) -> None:
        await self._call("upsert_permission_overwrite", self._upsert, overwrite)

    async def delete_permission_overwrite(self, channel_id: int, target_id: int) -> None:
        await self._call(
            "delete_permission_overwrite", self._delete_where, PermissionOverwriteRow,
            PermissionOverwriteRow.channel_id == channel_id,
            PermissionOverwriteRow.id == target_id,
        )

    async def list_channel_permission_overwrites(
        self, channel_id: int
    ) -> list[CachedPermissionOverwrite]:
        return await self._call(
            "list_channel_permission_overwrites", self._list, CachedPermissionOverwrite,
            PermissionOverwriteRow.channel_id == channel_id,
            order_by=PermissionOverwriteRow.id,
        )

    async def delete_channel_permission_overwrites(self, channel_id: int) -> None:
        await self._call(
            "delete_channel_permission_overwrites", self._delete_where,
            PermissionOverwriteRow, PermissionOverwriteRow.channel_id == channel_id,
        )

    # -----------------------------------------------------------------------
    # Roles
    # -----------------------------------------------------------------------
    async def upsert_role(self, role: CachedRole) -> None:
        await self._call("upsert_role", self._upsert, role)

    async def delete_role(self, role_id: int) -> None:
        await self._call(
            "delete_role", self._delete_where, RoleRow,
            RoleRow.id == role_id, RoleRow.user_id == ROLE_DEFINITION_USER,
        )

    async def get_role(self, role_id: int) -> CachedRole | None:
        return await self._call(
            "get_role", self._get, CachedRole, (role_id, ROLE_DEFINITION_USER)
        )

    async def list_guild_roles(self, guild_id: int) -> list[CachedRole]:
        return await self._call(
            "list_guild_roles", self._list, CachedRole,
            RoleRow.guild_id == guild_id, RoleRow.user_id == ROLE_DEFINITION_USER,
            order_by=RoleRow.position,
        )

    async def delete_guild_roles(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_roles", self._delete_where, RoleRow, RoleRow.guild_id == guild_id
        )

    async def list_member_roles(self, guild_id: int, user_id: int) -> list[CachedRole]:
        return await self._call(
            "list_member_roles", self._list, CachedRole,
            RoleRow.guild_id == guild_id, RoleRow.user_id == user_id,
            order_by=RoleRow.id,
        )

    async def delete_member_roles(self, guild_id: int, user_id: int) -> None:
        await self._call(
            "delete_member_roles", self._delete_where, RoleRow,
            RoleRow.guild_id == guild_id, RoleRow.user_id == user_id,
        )

    async def list_role_assignments(self, role_id: int) -> list[CachedRole]:
        return await self._call(
            "list_role_assignments", self._list, CachedRole,
            RoleRow.id == role_id, RoleRow.user_id != ROLE_DEFINITION_USER,
            order_by=RoleRow.user_id,
        )

    async def delete_role_assignments(self, role_id: int) -> None:
        await self._call(
            "delete_role_assignments", self._delete_where, RoleRow,
            RoleRow.id == role_id, RoleRow.user_id != ROLE_DEFINITION_USER,
        )

    # -----------------------------------------------------------------------
    # Members
    # -----------------------------------------------------------------------
    async def upsert_member(self, member: CachedMember) -> None:
        await self._call("upsert_member", self._upsert, member)

    async def delete_member(self, guild_id: int, user_id: int) -> None:
        await self._call(
            "delete_member", self._delete_where, MemberRow,
            MemberRow.guild_id == guild_id, MemberRow.id == user_id,
        )

    async def get_member(self, guild_id: int, user_id: int) -> CachedMember | None:
        return await self._call("get_member", self._get, CachedMember, (guild_id, user_id))

    async def list_guild_members(self, guild_id: int) -> list[CachedMember]:
        return await self._call(
            "list_guild_members", self._list, CachedMember,
            MemberRow.guild_id == guild_id, order_by=MemberRow.id,
        )

    async def delete_guild_members(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_members", self._delete_where, MemberRow,
            MemberRow.guild_id == guild_id,
        )

    # -----------------------------------------------------------------------
    # Emojis
    # -----------------------------------------------------------------------
    async def upsert_emoji(self, emoji: CachedEmoji) -> None:
        await self._call("upsert_emoji", self._upsert, emoji)

    async def delete_emoji(self, emoji_id: int) -> None:
        await self._call("delete_emoji", self._delete_where, EmojiRow, EmojiRow.id == emoji_id)

    async def get_emoji(self, emoji_id: int) -> CachedEmoji | None:
        return await self._call("get_emoji", self._get, CachedEmoji, emoji_id)

    async def list_guild_emojis(self, guild_id: int) -> list[CachedEmoji]:
        return await self._call(
            "list_guild_emojis", self._list, CachedEmoji,
            EmojiRow.guild_id == guild_id, order_by=EmojiRow.id,
        )

    async def delete_guild_emojis(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_emojis", self._delete_where, EmojiRow, EmojiRow.guild_id == guild_id
        )

    # -----------------------------------------------------------------------
    # Stickers
    # -----------------------------------------------------------------------
    async def upsert_sticker(self, sticker: CachedSticker) -> None:
        await self._call("upsert_sticker", self._upsert, sticker)

    async def delete_sticker(self, sticker_id: int) -> None:
        await self._call(
            "delete_sticker", self._delete_where, StickerRow, StickerRow.id == sticker_id
        )

    async def get_sticker(self, sticker_id: int) -> CachedSticker | None:
        return await self._call("get_sticker", self._get, CachedSticker, sticker_id)

    async def list_guild_stickers(self, guild_id: int) -> list[CachedSticker]:
        return await self._call(
            "list_guild_stickers", self._list, CachedSticker,
            StickerRow.guild_id == guild_id, order_by=StickerRow.id,
        )

    async def delete_guild_stickers(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_stickers", self._delete_where, StickerRow,
            StickerRow.guild_id == guild_id,
        )

    # -----------------------------------------------------------------------
    # Messages
    # -----------------------------------------------------------------------
    async def upsert_message(self, message: CachedMessage) -> None:
        await self._call("upsert_message", self._upsert, message)

    async def delete_message(self, message_id: int) -> None:
        await self._call(
            "delete_message", self._delete_where, MessageRow, MessageRow.id == message_id
        )

    async def get_message(self, message_id: int) -> CachedMessage | None:
        return await self._call("get_message", self._get, CachedMessage, message_id)

    # -----------------------------------------------------------------------
    # Embeds
    # -----------------------------------------------------------------------
    async def upsert_embed(self, embed: CachedEmbed) -> None:
        await self._call("upsert_embed", self._upsert, embed)

    async def delete_embed(self, embed_id: str) -> None:
        await self._call("delete_embed", self._delete_where, EmbedRow, EmbedRow.id == embed_id)

    async def list_message_embeds(self, message_id: int) -> list[CachedEmbed]:
        return await self._call(
            "list_message_embeds", self._list, CachedEmbed,
            EmbedRow.message_id == message_id, order_by=EmbedRow.position,
        )

    async def upsert_embed_field(self, field: CachedEmbedField) -> None:
        await self._call("upsert_embed_field", self._upsert, field)

    async def list_embed_fields(self, embed_id: str) -> list[CachedEmbedField]:
        return await self._call(
            "list_embed_fields", self._list, CachedEmbedField,
            EmbedFieldRow.embed_id == embed_id, order_by=EmbedFieldRow.position,
        )

    async def delete_embed_fields(self, embed_id: str) -> None:
        await self._call(
            "delete_embed_fields", self._delete_where, EmbedFieldRow,
            EmbedFieldRow.embed_id == embed_id,
        )

    # -----------------------------------------------------------------------
    # Attachments
    # -----------------------------------------------------------------------
    async def upsert_attachment(self, attachment: CachedAttachment) -> None:
        await self._call("upsert_attachment", self._upsert, attachment)

    async def list_message_attachments(self, message_id: int) -> list[CachedAttachment]:
        return await self._call(
            "list_message_attachments", self._list, CachedAttachment,
            AttachmentRow.message_id == message_id, order_by=AttachmentRow.id,
        )

    async def delete_message_attachments(self, message_id: int) -> None:
        await self._call(
            "delete_message_attachments", self._delete_where, AttachmentRow,
            AttachmentRow.message_id == message_id,
        )

    # -----------------------------------------------------------------------
    # Reactions
    # -----------------------------------------------------------------------
    async def upsert_reaction(self, reaction: CachedReaction) -> None:
        await self._call("upsert_reaction", self._upsert, reaction)

    async def delete_reaction(self, message_id: int, user_id: int, emoji: str) -> None:
        await self._call(
            "delete_reaction", self._delete_where, ReactionRow,
            ReactionRow.message_id == message_id,
            ReactionRow.user_id == user_id,
            ReactionRow.emoji == emoji,
        )

    async def list_message_reactions(self, message_id: int) -> list[CachedReaction]:
        return await self._call(
            "list_message_reactions", self._list, CachedReaction,
            ReactionRow.message_id == message_id, order_by=ReactionRow.user_id,
        )

    async def delete_message_reactions(self, message_id: int) -> None:
        await self._call(
            "delete_message_reactions", self._delete_where, ReactionRow,
            ReactionRow.message_id == message_id,
        )

    async def delete_emoji_reactions(self, message_id: int, emoji: str) -> None:
        await self._call(
            "delete_emoji_reactions", self._delete_where, ReactionRow,
            ReactionRow.message_id == message_id, ReactionRow.emoji == emoji,
        )

    # -----------------------------------------------------------------------
    # Message stickers
    # -----------------------------------------------------------------------
    async def upsert_message_sticker(self, sticker: CachedMessageSticker) -> None:
        await self._call("upsert_message_sticker", self._upsert, sticker)

    async def list_message_stickers(self, message_id: int) -> list[CachedMessageSticker]:
        return await self._call(
            "list_message_stickers", self._list, CachedMessageSticker,
            MessageStickerRow.message_id == message_id, order_by=MessageStickerRow.id,
        )

    async def delete_message_stickers(self, message_id: int) -> None:
        await self._call(
            "delete_message_stickers", self._delete_where, MessageStickerRow,
            MessageStickerRow.message_id == message_id,
        )

    # -----------------------------------------------------------------------
    # Presences & activities
    # -----------------------------------------------------------------------
    async def upsert_presence(self, presence: CachedPresence) -> None:
        await self._call("upsert_presence", self._upsert, presence)

    async def delete_presence(self, guild_id: int, user_id: int) -> None:
        await self._call(
            "delete_presence", self._delete_where, PresenceRow,
            PresenceRow.guild_id == guild_id, PresenceRow.user_id == user_id,
        )

    async def get_presence(self, guild_id: int, user_id: int) -> CachedPresence | None:
        return await self._call(
            "get_presence", self._get, CachedPresence, (guild_id, user_id)
        )

    async def delete_guild_presences(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_presences", self._delete_where, PresenceRow,
            PresenceRow.guild_id == guild_id,
        )

    async def upsert_activity(self, activity: CachedActivity) -> None:
        await self._call("upsert_activity", self._upsert, activity)

    async def list_user_activities(self, guild_id: int, user_id: int) -> list[CachedActivity]:
        return await self._call(
            "list_user_activities", self._list, CachedActivity,
            ActivityRow.guild_id == guild_id, ActivityRow.user_id == user_id,
            order_by=ActivityRow.position,
        )

    async def delete_user_activities(self, guild_id: int, user_id: int) -> None:
        await self._call(
            "delete_user_activities", self._delete_where, ActivityRow,
            ActivityRow.guild_id == guild_id, ActivityRow.user_id == user_id,
        )

    async def delete_guild_activities(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_activities", self._delete_where, ActivityRow,
            ActivityRow.guild_id == guild_id,
        )

    # -----------------------------------------------------------------------
    # Stage instances
    # -----------------------------------------------------------------------
    async def upsert_stage_instance(self, stage: CachedStageInstance) -> None:
        await self._call("upsert_stage_instance", self._upsert, stage)

    async def delete_stage_instance(self, stage_id: int) -> None:
        await self._call(
            "delete_stage_instance", self._delete_where, StageInstanceRow,
            StageInstanceRow.id == stage_id,
        )

    async def get_stage_instance(self, stage_id: int) -> CachedStageInstance | None:
        return await self._call(
            "get_stage_instance", self._get, CachedStageInstance, stage_id
        )

    async def list_guild_stage_instances(self, guild_id: int) -> list[CachedStageInstance]:
        return await self._call(
            "list_guild_stage_instances", self._list, CachedStageInstance,
            StageInstanceRow.guild_id == guild_id, order_by=StageInstanceRow.id,
        )

    async def delete_guild_stage_instances(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_stage_instances", self._delete_where, StageInstanceRow,
            StageInstanceRow.guild_id == guild_id,
        )

    # -----------------------------------------------------------------------
    # Auto-moderation rules
    # -----------------------------------------------------------------------
    async def upsert_auto_moderation_rule(self, rule: CachedAutoModerationRule) -> None:
        await self._call("upsert_auto_moderation_rule", self._upsert, rule)

    async def delete_auto_moderation_rule(self, rule_id: int) -> None:
        await self._call(
            "delete_auto_moderation_rule", self._delete_where, AutoModerationRuleRow,
            AutoModerationRuleRow.id == rule_id,
        )

    async def get_auto_moderation_rule(self, rule_id: int) -> CachedAutoModerationRule | None:
        return await self._call(
            "get_auto_moderation_rule", self._get, CachedAutoModerationRule, rule_id
        )

    async def list_guild_auto_moderation_rules(
        self, guild_id: int
    ) -> list[CachedAutoModerationRule]:
        return await self._call(
            "list_guild_auto_moderation_rules", self._list, CachedAutoModerationRule,
            AutoModerationRuleRow.guild_id == guild_id, order_by=AutoModerationRuleRow.id,
        )

    async def delete_guild_auto_moderation_rules(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_auto_moderation_rules", self._delete_where,
            AutoModerationRuleRow, AutoModerationRuleRow.guild_id == guild_id,
        )

    # -----------------------------------------------------------------------
    # Bans
    # -----------------------------------------------------------------------
    async def upsert_ban(self, ban: CachedBan) -> None:
        await self._call("upsert_ban", self._upsert, ban)

    async def delete_ban(self, guild_id: int, user_id: int) -> None:
        await self._call(
            "delete_ban", self._delete_where, BanRow,
            BanRow.guild_id == guild_id, BanRow.user_id == user_id,
        )

    async def get_ban(self, guild_id: int, user_id: int) -> CachedBan | None:
        return await self._call("get_ban", self._get, CachedBan, (guild_id, user_id))

    async def list_guild_bans(self, guild_id: int) -> list[CachedBan]:
        return await self._call(
            "list_guild_bans", self._list, CachedBan,
            BanRow.guild_id == guild_id, order_by=BanRow.user_id,
        )

    async def delete_guild_bans(self, guild_id: int) -> None:
        await self._call(
            "delete_guild_bans", self._delete_where, BanRow, BanRow.guild_id == guild_id
        )
