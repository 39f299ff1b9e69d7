"""
mirrorcache.database.models — SQLAlchemy 2.0 Tables
====================================================

One table per cached entity.  Column names match the dataclass fields in
:mod:`mirrorcache.engine.models` one to one, which is what lets
:class:`~mirrorcache.database.backend.SqlBackend` convert rows generically.

Tables:
- self_user              — singleton row for the logged-in account
- guilds                 — guild scalars
- channels               — guild channels, threads, group DMs
- private_channels       — DM channels keyed by (channel, recipient)
- permission_overwrites  — keyed by (channel, role-or-user id)
- roles                  — definitions (user_id = 0) and member assignments
- members                — keyed by (guild, user)
- emojis, stickers       — guild emojis / guild stickers
- messages               — message scalars
- embeds, embed_fields   — embeds keyed by synthetic id, fields by position
- attachments, reactions, message_stickers
- presences, activities
- stage_instances, auto_moderation_rules, bans
"""

from __future__ import annotations

from sqlalchemy import JSON, BigInteger, Boolean, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Stored in place of ``user_id = None`` for role definition rows, so the
# composite primary key stays NOT NULL.
ROLE_DEFINITION_USER = 0

JSONList = JSON().with_variant(JSONB, "postgresql")


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all cache tables."""


def _snowflake(primary_key: bool = False, nullable: bool = False, index: bool = False):
    return mapped_column(
        BigInteger,
        primary_key=primary_key,
        autoincrement=False,
        nullable=nullable,
        index=index,
    )


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------
class CurrentUserRow(Base):
    __tablename__ = "self_user"

    id: Mapped[int] = _snowflake(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    discriminator: Mapped[str] = mapped_column(String(8))
    global_name: Mapped[str | None] = mapped_column(String(100))
    avatar: Mapped[str | None] = mapped_column(String(64))
    bot: Mapped[bool] = mapped_column(Boolean, default=False)
    mfa_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    locale: Mapped[str | None] = mapped_column(String(16))
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    email: Mapped[str | None] = mapped_column(String(320))
    flags: Mapped[int | None] = mapped_column(BigInteger)
    premium_type: Mapped[int | None] = mapped_column(Integer)
    public_flags: Mapped[int | None] = mapped_column(BigInteger)


# ---------------------------------------------------------------------------
# Guilds
# ---------------------------------------------------------------------------
class GuildRow(Base):
    __tablename__ = "guilds"

    id: Mapped[int] = _snowflake(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    owner_id: Mapped[int | None] = _snowflake(nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64))
    splash: Mapped[str | None] = mapped_column(String(64))
    discovery_splash: Mapped[str | None] = mapped_column(String(64))
    banner: Mapped[str | None] = mapped_column(String(64))
    description: Mapped[str | None] = mapped_column(Text)
    afk_channel_id: Mapped[int | None] = _snowflake(nullable=True)
    afk_timeout: Mapped[int] = mapped_column(Integer, default=0)
    application_id: Mapped[int | None] = _snowflake(nullable=True)
    default_message_notifications: Mapped[int] = mapped_column(Integer, default=0)
    explicit_content_filter: Mapped[int] = mapped_column(Integer, default=0)
    features: Mapped[list] = mapped_column(JSONList, default=list)
    joined_at: Mapped[str | None] = mapped_column(String(40))
    large: Mapped[bool] = mapped_column(Boolean, default=False)
    max_members: Mapped[int | None] = mapped_column(Integer)
    max_presences: Mapped[int | None] = mapped_column(Integer)
    max_video_channel_users: Mapped[int | None] = mapped_column(Integer)
    mfa_level: Mapped[int] = mapped_column(Integer, default=0)
    nsfw_level: Mapped[int] = mapped_column(Integer, default=0)
    preferred_locale: Mapped[str] = mapped_column(String(16), default="en-US")
    premium_progress_bar_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    premium_subscription_count: Mapped[int | None] = mapped_column(Integer)
    premium_tier: Mapped[int] = mapped_column(Integer, default=0)
    rules_channel_id: Mapped[int | None] = _snowflake(nullable=True)
    system_channel_flags: Mapped[int] = mapped_column(Integer, default=0)
    system_channel_id: Mapped[int | None] = _snowflake(nullable=True)
    unavailable: Mapped[bool] = mapped_column(Boolean, default=False)
    vanity_url_code: Mapped[str | None] = mapped_column(String(64))
    verification_level: Mapped[int] = mapped_column(Integer, default=0)
    widget_channel_id: Mapped[int | None] = _snowflake(nullable=True)
    widget_enabled: Mapped[bool] = mapped_column(Boolean, default=False)


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------
class ChannelRow(Base):
    __tablename__ = "channels"

    id: Mapped[int] = _snowflake(primary_key=True)
    kind: Mapped[int] = mapped_column(Integer)
    guild_id: Mapped[int | None] = _snowflake(nullable=True, index=True)
    name: Mapped[str | None] = mapped_column(String(100))
    position: Mapped[int | None] = mapped_column(Integer)
    topic: Mapped[str | None] = mapped_column(Text)
    nsfw: Mapped[bool] = mapped_column(Boolean, default=False)
    parent_id: Mapped[int | None] = _snowflake(nullable=True)
    owner_id: Mapped[int | None] = _snowflake(nullable=True)
    application_id: Mapped[int | None] = _snowflake(nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64))
    bitrate: Mapped[int | None] = mapped_column(Integer)
    user_limit: Mapped[int | None] = mapped_column(Integer)
    rate_limit_per_user: Mapped[int | None] = mapped_column(Integer)
    rtc_region: Mapped[str | None] = mapped_column(String(32))
    video_quality_mode: Mapped[int | None] = mapped_column(Integer)
    default_auto_archive_duration: Mapped[int | None] = mapped_column(Integer)
    thread_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    thread_auto_archive_duration: Mapped[int | None] = mapped_column(Integer)
    thread_archive_timestamp: Mapped[str | None] = mapped_column(String(40))
    thread_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    thread_invitable: Mapped[bool] = mapped_column(Boolean, default=False)
    thread_create_timestamp: Mapped[str | None] = mapped_column(String(40))


class PrivateChannelRow(Base):
    __tablename__ = "private_channels"

    channel_id: Mapped[int] = _snowflake(primary_key=True)
    recipient_id: Mapped[int] = _snowflake(primary_key=True)

    __table_args__ = (
        Index("ix_private_channels_recipient", "recipient_id"),
    )


class PermissionOverwriteRow(Base):
    __tablename__ = "permission_overwrites"

    channel_id: Mapped[int] = _snowflake(primary_key=True)
    id: Mapped[int] = _snowflake(primary_key=True)
    kind: Mapped[int] = mapped_column(Integer)
    allow: Mapped[int] = mapped_column(BigInteger, default=0)
    deny: Mapped[int] = mapped_column(BigInteger, default=0)


# ---------------------------------------------------------------------------
# Roles & members
# ---------------------------------------------------------------------------
class RoleRow(Base):
    """Role definitions (``user_id = 0``) and member assignment copies."""

    __tablename__ = "roles"

    id: Mapped[int] = _snowflake(primary_key=True)
    user_id: Mapped[int] = _snowflake(primary_key=True)
    guild_id: Mapped[int] = _snowflake(index=True)
    name: Mapped[str] = mapped_column(String(100))
    color: Mapped[int] = mapped_column(Integer, default=0)
    hoist: Mapped[bool] = mapped_column(Boolean, default=False)
    icon: Mapped[str | None] = mapped_column(String(64))
    unicode_emoji: Mapped[str | None] = mapped_column(String(64))
    position: Mapped[int] = mapped_column(Integer, default=0)
    permissions: Mapped[int] = mapped_column(BigInteger, default=0)
    managed: Mapped[bool] = mapped_column(Boolean, default=False)
    mentionable: Mapped[bool] = mapped_column(Boolean, default=False)
    tag_bot_id: Mapped[int | None] = _snowflake(nullable=True)
    tag_integration_id: Mapped[int | None] = _snowflake(nullable=True)
    tag_premium_subscriber: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        Index("ix_roles_guild_user", "guild_id", "user_id"),
    )


class MemberRow(Base):
    __tablename__ = "members"

    guild_id: Mapped[int] = _snowflake(primary_key=True)
    id: Mapped[int] = _snowflake(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    discriminator: Mapped[str] = mapped_column(String(8), default="0")
    nick: Mapped[str | None] = mapped_column(String(100))
    guild_avatar: Mapped[str | None] = mapped_column(String(64))
    joined_at: Mapped[str | None] = mapped_column(String(40))
    premium_since: Mapped[str | None] = mapped_column(String(40))
    deaf: Mapped[bool] = mapped_column(Boolean, default=False)
    mute: Mapped[bool] = mapped_column(Boolean, default=False)
    pending: Mapped[bool] = mapped_column(Boolean, default=False)
    communication_disabled_until: Mapped[str | None] = mapped_column(String(40))
    global_name: Mapped[str | None] = mapped_column(String(100))
    avatar: Mapped[str | None] = mapped_column(String(64))
    banner: Mapped[str | None] = mapped_column(String(64))
    accent_color: Mapped[int | None] = mapped_column(Integer)
    bot: Mapped[bool] = mapped_column(Boolean, default=False)
    system: Mapped[bool] = mapped_column(Boolean, default=False)
    flags: Mapped[int | None] = mapped_column(BigInteger)
    public_flags: Mapped[int | None] = mapped_column(BigInteger)
    premium_type: Mapped[int | None] = mapped_column(Integer)
    locale: Mapped[str | None] = mapped_column(String(16))
    mfa_enabled: Mapped[bool] = mapped_column(Boolean, default=False)


# ---------------------------------------------------------------------------
# Emojis & stickers
# ---------------------------------------------------------------------------
class EmojiRow(Base):
    __tablename__ = "emojis"

    id: Mapped[int] = _snowflake(primary_key=True)
    guild_id: Mapped[int] = _snowflake(index=True)
    name: Mapped[str | None] = mapped_column(String(100))
    animated: Mapped[bool] = mapped_column(Boolean, default=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True)
    managed: Mapped[bool] = mapped_column(Boolean, default=False)
    require_colons: Mapped[bool] = mapped_column(Boolean, default=False)
    roles: Mapped[list] = mapped_column(JSONList, default=list)
    user_id: Mapped[int | None] = _snowflake(nullable=True)


class StickerRow(Base):
    __tablename__ = "stickers"

    id: Mapped[int] = _snowflake(primary_key=True)
    guild_id: Mapped[int] = _snowflake(index=True)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[str] = mapped_column(String(200), default="")
    kind: Mapped[int] = mapped_column(Integer, default=2)
    format_type: Mapped[int] = mapped_column(Integer, default=1)
    available: Mapped[bool] = mapped_column(Boolean, default=True)
    pack_id: Mapped[int | None] = _snowflake(nullable=True)
    sort_value: Mapped[int | None] = mapped_column(Integer)
    user_id: Mapped[int | None] = _snowflake(nullable=True)


class MessageStickerRow(Base):
    __tablename__ = "message_stickers"

    message_id: Mapped[int] = _snowflake(primary_key=True)
    id: Mapped[int] = _snowflake(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    format_type: Mapped[int] = mapped_column(Integer, default=1)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
class MessageRow(Base):
    __tablename__ = "messages"

    id: Mapped[int] = _snowflake(primary_key=True)
    channel_id: Mapped[int] = _snowflake(index=True)
    guild_id: Mapped[int | None] = _snowflake(nullable=True)
    author_id: Mapped[int | None] = _snowflake(nullable=True)
    content: Mapped[str] = mapped_column(Text, default="")
    timestamp: Mapped[str | None] = mapped_column(String(40))
    edited_timestamp: Mapped[str | None] = mapped_column(String(40))
    kind: Mapped[int] = mapped_column(Integer, default=0)
    flags: Mapped[int | None] = mapped_column(BigInteger)
    tts: Mapped[bool] = mapped_column(Boolean, default=False)
    mention_everyone: Mapped[bool] = mapped_column(Boolean, default=False)
    pinned: Mapped[bool] = mapped_column(Boolean, default=False)
    webhook_id: Mapped[int | None] = _snowflake(nullable=True)
    application_id: Mapped[int | None] = _snowflake(nullable=True)
    activity_type: Mapped[int | None] = mapped_column(Integer)
    activity_party_id: Mapped[str | None] = mapped_column(String(100))
    reference_channel_id: Mapped[int | None] = _snowflake(nullable=True)
    reference_guild_id: Mapped[int | None] = _snowflake(nullable=True)
    reference_message_id: Mapped[int | None] = _snowflake(nullable=True)
    referenced_message_id: Mapped[int | None] = _snowflake(nullable=True)
    thread_id: Mapped[int | None] = _snowflake(nullable=True)


class EmbedRow(Base):
    __tablename__ = "embeds"

    id: Mapped[str] = mapped_column(String(48), primary_key=True)
    message_id: Mapped[int] = _snowflake(index=True)
    position: Mapped[int] = mapped_column(Integer)
    kind: Mapped[str] = mapped_column(String(32), default="rich")
    title: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    url: Mapped[str | None] = mapped_column(Text)
    timestamp: Mapped[str | None] = mapped_column(String(40))
    color: Mapped[int | None] = mapped_column(Integer)
    author_name: Mapped[str | None] = mapped_column(Text)
    author_url: Mapped[str | None] = mapped_column(Text)
    author_icon_url: Mapped[str | None] = mapped_column(Text)
    author_proxy_icon_url: Mapped[str | None] = mapped_column(Text)
    footer_text: Mapped[str | None] = mapped_column(Text)
    footer_icon_url: Mapped[str | None] = mapped_column(Text)
    footer_proxy_icon_url: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(Text)
    image_proxy_url: Mapped[str | None] = mapped_column(Text)
    image_height: Mapped[int | None] = mapped_column(Integer)
    image_width: Mapped[int | None] = mapped_column(Integer)
    thumbnail_url: Mapped[str | None] = mapped_column(Text)
    thumbnail_proxy_url: Mapped[str | None] = mapped_column(Text)
    thumbnail_height: Mapped[int | None] = mapped_column(Integer)
    thumbnail_width: Mapped[int | None] = mapped_column(Integer)
    video_url: Mapped[str | None] = mapped_column(Text)
    video_proxy_url: Mapped[str | None] = mapped_column(Text)
    video_height: Mapped[int | None] = mapped_column(Integer)
    video_width: Mapped[int | None] = mapped_column(Integer)
    provider_name: Mapped[str | None] = mapped_column(Text)
    provider_url: Mapped[str | None] = mapped_column(Text)


class EmbedFieldRow(Base):
    __tablename__ = "embed_fields"

    embed_id: Mapped[str] = mapped_column(String(48), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(Text)
    value: Mapped[str] = mapped_column(Text)
    inline: Mapped[bool] = mapped_column(Boolean, default=False)


class AttachmentRow(Base):
    __tablename__ = "attachments"

    id: Mapped[int] = _snowflake(primary_key=True)
    message_id: Mapped[int] = _snowflake(index=True)
    filename: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    content_type: Mapped[str | None] = mapped_column(String(100))
    size: Mapped[int] = mapped_column(BigInteger, default=0)
    url: Mapped[str] = mapped_column(Text, default="")
    proxy_url: Mapped[str] = mapped_column(Text, default="")
    height: Mapped[int | None] = mapped_column(Integer)
    width: Mapped[int | None] = mapped_column(Integer)
    ephemeral: Mapped[bool] = mapped_column(Boolean, default=False)


class ReactionRow(Base):
    __tablename__ = "reactions"

    message_id: Mapped[int] = _snowflake(primary_key=True)
    user_id: Mapped[int] = _snowflake(primary_key=True)
    emoji: Mapped[str] = mapped_column(String(100), primary_key=True)
    channel_id: Mapped[int | None] = _snowflake(nullable=True)
    guild_id: Mapped[int | None] = _snowflake(nullable=True)


# ---------------------------------------------------------------------------
# Presences
# ---------------------------------------------------------------------------
class PresenceRow(Base):
    __tablename__ = "presences"

    guild_id: Mapped[int] = _snowflake(primary_key=True)
    user_id: Mapped[int] = _snowflake(primary_key=True)
    status: Mapped[str] = mapped_column(String(16))


class ActivityRow(Base):
    __tablename__ = "activities"

    guild_id: Mapped[int] = _snowflake(primary_key=True)
    user_id: Mapped[int] = _snowflake(primary_key=True)
    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    kind: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(128))
    url: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[int | None] = mapped_column(BigInteger)
    timestamp_start: Mapped[int | None] = mapped_column(BigInteger)
    timestamp_end: Mapped[int | None] = mapped_column(BigInteger)
    application_id: Mapped[int | None] = _snowflake(nullable=True)
    details: Mapped[str | None] = mapped_column(Text)
    state: Mapped[str | None] = mapped_column(Text)
    emoji_name: Mapped[str | None] = mapped_column(String(100))
    emoji_id: Mapped[int | None] = _snowflake(nullable=True)
    emoji_animated: Mapped[bool] = mapped_column(Boolean, default=False)
    party_id: Mapped[str | None] = mapped_column(String(128))
    party_size_current: Mapped[int | None] = mapped_column(Integer)
    party_size_max: Mapped[int | None] = mapped_column(Integer)
    asset_large_image: Mapped[str | None] = mapped_column(Text)
    asset_large_text: Mapped[str | None] = mapped_column(Text)
    asset_small_image: Mapped[str | None] = mapped_column(Text)
    asset_small_text: Mapped[str | None] = mapped_column(Text)
    instance: Mapped[bool] = mapped_column(Boolean, default=False)
    flags: Mapped[int | None] = mapped_column(Integer)


# ---------------------------------------------------------------------------
# Guild-owned odds and ends
# ---------------------------------------------------------------------------
class StageInstanceRow(Base):
    __tablename__ = "stage_instances"

    id: Mapped[int] = _snowflake(primary_key=True)
    guild_id: Mapped[int] = _snowflake(index=True)
    channel_id: Mapped[int] = _snowflake()
    topic: Mapped[str] = mapped_column(String(120))
    privacy_level: Mapped[int] = mapped_column(Integer, default=2)
    guild_scheduled_event_id: Mapped[int | None] = _snowflake(nullable=True)


class AutoModerationRuleRow(Base):
    __tablename__ = "auto_moderation_rules"

    id: Mapped[int] = _snowflake(primary_key=True)
    guild_id: Mapped[int] = _snowflake(index=True)
    name: Mapped[str] = mapped_column(String(100))
    creator_id: Mapped[int | None] = _snowflake(nullable=True)
    event_type: Mapped[int] = mapped_column(Integer, default=1)
    trigger_type: Mapped[int] = mapped_column(Integer, default=1)
    enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    exempt_roles: Mapped[list] = mapped_column(JSONList, default=list)
    exempt_channels: Mapped[list] = mapped_column(JSONList, default=list)


class BanRow(Base):
    __tablename__ = "bans"

    guild_id: Mapped[int] = _snowflake(primary_key=True)
    user_id: Mapped[int] = _snowflake(primary_key=True)
