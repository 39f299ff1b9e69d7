"""
mirrorcache.engine.payloads — Gateway Payload Models
=====================================================

Pydantic models for the ``d`` field of the gateway dispatch events the
cache acts on.  Unknown keys are ignored; snowflakes and permission
bitfields arrive as strings and are coerced to ``int``.

Partial-update events (member, message and guild updates) are parsed with
the same models as their full counterparts.  Which fields were actually
present in the frame is read back from ``model_fields_set``, the same way
the dashboard PATCH routes use ``model_dump(exclude_unset=True)``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class GatewayModel(BaseModel):
    """Shared base: immutable, tolerant of fields the cache drops."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    def present(self, name: str) -> bool:
        """Whether *name* was sent in the frame (even as ``null``)."""
        return name in self.model_fields_set


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class UserPayload(GatewayModel):
    id: int
    username: str = ""
    discriminator: str = "0"
    global_name: str | None = None
    avatar: str | None = None
    banner: str | None = None
    accent_color: int | None = None
    bot: bool = False
    system: bool | None = None
    flags: int | None = None
    public_flags: int | None = None
    premium_type: int | None = None
    locale: str | None = None
    mfa_enabled: bool | None = None
    verified: bool | None = None
    email: str | None = None


class IdRef(GatewayModel):
    id: int


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
class RoleTagsPayload(GatewayModel):
    bot_id: int | None = None
    integration_id: int | None = None
    # Sent as ``null`` when true, omitted when false.
    premium_subscriber: None = None


class RolePayload(GatewayModel):
    id: int
    name: str = ""
    color: int = 0
    hoist: bool = False
    icon: str | None = None
    unicode_emoji: str | None = None
    position: int = 0
    permissions: int = 0
    managed: bool = False
    mentionable: bool = False
    tags: RoleTagsPayload | None = None


class GuildRolePayload(GatewayModel):
    guild_id: int
    role: RolePayload


class GuildRoleDeletePayload(GatewayModel):
    guild_id: int
    role_id: int


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------
class OverwritePayload(GatewayModel):
    id: int
    type: int
    allow: int = 0
    deny: int = 0


class ThreadMetadataPayload(GatewayModel):
    archived: bool = False
    auto_archive_duration: int | None = None
    archive_timestamp: str | None = None
    locked: bool = False
    invitable: bool | None = None
    create_timestamp: str | None = None


class ChannelPayload(GatewayModel):
    id: int
    type: int
    guild_id: int | None = None
    name: str | None = None
    position: int | None = None
    topic: str | None = None
    nsfw: bool | None = None
    parent_id: int | None = None
    owner_id: int | None = None
    application_id: int | None = None
    icon: str | None = None
    bitrate: int | None = None
    user_limit: int | None = None
    rate_limit_per_user: int | None = None
    rtc_region: str | None = None
    video_quality_mode: int | None = None
    default_auto_archive_duration: int | None = None
    permission_overwrites: list[OverwritePayload] = []
    recipients: list[UserPayload] = []
    thread_metadata: ThreadMetadataPayload | None = None


class ThreadListSyncPayload(GatewayModel):
    guild_id: int
    channel_ids: list[int] = []
    threads: list[ChannelPayload] = []


# ---------------------------------------------------------------------------
# Emojis & stickers
# ---------------------------------------------------------------------------
class EmojiPayload(GatewayModel):
    id: int | None = None
    name: str | None = None
    animated: bool = False
    available: bool = True
    managed: bool = False
    require_colons: bool = False
    roles: list[int] = []
    user: UserPayload | None = None


class StickerPayload(GatewayModel):
    id: int
    guild_id: int | None = None
    name: str = ""
    description: str | None = None
    tags: str = ""
    type: int = 2
    format_type: int = 1
    available: bool = True
    pack_id: int | None = None
    sort_value: int | None = None
    user: UserPayload | None = None


class StickerItemPayload(GatewayModel):
    id: int
    name: str = ""
    format_type: int = 1


class GuildEmojisPayload(GatewayModel):
    guild_id: int
    emojis: list[EmojiPayload] = []


class GuildStickersPayload(GatewayModel):
    guild_id: int
    stickers: list[StickerPayload] = []


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------
class MemberPayload(GatewayModel):
    """A guild member; also used for the partial GUILD_MEMBER_UPDATE."""

    guild_id: int | None = None
    user: UserPayload
    nick: str | None = None
    avatar: str | None = None
    roles: list[int] = []
    joined_at: str | None = None
    premium_since: str | None = None
    deaf: bool = False
    mute: bool = False
    pending: bool = False
    communication_disabled_until: str | None = None


class GuildMemberRemovePayload(GatewayModel):
    guild_id: int
    user: UserPayload


class ActivityEmojiPayload(GatewayModel):
    name: str | None = None
    id: int | None = None
    animated: bool | None = None


class ActivityTimestampsPayload(GatewayModel):
    start: int | None = None
    end: int | None = None


class ActivityPartyPayload(GatewayModel):
    id: str | None = None
    size: list[int] | None = None


class ActivityAssetsPayload(GatewayModel):
    large_image: str | None = None
    large_text: str | None = None
    small_image: str | None = None
    small_text: str | None = None


class ActivityPayload(GatewayModel):
    name: str = ""
    type: int = 0
    url: str | None = None
    created_at: int | None = None
    timestamps: ActivityTimestampsPayload | None = None
    application_id: int | None = None
    details: str | None = None
    state: str | None = None
    emoji: ActivityEmojiPayload | None = None
    party: ActivityPartyPayload | None = None
    assets: ActivityAssetsPayload | None = None
    instance: bool | None = None
    flags: int | None = None


class PresencePayload(GatewayModel):
    user: IdRef
    guild_id: int | None = None
    status: str = "offline"
    activities: list[ActivityPayload] = []


class GuildMembersChunkPayload(GatewayModel):
    guild_id: int
    members: list[MemberPayload] = []
    presences: list[PresencePayload] = []


class GuildBanPayload(GatewayModel):
    guild_id: int
    user: UserPayload


# ---------------------------------------------------------------------------
# Guild-owned odds and ends
# ---------------------------------------------------------------------------
class StageInstancePayload(GatewayModel):
    id: int
    guild_id: int
    channel_id: int
    topic: str = ""
    privacy_level: int = 2
    guild_scheduled_event_id: int | None = None


class AutoModerationRulePayload(GatewayModel):
    id: int
    guild_id: int
    name: str = ""
    creator_id: int | None = None
    event_type: int = 1
    trigger_type: int = 1
    enabled: bool = False
    exempt_roles: list[int] = []
    exempt_channels: list[int] = []


# ---------------------------------------------------------------------------
# Guilds
# ---------------------------------------------------------------------------
class GuildPayload(GatewayModel):
    """GUILD_CREATE snapshot; also parses the partial GUILD_UPDATE."""

    id: int
    name: str = ""
    owner_id: int | None = None
    icon: str | None = None
    splash: str | None = None
    discovery_splash: str | None = None
    banner: str | None = None
    description: str | None = None
    afk_channel_id: int | None = None
    afk_timeout: int = 0
    application_id: int | None = None
    default_message_notifications: int = 0
    explicit_content_filter: int = 0
    features: list[str] = []
    joined_at: str | None = None
    large: bool = False
    max_members: int | None = None
    max_presences: int | None = None
    max_video_channel_users: int | None = None
    mfa_level: int = 0
    nsfw_level: int = 0
    preferred_locale: str = "en-US"
    premium_progress_bar_enabled: bool = False
    premium_subscription_count: int | None = None
    premium_tier: int = 0
    rules_channel_id: int | None = None
    system_channel_flags: int = 0
    system_channel_id: int | None = None
    unavailable: bool = False
    vanity_url_code: str | None = None
    verification_level: int = 0
    widget_channel_id: int | None = None
    widget_enabled: bool | None = None

    roles: list[RolePayload] = []
    channels: list[ChannelPayload] = []
    threads: list[ChannelPayload] = []
    emojis: list[EmojiPayload] = []
    stickers: list[StickerPayload] = []
    members: list[MemberPayload] = []
    presences: list[PresencePayload] = []
    stage_instances: list[StageInstancePayload] = []


class UnavailableGuildPayload(GatewayModel):
    id: int
    unavailable: bool = False


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
class EmbedFieldPayload(GatewayModel):
    name: str = ""
    value: str = ""
    inline: bool = False


class EmbedAuthorPayload(GatewayModel):
    name: str | None = None
    url: str | None = None
    icon_url: str | None = None
    proxy_icon_url: str | None = None


class EmbedFooterPayload(GatewayModel):
    text: str | None = None
    icon_url: str | None = None
    proxy_icon_url: str | None = None


class EmbedMediaPayload(GatewayModel):
    url: str | None = None
    proxy_url: str | None = None
    height: int | None = None
    width: int | None = None


class EmbedProviderPayload(GatewayModel):
    name: str | None = None
    url: str | None = None


class EmbedPayload(GatewayModel):
    type: str = "rich"
    title: str | None = None
    description: str | None = None
    url: str | None = None
    timestamp: str | None = None
    color: int | None = None
    author: EmbedAuthorPayload | None = None
    footer: EmbedFooterPayload | None = None
    image: EmbedMediaPayload | None = None
    thumbnail: EmbedMediaPayload | None = None
    video: EmbedMediaPayload | None = None
    provider: EmbedProviderPayload | None = None
    fields: list[EmbedFieldPayload] = []


class AttachmentPayload(GatewayModel):
    id: int
    filename: str = ""
    description: str | None = None
    content_type: str | None = None
    size: int = 0
    url: str = ""
    proxy_url: str = ""
    height: int | None = None
    width: int | None = None
    ephemeral: bool = False


class ReactionEmojiPayload(GatewayModel):
    id: int | None = None
    name: str | None = None
    animated: bool = False


class ReactionPayload(GatewayModel):
    count: int = 1
    me: bool = False
    emoji: ReactionEmojiPayload


class MessageActivityPayload(GatewayModel):
    type: int
    party_id: str | None = None


class MessageReferencePayload(GatewayModel):
    message_id: int | None = None
    channel_id: int | None = None
    guild_id: int | None = None


class MessagePayload(GatewayModel):
    """MESSAGE_CREATE; also parses the partial MESSAGE_UPDATE."""

    id: int
    channel_id: int
    guild_id: int | None = None
    author: UserPayload | None = None
    content: str = ""
    timestamp: str | None = None
    edited_timestamp: str | None = None
    type: int = 0
    flags: int | None = None
    tts: bool = False
    mention_everyone: bool = False
    pinned: bool = False
    webhook_id: int | None = None
    application_id: int | None = None
    activity: MessageActivityPayload | None = None
    message_reference: MessageReferencePayload | None = None
    referenced_message: IdRef | None = None
    thread: IdRef | None = None
    embeds: list[EmbedPayload] = []
    attachments: list[AttachmentPayload] = []
    reactions: list[ReactionPayload] = []
    sticker_items: list[StickerItemPayload] = []


class MessageDeletePayload(GatewayModel):
    id: int
    channel_id: int
    guild_id: int | None = None


class MessageDeleteBulkPayload(GatewayModel):
    ids: list[int]
    channel_id: int
    guild_id: int | None = None


class ReactionEventPayload(GatewayModel):
    """MESSAGE_REACTION_ADD / MESSAGE_REACTION_REMOVE."""

    user_id: int
    channel_id: int
    message_id: int
    guild_id: int | None = None
    emoji: ReactionEmojiPayload


class ReactionRemoveAllPayload(GatewayModel):
    channel_id: int
    message_id: int
    guild_id: int | None = None


class ReactionRemoveEmojiPayload(GatewayModel):
    channel_id: int
    message_id: int
    guild_id: int | None = None
    emoji: ReactionEmojiPayload


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
class ReadyPayload(GatewayModel):
    user: UserPayload
    session_id: str | None = None
