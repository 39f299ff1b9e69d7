"""
mirrorcache.engine.models — Cached Entity Shapes
=================================================

Every row the cache stores is one of the frozen dataclasses below.  They
are projections of gateway objects: nested objects are flattened, owned
collections are split out into their own entities (keyed back to the
owner), and fields that go stale without extra bookkeeping are dropped
(last-message pointers, member counts, channel recipients).

Translation from the wire is done by the ``from_payload`` classmethods.
Partial updates go through ``update(payload)``, which returns a new
instance carrying only the fields that were present in the frame.

Normalization choices:

* optional boolean flags treat "unset" as ``False`` (``nsfw``,
  ``invitable``, ``widget_enabled``, ...), so re-applying the same event
  always produces an identical row;
* the role tag ``premium_subscriber`` is *present as null* on the wire
  when true; presence maps to ``True``, absence to ``False``;
* sequences are stored as tuples so rows compare and hash by value;
* timestamps stay ISO-8601 strings exactly as received.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from mirrorcache.constants import OverwriteKind
from mirrorcache.errors import BadTimeoutTimestamp

if TYPE_CHECKING:
    from mirrorcache.engine.payloads import (
        ActivityPayload,
        AttachmentPayload,
        AutoModerationRulePayload,
        ChannelPayload,
        EmbedFieldPayload,
        EmbedPayload,
        EmojiPayload,
        GatewayModel,
        GuildPayload,
        MemberPayload,
        MessagePayload,
        OverwritePayload,
        PresencePayload,
        ReactionEmojiPayload,
        RolePayload,
        StageInstancePayload,
        StickerItemPayload,
        StickerPayload,
        UserPayload,
    )


def _merge(row, payload: GatewayModel, mapping: dict[str, str]):
    """Copy the fields of *payload* that were sent into *row*.

    *mapping* goes from payload field name to row field name.
    """
    changes = {
        target: getattr(payload, source)
        for source, target in mapping.items()
        if payload.present(source)
    }
    return replace(row, **changes) if changes else row


def parse_timestamp(value: str) -> datetime:
    """Parse a gateway ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CurrentUser:
    """The account the gateway session is logged in as."""

    id: int
    name: str
    discriminator: str
    global_name: str | None = None
    avatar: str | None = None
    bot: bool = False
    mfa_enabled: bool = False
    locale: str | None = None
    verified: bool = False
    email: str | None = None
    flags: int | None = None
    premium_type: int | None = None
    public_flags: int | None = None

    @classmethod
    def from_payload(cls, user: UserPayload) -> CurrentUser:
        return cls(
            id=user.id,
            name=user.username,
            discriminator=user.discriminator,
            global_name=user.global_name,
            avatar=user.avatar,
            bot=user.bot,
            mfa_enabled=bool(user.mfa_enabled),
            locale=user.locale,
            verified=bool(user.verified),
            email=user.email,
            flags=user.flags,
            premium_type=user.premium_type,
            public_flags=user.public_flags,
        )


# ---------------------------------------------------------------------------
# Guilds
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CachedGuild:
    """Guild scalars.  Channels, roles, members etc. are separate rows."""

    id: int
    name: str
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
    features: tuple[str, ...] = ()
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
    widget_enabled: bool = False

    @classmethod
    def from_payload(cls, guild: GuildPayload) -> CachedGuild:
        values = {f.name: getattr(guild, f.name) for f in fields(cls)}
        values["features"] = tuple(guild.features)
        values["widget_enabled"] = bool(guild.widget_enabled)
        return cls(**values)

    def update(self, guild: GuildPayload) -> CachedGuild:
        merged = _merge(self, guild, {f.name: f.name for f in fields(self)})
        return replace(
            merged,
            features=tuple(merged.features),
            widget_enabled=bool(merged.widget_enabled),
        )


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CachedChannel:
    """A guild channel, thread or group DM.  Thread metadata is flattened."""

    id: int
    kind: int
    guild_id: int | None = None
    name: str | None = None
    position: int | None = None
    topic: str | None = None
    nsfw: bool = False
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
    thread_archived: bool = False
    thread_auto_archive_duration: int | None = None
    thread_archive_timestamp: str | None = None
    thread_locked: bool = False
    thread_invitable: bool = False
    thread_create_timestamp: str | None = None

    @classmethod
    def from_payload(
        cls, channel: ChannelPayload, guild_id: int | None = None
    ) -> CachedChannel:
        meta = channel.thread_metadata
        return cls(
            id=channel.id,
            kind=channel.type,
            guild_id=channel.guild_id if channel.guild_id is not None else guild_id,
            name=channel.name,
            position=channel.position,
            topic=channel.topic,
            nsfw=bool(channel.nsfw),
            parent_id=channel.parent_id,
            owner_id=channel.owner_id,
            application_id=channel.application_id,
            icon=channel.icon,
            bitrate=channel.bitrate,
            user_limit=channel.user_limit,
            rate_limit_per_user=channel.rate_limit_per_user,
            rtc_region=channel.rtc_region,
            video_quality_mode=channel.video_quality_mode,
            default_auto_archive_duration=channel.default_auto_archive_duration,
            thread_archived=meta.archived if meta else False,
            thread_auto_archive_duration=meta.auto_archive_duration if meta else None,
            thread_archive_timestamp=meta.archive_timestamp if meta else None,
            thread_locked=meta.locked if meta else False,
            thread_invitable=bool(meta.invitable) if meta else False,
            thread_create_timestamp=meta.create_timestamp if meta else None,
        )


@dataclass(frozen=True, slots=True)
class CachedPrivateChannel:
    """A DM channel, keyed by the channel and the user on the other end."""

    channel_id: int
    recipient_id: int


@dataclass(frozen=True, slots=True)
class CachedPermissionOverwrite:
    channel_id: int
    id: int
    kind: OverwriteKind
    allow: int
    deny: int

    @classmethod
    def from_payload(
        cls, overwrite: OverwritePayload, channel_id: int
    ) -> CachedPermissionOverwrite:
        return cls(
            channel_id=channel_id,
            id=overwrite.id,
            kind=OverwriteKind(overwrite.type),
            allow=overwrite.allow,
            deny=overwrite.deny,
        )


# ---------------------------------------------------------------------------
# Roles & members
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CachedRole:
    """A role definition (``user_id is None``) or a member's copy of it."""

    id: int
    guild_id: int
    name: str
    user_id: int | None = None
    color: int = 0
    hoist: bool = False
    icon: str | None = None
    unicode_emoji: str | None = None
    position: int = 0
    permissions: int = 0
    managed: bool = False
    mentionable: bool = False
    tag_bot_id: int | None = None
    tag_integration_id: int | None = None
    tag_premium_subscriber: bool = False

    @classmethod
    def from_payload(cls, role: RolePayload, guild_id: int) -> CachedRole:
        tags = role.tags
        return cls(
            id=role.id,
            guild_id=guild_id,
            name=role.name,
            color=role.color,
            hoist=role.hoist,
            icon=role.icon,
            unicode_emoji=role.unicode_emoji,
            position=role.position,
            permissions=role.permissions,
            managed=role.managed,
            mentionable=role.mentionable,
            tag_bot_id=tags.bot_id if tags else None,
            tag_integration_id=tags.integration_id if tags else None,
            tag_premium_subscriber=tags.present("premium_subscriber") if tags else False,
        )

    @property
    def is_assignment(self) -> bool:
        return self.user_id is not None

    def assign(self, user_id: int) -> CachedRole:
        """Copy of this definition as held by *user_id*."""
        return replace(self, user_id=user_id)


_MEMBER_UPDATE_FIELDS: dict[str, str] = {
    "nick": "nick",
    "avatar": "guild_avatar",
    "joined_at": "joined_at",
    "premium_since": "premium_since",
    "deaf": "deaf",
    "mute": "mute",
    "pending": "pending",
    "communication_disabled_until": "communication_disabled_until",
}

_USER_FIELDS: dict[str, str] = {
    "username": "name",
    "discriminator": "discriminator",
    "global_name": "global_name",
    "avatar": "avatar",
    "banner": "banner",
    "accent_color": "accent_color",
    "bot": "bot",
    "system": "system",
    "flags": "flags",
    "public_flags": "public_flags",
    "premium_type": "premium_type",
    "locale": "locale",
    "mfa_enabled": "mfa_enabled",
}


@dataclass(frozen=True, slots=True)
class CachedMember:
    """A guild member with its user flattened in.

    Role ids are not kept here; each held role is a :class:`CachedRole`
    assignment row.
    """

    guild_id: int
    id: int
    name: str
    discriminator: str = "0"
    nick: str | None = None
    guild_avatar: str | None = None
    joined_at: str | None = None
    premium_since: str | None = None
    deaf: bool = False
    mute: bool = False
    pending: bool = False
    communication_disabled_until: str | None = None
    global_name: str | None = None
    avatar: str | None = None
    banner: str | None = None
    accent_color: int | None = None
    bot: bool = False
    system: bool = False
    flags: int | None = None
    public_flags: int | None = None
    premium_type: int | None = None
    locale: str | None = None
    mfa_enabled: bool = False

    @classmethod
    def from_payload(cls, member: MemberPayload, guild_id: int) -> CachedMember:
        user = member.user
        return cls(
            guild_id=guild_id,
            id=user.id,
            name=user.username,
            discriminator=user.discriminator,
            nick=member.nick,
            guild_avatar=member.avatar,
            joined_at=member.joined_at,
            premium_since=member.premium_since,
            deaf=member.deaf,
            mute=member.mute,
            pending=member.pending,
            communication_disabled_until=member.communication_disabled_until,
            global_name=user.global_name,
            avatar=user.avatar,
            banner=user.banner,
            accent_color=user.accent_color,
            bot=user.bot,
            system=bool(user.system),
            flags=user.flags,
            public_flags=user.public_flags,
            premium_type=user.premium_type,
            locale=user.locale,
            mfa_enabled=bool(user.mfa_enabled),
        )

    def update(self, member: MemberPayload) -> CachedMember:
        merged = _merge(self, member, _MEMBER_UPDATE_FIELDS)
        if member.present("user"):
            merged = _merge(merged, member.user, _USER_FIELDS)
            merged = replace(
                merged,
                system=bool(merged.system),
                mfa_enabled=bool(merged.mfa_enabled),
            )
        return merged

    def communication_disabled(self, now: datetime) -> bool:
        """Whether the member is timed out at *now* (an aware datetime).

        Raises :class:`BadTimeoutTimestamp` if the stored value does not
        parse.
        """
        if self.communication_disabled_until is None:
            return False
        try:
            until = parse_timestamp(self.communication_disabled_until)
        except ValueError as exc:
            raise BadTimeoutTimestamp(
                self.guild_id, self.id, self.communication_disabled_until
            ) from exc
        return until > now


# ---------------------------------------------------------------------------
# Emojis & stickers
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CachedEmoji:
    id: int
    guild_id: int
    name: str | None = None
    animated: bool = False
    available: bool = True
    managed: bool = False
    require_colons: bool = False
    roles: tuple[int, ...] = ()
    user_id: int | None = None

    @classmethod
    def from_payload(cls, emoji: EmojiPayload, guild_id: int) -> CachedEmoji:
        return cls(
            id=emoji.id,
            guild_id=guild_id,
            name=emoji.name,
            animated=emoji.animated,
            available=emoji.available,
            managed=emoji.managed,
            require_colons=emoji.require_colons,
            roles=tuple(emoji.roles),
            user_id=emoji.user.id if emoji.user else None,
        )


@dataclass(frozen=True, slots=True)
class CachedSticker:
    """A sticker uploaded to a guild."""

    id: int
    guild_id: int
    name: str
    description: str | None = None
    tags: str = ""
    kind: int = 2
    format_type: int = 1
    available: bool = True
    pack_id: int | None = None
    sort_value: int | None = None
    user_id: int | None = None

    @classmethod
    def from_payload(cls, sticker: StickerPayload, guild_id: int) -> CachedSticker:
        return cls(
            id=sticker.id,
            guild_id=guild_id,
            name=sticker.name,
            description=sticker.description,
            tags=sticker.tags,
            kind=sticker.type,
            format_type=sticker.format_type,
            available=sticker.available,
            pack_id=sticker.pack_id,
            sort_value=sticker.sort_value,
            user_id=sticker.user.id if sticker.user else None,
        )


@dataclass(frozen=True, slots=True)
class CachedMessageSticker:
    """A sticker as attached to one message."""

    message_id: int
    id: int
    name: str
    format_type: int

    @classmethod
    def from_payload(
        cls, item: StickerItemPayload, message_id: int
    ) -> CachedMessageSticker:
        return cls(
            message_id=message_id,
            id=item.id,
            name=item.name,
            format_type=item.format_type,
        )


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
_MESSAGE_UPDATE_FIELDS: dict[str, str] = {
    "content": "content",
    "edited_timestamp": "edited_timestamp",
    "flags": "flags",
    "tts": "tts",
    "mention_everyone": "mention_everyone",
    "pinned": "pinned",
}


@dataclass(frozen=True, slots=True)
class CachedMessage:
    id: int
    channel_id: int
    guild_id: int | None = None
    author_id: int | None = None
    content: str = ""
    timestamp: str | None = None
    edited_timestamp: str | None = None
    kind: int = 0
    flags: int | None = None
    tts: bool = False
    mention_everyone: bool = False
    pinned: bool = False
    webhook_id: int | None = None
    application_id: int | None = None
    activity_type: int | None = None
    activity_party_id: str | None = None
    reference_channel_id: int | None = None
    reference_guild_id: int | None = None
    reference_message_id: int | None = None
    referenced_message_id: int | None = None
    thread_id: int | None = None

    @classmethod
    def from_payload(cls, message: MessagePayload) -> CachedMessage:
        activity = message.activity
        reference = message.message_reference
        return cls(
            id=message.id,
            channel_id=message.channel_id,
            guild_id=message.guild_id,
            author_id=message.author.id if message.author else None,
            content=message.content,
            timestamp=message.timestamp,
            edited_timestamp=message.edited_timestamp,
            kind=message.type,
            flags=message.flags,
            tts=message.tts,
            mention_everyone=message.mention_everyone,
            pinned=message.pinned,
            webhook_id=message.webhook_id,
            application_id=message.application_id,
            activity_type=activity.type if activity else None,
            activity_party_id=activity.party_id if activity else None,
            reference_channel_id=reference.channel_id if reference else None,
            reference_guild_id=reference.guild_id if reference else None,
            reference_message_id=reference.message_id if reference else None,
            referenced_message_id=(
                message.referenced_message.id if message.referenced_message else None
            ),
            thread_id=message.thread.id if message.thread else None,
        )

    def update(self, message: MessagePayload) -> CachedMessage:
        return _merge(self, message, _MESSAGE_UPDATE_FIELDS)


def embed_id(message_id: int, position: int) -> str:
    """Synthetic embed key: the owning message and the embed's index in it."""
    return f"{message_id}:{position}"


@dataclass(frozen=True, slots=True)
class CachedEmbed:
    id: str
    message_id: int
    position: int
    kind: str = "rich"
    title: str | None = None
    description: str | None = None
    url: str | None = None
    timestamp: str | None = None
    color: int | None = None
    author_name: str | None = None
    author_url: str | None = None
    author_icon_url: str | None = None
    author_proxy_icon_url: str | None = None
    footer_text: str | None = None
    footer_icon_url: str | None = None
    footer_proxy_icon_url: str | None = None
    image_url: str | None = None
    image_proxy_url: str | None = None
    image_height: int | None = None
    image_width: int | None = None
    thumbnail_url: str | None = None
    thumbnail_proxy_url: str | None = None
    thumbnail_height: int | None = None
    thumbnail_width: int | None = None
    video_url: str | None = None
    video_proxy_url: str | None = None
    video_height: int | None = None
    video_width: int | None = None
    provider_name: str | None = None
    provider_url: str | None = None

    @classmethod
    def from_payload(
        cls, embed: EmbedPayload, message_id: int, position: int
    ) -> CachedEmbed:
        author, footer, provider = embed.author, embed.footer, embed.provider
        image, thumbnail, video = embed.image, embed.thumbnail, embed.video
        return cls(
            id=embed_id(message_id, position),
            message_id=message_id,
            position=position,
            kind=embed.type,
            title=embed.title,
            description=embed.description,
            url=embed.url,
            timestamp=embed.timestamp,
            color=embed.color,
            author_name=author.name if author else None,
            author_url=author.url if author else None,
            author_icon_url=author.icon_url if author else None,
            author_proxy_icon_url=author.proxy_icon_url if author else None,
            footer_text=footer.text if footer else None,
            footer_icon_url=footer.icon_url if footer else None,
            footer_proxy_icon_url=footer.proxy_icon_url if footer else None,
            image_url=image.url if image else None,
            image_proxy_url=image.proxy_url if image else None,
            image_height=image.height if image else None,
            image_width=image.width if image else None,
            thumbnail_url=thumbnail.url if thumbnail else None,
            thumbnail_proxy_url=thumbnail.proxy_url if thumbnail else None,
            thumbnail_height=thumbnail.height if thumbnail else None,
            thumbnail_width=thumbnail.width if thumbnail else None,
            video_url=video.url if video else None,
            video_proxy_url=video.proxy_url if video else None,
            video_height=video.height if video else None,
            video_width=video.width if video else None,
            provider_name=provider.name if provider else None,
            provider_url=provider.url if provider else None,
        )


@dataclass(frozen=True, slots=True)
class CachedEmbedField:
    embed_id: str
    position: int
    name: str
    value: str
    inline: bool = False

    @classmethod
    def from_payload(
        cls, field: EmbedFieldPayload, embed_id: str, position: int
    ) -> CachedEmbedField:
        return cls(
            embed_id=embed_id,
            position=position,
            name=field.name,
            value=field.value,
            inline=field.inline,
        )


@dataclass(frozen=True, slots=True)
class CachedAttachment:
    id: int
    message_id: int
    filename: str
    description: str | None = None
    content_type: str | None = None
    size: int = 0
    url: str = ""
    proxy_url: str = ""
    height: int | None = None
    width: int | None = None
    ephemeral: bool = False

    @classmethod
    def from_payload(
        cls, attachment: AttachmentPayload, message_id: int
    ) -> CachedAttachment:
        return cls(
            id=attachment.id,
            message_id=message_id,
            filename=attachment.filename,
            description=attachment.description,
            content_type=attachment.content_type,
            size=attachment.size,
            url=attachment.url,
            proxy_url=attachment.proxy_url,
            height=attachment.height,
            width=attachment.width,
            ephemeral=attachment.ephemeral,
        )


def emoji_key(emoji: ReactionEmojiPayload) -> str:
    """Custom emojis are keyed by id, unicode emojis by the emoji itself."""
    if emoji.id is not None:
        return str(emoji.id)
    return emoji.name or ""


@dataclass(frozen=True, slots=True)
class CachedReaction:
    """One user's reaction to a message."""

    message_id: int
    user_id: int
    emoji: str
    channel_id: int | None = None
    guild_id: int | None = None


# ---------------------------------------------------------------------------
# Presences
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CachedPresence:
    guild_id: int
    user_id: int
    status: str

    @classmethod
    def from_payload(cls, presence: PresencePayload, guild_id: int) -> CachedPresence:
        return cls(guild_id=guild_id, user_id=presence.user.id, status=presence.status)


@dataclass(frozen=True, slots=True)
class CachedActivity:
    guild_id: int
    user_id: int
    position: int
    kind: int
    name: str
    url: str | None = None
    created_at: int | None = None
    timestamp_start: int | None = None
    timestamp_end: int | None = None
    application_id: int | None = None
    details: str | None = None
    state: str | None = None
    emoji_name: str | None = None
    emoji_id: int | None = None
    emoji_animated: bool = False
    party_id: str | None = None
    party_size_current: int | None = None
    party_size_max: int | None = None
    asset_large_image: str | None = None
    asset_large_text: str | None = None
    asset_small_image: str | None = None
    asset_small_text: str | None = None
    instance: bool = False
    flags: int | None = None

    @classmethod
    def from_payload(
        cls, activity: ActivityPayload, guild_id: int, user_id: int, position: int
    ) -> CachedActivity:
        stamps, emoji = activity.timestamps, activity.emoji
        party, assets = activity.party, activity.assets
        size = party.size if party and party.size and len(party.size) == 2 else None
        return cls(
            guild_id=guild_id,
            user_id=user_id,
            position=position,
            kind=activity.type,
            name=activity.name,
            url=activity.url,
            created_at=activity.created_at,
            timestamp_start=stamps.start if stamps else None,
            timestamp_end=stamps.end if stamps else None,
            application_id=activity.application_id,
            details=activity.details,
            state=activity.state,
            emoji_name=emoji.name if emoji else None,
            emoji_id=emoji.id if emoji else None,
            emoji_animated=bool(emoji.animated) if emoji else False,
            party_id=party.id if party else None,
            party_size_current=size[0] if size else None,
            party_size_max=size[1] if size else None,
            asset_large_image=assets.large_image if assets else None,
            asset_large_text=assets.large_text if assets else None,
            asset_small_image=assets.small_image if assets else None,
            asset_small_text=assets.small_text if assets else None,
            instance=bool(activity.instance),
            flags=activity.flags,
        )


# ---------------------------------------------------------------------------
# Guild-owned odds and ends
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CachedAutoModerationRule:
    id: int
    guild_id: int
    name: str
    creator_id: int | None = None
    event_type: int = 1
    trigger_type: int = 1
    enabled: bool = False
    exempt_roles: tuple[int, ...] = ()
    exempt_channels: tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, rule: AutoModerationRulePayload) -> CachedAutoModerationRule:
        return cls(
            id=rule.id,
            guild_id=rule.guild_id,
            name=rule.name,
            creator_id=rule.creator_id,
            event_type=rule.event_type,
            trigger_type=rule.trigger_type,
            enabled=rule.enabled,
            exempt_roles=tuple(rule.exempt_roles),
            exempt_channels=tuple(rule.exempt_channels),
        )


@dataclass(frozen=True, slots=True)
class CachedStageInstance:
    id: int
    guild_id: int
    channel_id: int
    topic: str
    privacy_level: int = 2
    guild_scheduled_event_id: int | None = None

    @classmethod
    def from_payload(cls, stage: StageInstancePayload) -> CachedStageInstance:
        return cls(
            id=stage.id,
            guild_id=stage.guild_id,
            channel_id=stage.channel_id,
            topic=stage.topic,
            privacy_level=stage.privacy_level,
            guild_scheduled_event_id=stage.guild_scheduled_event_id,
        )


@dataclass(frozen=True, slots=True)
class CachedBan:
    guild_id: int
    user_id: int
