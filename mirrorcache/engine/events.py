"""
mirrorcache.engine.events — GatewayEvent and EventType
=======================================================

The tagged event envelope the synchronizer consumes.  A raw gateway
dispatch (``t`` + ``d``) is turned into a :class:`GatewayEvent` by
:func:`parse_event`, which validates ``d`` against the payload model for
that event type.

Dispatch types the cache has no use for (typing, voice, invites, ...) are
still enumerated so they can be recognised; they have no payload model and
:func:`parse_event` returns ``None`` for them.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from mirrorcache.engine import payloads as p

__all__ = ["EventType", "GatewayEvent", "Handler", "PAYLOAD_MODELS", "parse_event"]

# Coroutine applying one validated payload.
Handler = Callable[[Any], Awaitable[None]]


class EventType(enum.StrEnum):
    """Gateway dispatch event names."""
    READY = "READY"
    RESUMED = "RESUMED"
    USER_UPDATE = "USER_UPDATE"

    CHANNEL_CREATE = "CHANNEL_CREATE"
    CHANNEL_UPDATE = "CHANNEL_UPDATE"
    CHANNEL_DELETE = "CHANNEL_DELETE"
    CHANNEL_PINS_UPDATE = "CHANNEL_PINS_UPDATE"
    THREAD_CREATE = "THREAD_CREATE"
    THREAD_UPDATE = "THREAD_UPDATE"
    THREAD_DELETE = "THREAD_DELETE"
    THREAD_LIST_SYNC = "THREAD_LIST_SYNC"
    THREAD_MEMBER_UPDATE = "THREAD_MEMBER_UPDATE"
    THREAD_MEMBERS_UPDATE = "THREAD_MEMBERS_UPDATE"

    GUILD_CREATE = "GUILD_CREATE"
    GUILD_UPDATE = "GUILD_UPDATE"
    GUILD_DELETE = "GUILD_DELETE"
    GUILD_AUDIT_LOG_ENTRY_CREATE = "GUILD_AUDIT_LOG_ENTRY_CREATE"
    GUILD_BAN_ADD = "GUILD_BAN_ADD"
    GUILD_BAN_REMOVE = "GUILD_BAN_REMOVE"
    GUILD_EMOJIS_UPDATE = "GUILD_EMOJIS_UPDATE"
    GUILD_STICKERS_UPDATE = "GUILD_STICKERS_UPDATE"
    GUILD_INTEGRATIONS_UPDATE = "GUILD_INTEGRATIONS_UPDATE"
    GUILD_MEMBER_ADD = "GUILD_MEMBER_ADD"
    GUILD_MEMBER_UPDATE = "GUILD_MEMBER_UPDATE"
    GUILD_MEMBER_REMOVE = "GUILD_MEMBER_REMOVE"
    GUILD_MEMBERS_CHUNK = "GUILD_MEMBERS_CHUNK"
    GUILD_ROLE_CREATE = "GUILD_ROLE_CREATE"
    GUILD_ROLE_UPDATE = "GUILD_ROLE_UPDATE"
    GUILD_ROLE_DELETE = "GUILD_ROLE_DELETE"
    GUILD_SCHEDULED_EVENT_CREATE = "GUILD_SCHEDULED_EVENT_CREATE"
    GUILD_SCHEDULED_EVENT_UPDATE = "GUILD_SCHEDULED_EVENT_UPDATE"
    GUILD_SCHEDULED_EVENT_DELETE = "GUILD_SCHEDULED_EVENT_DELETE"
    GUILD_SCHEDULED_EVENT_USER_ADD = "GUILD_SCHEDULED_EVENT_USER_ADD"
    GUILD_SCHEDULED_EVENT_USER_REMOVE = "GUILD_SCHEDULED_EVENT_USER_REMOVE"

    AUTO_MODERATION_RULE_CREATE = "AUTO_MODERATION_RULE_CREATE"
    AUTO_MODERATION_RULE_UPDATE = "AUTO_MODERATION_RULE_UPDATE"
    AUTO_MODERATION_RULE_DELETE = "AUTO_MODERATION_RULE_DELETE"
    AUTO_MODERATION_ACTION_EXECUTION = "AUTO_MODERATION_ACTION_EXECUTION"

    STAGE_INSTANCE_CREATE = "STAGE_INSTANCE_CREATE"
    STAGE_INSTANCE_UPDATE = "STAGE_INSTANCE_UPDATE"
    STAGE_INSTANCE_DELETE = "STAGE_INSTANCE_DELETE"

    MESSAGE_CREATE = "MESSAGE_CREATE"
    MESSAGE_UPDATE = "MESSAGE_UPDATE"
    MESSAGE_DELETE = "MESSAGE_DELETE"
    MESSAGE_DELETE_BULK = "MESSAGE_DELETE_BULK"
    MESSAGE_REACTION_ADD = "MESSAGE_REACTION_ADD"
    MESSAGE_REACTION_REMOVE = "MESSAGE_REACTION_REMOVE"
    MESSAGE_REACTION_REMOVE_ALL = "MESSAGE_REACTION_REMOVE_ALL"
    MESSAGE_REACTION_REMOVE_EMOJI = "MESSAGE_REACTION_REMOVE_EMOJI"

    PRESENCE_UPDATE = "PRESENCE_UPDATE"
    TYPING_START = "TYPING_START"
    VOICE_STATE_UPDATE = "VOICE_STATE_UPDATE"
    VOICE_SERVER_UPDATE = "VOICE_SERVER_UPDATE"
    INVITE_CREATE = "INVITE_CREATE"
    INVITE_DELETE = "INVITE_DELETE"
    INTEGRATION_CREATE = "INTEGRATION_CREATE"
    INTEGRATION_UPDATE = "INTEGRATION_UPDATE"
    INTEGRATION_DELETE = "INTEGRATION_DELETE"
    INTERACTION_CREATE = "INTERACTION_CREATE"
    WEBHOOKS_UPDATE = "WEBHOOKS_UPDATE"
    APPLICATION_COMMAND_PERMISSIONS_UPDATE = "APPLICATION_COMMAND_PERMISSIONS_UPDATE"


# ---------------------------------------------------------------------------
# Payload model per event type the cache acts on
# ---------------------------------------------------------------------------
PAYLOAD_MODELS: dict[EventType, type[p.GatewayModel]] = {
    EventType.READY: p.ReadyPayload,
    EventType.USER_UPDATE: p.UserPayload,

    EventType.CHANNEL_CREATE: p.ChannelPayload,
    EventType.CHANNEL_UPDATE: p.ChannelPayload,
    EventType.CHANNEL_DELETE: p.ChannelPayload,
    EventType.THREAD_CREATE: p.ChannelPayload,
    EventType.THREAD_UPDATE: p.ChannelPayload,
    EventType.THREAD_DELETE: p.ChannelPayload,
    EventType.THREAD_LIST_SYNC: p.ThreadListSyncPayload,

    EventType.GUILD_CREATE: p.GuildPayload,
    EventType.GUILD_UPDATE: p.GuildPayload,
    EventType.GUILD_DELETE: p.UnavailableGuildPayload,
    EventType.GUILD_BAN_ADD: p.GuildBanPayload,
    EventType.GUILD_BAN_REMOVE: p.GuildBanPayload,
    EventType.GUILD_EMOJIS_UPDATE: p.GuildEmojisPayload,
    EventType.GUILD_STICKERS_UPDATE: p.GuildStickersPayload,
    EventType.GUILD_MEMBER_ADD: p.MemberPayload,
    EventType.GUILD_MEMBER_UPDATE: p.MemberPayload,
    EventType.GUILD_MEMBER_REMOVE: p.GuildMemberRemovePayload,
    EventType.GUILD_MEMBERS_CHUNK: p.GuildMembersChunkPayload,
    EventType.GUILD_ROLE_CREATE: p.GuildRolePayload,
    EventType.GUILD_ROLE_UPDATE: p.GuildRolePayload,
    EventType.GUILD_ROLE_DELETE: p.GuildRoleDeletePayload,

    EventType.AUTO_MODERATION_RULE_CREATE: p.AutoModerationRulePayload,
    EventType.AUTO_MODERATION_RULE_UPDATE: p.AutoModerationRulePayload,
    EventType.AUTO_MODERATION_RULE_DELETE: p.AutoModerationRulePayload,

    EventType.STAGE_INSTANCE_CREATE: p.StageInstancePayload,
    EventType.STAGE_INSTANCE_UPDATE: p.StageInstancePayload,
    EventType.STAGE_INSTANCE_DELETE: p.StageInstancePayload,

    EventType.MESSAGE_CREATE: p.MessagePayload,
    EventType.MESSAGE_UPDATE: p.MessagePayload,
    EventType.MESSAGE_DELETE: p.MessageDeletePayload,
    EventType.MESSAGE_DELETE_BULK: p.MessageDeleteBulkPayload,
    EventType.MESSAGE_REACTION_ADD: p.ReactionEventPayload,
    EventType.MESSAGE_REACTION_REMOVE: p.ReactionEventPayload,
    EventType.MESSAGE_REACTION_REMOVE_ALL: p.ReactionRemoveAllPayload,
    EventType.MESSAGE_REACTION_REMOVE_EMOJI: p.ReactionRemoveEmojiPayload,

    EventType.PRESENCE_UPDATE: p.PresencePayload,
}


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class GatewayEvent:
    """One parsed dispatch event."""

    type: EventType
    payload: p.GatewayModel

    @property
    def partition(self) -> int | None:
        """Guild the event belongs to, or ``None`` for the user-global stream.

        Events of one partition must be applied in arrival order.
        """
        if isinstance(self.payload, (p.GuildPayload, p.UnavailableGuildPayload)):
            return self.payload.id
        return getattr(self.payload, "guild_id", None)


def parse_event(name: str, data: dict[str, Any]) -> GatewayEvent | None:
    """Build a :class:`GatewayEvent` from a dispatch name and its ``d`` data.

    Returns ``None`` for dispatch types the cache does not act on.  Raises
    :class:`pydantic.ValidationError` for malformed payloads.
    """
    try:
        event_type = EventType(name)
    except ValueError:
        return None
    model = PAYLOAD_MODELS.get(event_type)
    if model is None:
        return None
    return GatewayEvent(event_type, model.model_validate(data))
