"""
mirrorcache.errors — Error Taxonomy
====================================

Every failure the synchronizer or the permission resolver reports is a
:class:`MirrorCacheError`.  Three families exist:

* :class:`BackendError` — the storage layer failed.  Raised by backends,
  propagated untouched by the core.
* :class:`MissingPrerequisite` — something the operation depends on is not
  cached yet (current user, a role definition, a guild, ...).
* :class:`MalformedState` — cached or incoming data that cannot be
  interpreted (an unparsable timeout timestamp, a DM without a recipient).

The only failure that is *not* raised is a partial update for an entity the
cache has never seen; that event is skipped.
"""

from __future__ import annotations


class MirrorCacheError(Exception):
    """Base class for all cache errors."""


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
class BackendError(MirrorCacheError):
    """Raised by a :class:`~mirrorcache.engine.backend.Backend` when the
    underlying store fails.  The library error is chained as ``__cause__``.
    """

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        message = f"Backend operation '{operation}' failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Missing prerequisites
# ---------------------------------------------------------------------------
class MissingPrerequisite(MirrorCacheError):
    """An entity the operation depends on is not in the cache."""


class CurrentUserMissing(MissingPrerequisite):
    def __init__(self) -> None:
        super().__init__("The current user isn't in the cache (no READY yet)")


class MemberRoleMissing(MissingPrerequisite):
    def __init__(self, guild_id: int, user_id: int, role_id: int) -> None:
        self.guild_id = guild_id
        self.user_id = user_id
        self.role_id = role_id
        super().__init__(
            f"Role {role_id} assigned to member {user_id} in guild {guild_id} "
            "isn't cached"
        )


class GuildMissing(MissingPrerequisite):
    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        super().__init__(f"Guild {guild_id} isn't cached")


class ChannelMissing(MissingPrerequisite):
    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} isn't cached")


class MemberMissing(MissingPrerequisite):
    def __init__(self, guild_id: int, user_id: int) -> None:
        self.guild_id = guild_id
        self.user_id = user_id
        super().__init__(f"Member {user_id} of guild {guild_id} isn't cached")


class EveryoneRoleMissing(MissingPrerequisite):
    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        super().__init__(f"The @everyone role of guild {guild_id} isn't cached")


class ChannelNotInGuild(MissingPrerequisite):
    """The channel has no guild id, or belongs to a different guild."""

    def __init__(self, channel_id: int, guild_id: int | None = None) -> None:
        self.channel_id = channel_id
        self.guild_id = guild_id
        if guild_id is None:
            message = f"Channel {channel_id} has no guild id"
        else:
            message = f"Channel {channel_id} is not in guild {guild_id}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Malformed state
# ---------------------------------------------------------------------------
class MalformedState(MirrorCacheError):
    """Data that is present but cannot be interpreted."""


class BadTimeoutTimestamp(MalformedState):
    def __init__(self, guild_id: int, user_id: int, value: str) -> None:
        self.guild_id = guild_id
        self.user_id = user_id
        self.value = value
        super().__init__(
            f"Member {user_id} of guild {guild_id} has an invalid "
            f"communication_disabled_until timestamp: {value!r}"
        )


class PrivateChannelMissingRecipient(MalformedState):
    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        super().__init__(
            f"DM channel {channel_id} has no recipient other than the current user"
        )
