"""
mirrorcache.constants — Shared Constants
=========================================

Channel kinds, overwrite kinds and the permission bit sets the resolver
works with.  Bit values come from :class:`discord.Permissions` so they stay
in step with the gateway protocol.
"""

from __future__ import annotations

import enum

import discord

# ---------------------------------------------------------------------------
# Channel kinds
# ---------------------------------------------------------------------------
PRIVATE_CHANNEL: int = discord.ChannelType.private.value

THREAD_CHANNELS: frozenset[int] = frozenset({
    discord.ChannelType.news_thread.value,
    discord.ChannelType.public_thread.value,
    discord.ChannelType.private_thread.value,
})


class OverwriteKind(enum.IntEnum):
    """Subject of a channel permission overwrite."""
    ROLE = 0
    MEMBER = 1


# ---------------------------------------------------------------------------
# Permission bits
# ---------------------------------------------------------------------------
ADMINISTRATOR: int = discord.Permissions(administrator=True).value

ALL_PERMISSIONS: int = discord.Permissions.all().value

# What a timed-out member keeps.
TIMEOUT_ALLOWED: int = discord.Permissions(
    view_channel=True,
    read_message_history=True,
).value
