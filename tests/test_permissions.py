"""
tests/test_permissions.py — Permission Resolver Tests
======================================================
Tests the resolution order: owner bypass, role union, ADMINISTRATOR,
the three overwrite layers, and the timeout mask.

Bit values used below (from ``discord.Permissions``):
    ADMINISTRATOR        = 8
    VIEW_CHANNEL         = 1024
    SEND_MESSAGES        = 2048
    MANAGE_MESSAGES      = 8192
    READ_MESSAGE_HISTORY = 65536
"""

from __future__ import annotations

import discord
import pytest

from factories import (
    GUILD_ID,
    ME_ID,
    OTHER_ID,
    OWNER_ID,
    USER_ID,
    apply,
    channel,
    guild,
    in_seconds,
    member,
    overwrite,
    ready,
    role,
    run_async,
)
from mirrorcache.constants import TIMEOUT_ALLOWED
from mirrorcache.engine.models import CachedChannel
from mirrorcache.errors import (
    BadTimeoutTimestamp,
    ChannelMissing,
    ChannelNotInGuild,
    CurrentUserMissing,
    EveryoneRoleMissing,
    GuildMissing,
    MemberMissing,
)

ADMINISTRATOR = 8
VIEW = 1024
SEND = 2048
MANAGE = 8192
HISTORY = 65536

MOD_ROLE = 5
HELPER_ROLE = 6
ADMIN_ROLE = 7


def _seed(sync, *members, channels=(), everyone: int = VIEW | HISTORY) -> None:
    apply(sync, "GUILD_CREATE", guild(
        roles=[
            role(GUILD_ID, everyone, name="@everyone"),
            role(MOD_ROLE, MANAGE),
            role(HELPER_ROLE, SEND),
            role(ADMIN_ROLE, ADMINISTRATOR),
        ],
        members=list(members),
        channels=list(channels),
    ))


def _value(perms: discord.Permissions) -> int:
    return perms.value


# ---------------------------------------------------------------------------
# Guild level
# ---------------------------------------------------------------------------
class TestGuildPermissions:
    def test_everyone_and_role_bits_are_combined(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[MOD_ROLE, HELPER_ROLE]))
        perms = run_async(resolver.guild_permissions(USER_ID, GUILD_ID))
        assert _value(perms) == VIEW | HISTORY | MANAGE | SEND

    def test_member_without_roles_gets_everyone(self, sync, resolver):
        _seed(sync, member(USER_ID))
        assert _value(run_async(resolver.guild_permissions(USER_ID, GUILD_ID))) == VIEW | HISTORY

    def test_owner_gets_everything_without_membership(self, sync, resolver):
        _seed(sync, everyone=0)
        perms = run_async(resolver.guild_permissions(OWNER_ID, GUILD_ID))
        assert perms == discord.Permissions.all()

    def test_administrator_grants_everything(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[ADMIN_ROLE]))
        assert run_async(resolver.guild_permissions(USER_ID, GUILD_ID)) == discord.Permissions.all()

    def test_role_bits_follow_the_current_definition(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[HELPER_ROLE]))
        apply(sync, "GUILD_ROLE_UPDATE", {"guild_id": str(GUILD_ID), "role": role(HELPER_ROLE, 0)})
        assert _value(run_async(resolver.guild_permissions(USER_ID, GUILD_ID))) == VIEW | HISTORY


class TestMissingPrerequisites:
    def test_guild_missing(self, resolver):
        with pytest.raises(GuildMissing):
            run_async(resolver.guild_permissions(USER_ID, GUILD_ID))

    def test_everyone_role_missing(self, sync, resolver):
        apply(sync, "GUILD_CREATE", guild(roles=[], members=[member(USER_ID)]))
        with pytest.raises(EveryoneRoleMissing):
            run_async(resolver.guild_permissions(USER_ID, GUILD_ID))

    def test_member_missing(self, sync, resolver):
        _seed(sync)
        with pytest.raises(MemberMissing) as exc_info:
            run_async(resolver.guild_permissions(USER_ID, GUILD_ID))
        assert exc_info.value.user_id == USER_ID

    def test_channel_missing(self, sync, resolver):
        _seed(sync, member(USER_ID))
        with pytest.raises(ChannelMissing):
            run_async(resolver.channel_permissions(USER_ID, 404))
        with pytest.raises(ChannelMissing):
            run_async(resolver.resolve(USER_ID, GUILD_ID, 404))

    def test_channel_not_in_guild(self, sync, backend, resolver):
        _seed(sync, member(USER_ID))
        run_async(backend.upsert_channel(CachedChannel(id=31, kind=0)))
        with pytest.raises(ChannelNotInGuild):
            run_async(resolver.channel_permissions(USER_ID, 31))


# ---------------------------------------------------------------------------
# Channel overwrites
# ---------------------------------------------------------------------------
class TestOverwrites:
    def test_everyone_deny_then_role_allow(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[MOD_ROLE]), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(GUILD_ID, 0, deny=VIEW),
            overwrite(MOD_ROLE, 0, allow=VIEW),
        ])])
        perms = run_async(resolver.channel_permissions(USER_ID, 10))
        assert perms.view_channel

    def test_member_overwrite_beats_role_overwrite(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[MOD_ROLE]), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(MOD_ROLE, 0, allow=SEND),
            overwrite(USER_ID, 1, deny=SEND),
        ])])
        assert not run_async(resolver.channel_permissions(USER_ID, 10)).send_messages

    def test_member_allow_beats_everyone_deny(self, sync, resolver):
        _seed(sync, member(USER_ID), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(GUILD_ID, 0, deny=VIEW),
            overwrite(USER_ID, 1, allow=VIEW),
        ])])
        assert run_async(resolver.channel_permissions(USER_ID, 10)).view_channel

    def test_role_overwrites_are_unioned(self, sync, resolver):
        # One role allows what another denies: the allow wins.
        _seed(sync, member(USER_ID, roles=[MOD_ROLE, HELPER_ROLE]), channels=[
            channel(10, guild_id=None, overwrites=[
                overwrite(MOD_ROLE, 0, allow=SEND),
                overwrite(HELPER_ROLE, 0, deny=SEND),
            ]),
        ])
        assert run_async(resolver.channel_permissions(USER_ID, 10)).send_messages

    def test_overwrites_for_other_targets_are_ignored(self, sync, resolver):
        _seed(sync, member(USER_ID), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(OTHER_ID, 1, deny=VIEW),
            overwrite(MOD_ROLE, 0, deny=VIEW),
        ])])
        assert run_async(resolver.channel_permissions(USER_ID, 10)).view_channel

    def test_administrator_ignores_overwrites(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[ADMIN_ROLE]), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(USER_ID, 1, deny=VIEW | SEND),
        ])])
        assert run_async(resolver.channel_permissions(USER_ID, 10)) == discord.Permissions.all()

    def test_thread_takes_parent_overwrites(self, sync, resolver):
        _seed(sync, member(USER_ID), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(GUILD_ID, 0, deny=VIEW),
        ])])
        apply(sync, "THREAD_CREATE", channel(11, kind=11, parent_id="10"))

        assert not run_async(resolver.channel_permissions(USER_ID, 10)).view_channel
        assert not run_async(resolver.channel_permissions(USER_ID, 11)).view_channel

    def test_thread_with_uncached_parent_raises(self, sync, resolver):
        _seed(sync, member(USER_ID))
        apply(sync, "THREAD_CREATE", channel(11, kind=11, parent_id="404"))
        with pytest.raises(ChannelMissing) as exc_info:
            run_async(resolver.channel_permissions(USER_ID, 11))
        assert exc_info.value.channel_id == 404

    def test_channel_of_another_guild_is_rejected(self, sync, resolver):
        _seed(sync, member(USER_ID))
        apply(sync, "CHANNEL_CREATE", channel(20, guild_id=2000))
        with pytest.raises(ChannelNotInGuild) as exc_info:
            run_async(resolver.resolve(USER_ID, GUILD_ID, 20))
        assert exc_info.value.guild_id == GUILD_ID

    def test_resolve_and_channel_permissions_agree(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[HELPER_ROLE]), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(GUILD_ID, 0, deny=HISTORY),
        ])])
        assert run_async(resolver.resolve(USER_ID, GUILD_ID, 10)) == run_async(
            resolver.channel_permissions(USER_ID, 10)
        )


# ---------------------------------------------------------------------------
# Timeouts
# ---------------------------------------------------------------------------
class TestTimeouts:
    def test_timed_out_member_keeps_only_view_and_history(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[MOD_ROLE, HELPER_ROLE], communication_disabled_until=in_seconds(600)))
        perms = _value(run_async(resolver.guild_permissions(USER_ID, GUILD_ID)))
        assert perms == VIEW | HISTORY
        assert perms & ~TIMEOUT_ALLOWED == 0

    def test_timeout_mask_applies_after_overwrites(self, sync, resolver):
        _seed(
            sync,
            member(USER_ID, communication_disabled_until=in_seconds(600)),
            channels=[channel(10, guild_id=None, overwrites=[overwrite(USER_ID, 1, allow=SEND | MANAGE)])],
        )
        assert _value(run_async(resolver.channel_permissions(USER_ID, 10))) == VIEW | HISTORY

    def test_expired_timeout_has_no_effect(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[HELPER_ROLE], communication_disabled_until=in_seconds(-600)))
        assert run_async(resolver.guild_permissions(USER_ID, GUILD_ID)).send_messages

    def test_timed_out_administrator_keeps_everything(self, sync, resolver):
        _seed(sync, member(USER_ID, roles=[ADMIN_ROLE], communication_disabled_until=in_seconds(600)))
        assert run_async(resolver.guild_permissions(USER_ID, GUILD_ID)) == discord.Permissions.all()

    def test_bad_timestamp_raises(self, sync, resolver):
        _seed(sync, member(USER_ID, communication_disabled_until="soon"))
        with pytest.raises(BadTimeoutTimestamp):
            run_async(resolver.guild_permissions(USER_ID, GUILD_ID))


# ---------------------------------------------------------------------------
# Current-user forms
# ---------------------------------------------------------------------------
class TestSelfPermissions:
    def test_requires_current_user(self, sync, resolver):
        _seed(sync, member(ME_ID))
        with pytest.raises(CurrentUserMissing):
            run_async(resolver.self_guild_permissions(GUILD_ID))
        with pytest.raises(CurrentUserMissing):
            run_async(resolver.self_channel_permissions(10))

    def test_self_forms_resolve_for_current_user(self, sync, resolver):
        apply(sync, "READY", ready())
        _seed(sync, member(ME_ID, roles=[HELPER_ROLE]), channels=[channel(10, guild_id=None, overwrites=[
            overwrite(ME_ID, 1, deny=SEND),
        ])])

        assert run_async(resolver.self_guild_permissions(GUILD_ID)).send_messages
        assert not run_async(resolver.self_channel_permissions(10)).send_messages
