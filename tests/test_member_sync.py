"""
tests/test_member_sync.py — Member, Role & Presence Synchronization Tests
==========================================================================
"""

from __future__ import annotations

import pytest

from factories import GUILD_ID, OTHER_ID, USER_ID, apply, guild, member, presence, role, run_async
from mirrorcache.errors import MemberRoleMissing


@pytest.fixture
def seeded(sync):
    """A cached guild with roles 5, 6 and 7 and one member holding 5 and 6."""
    apply(sync, "GUILD_CREATE", guild(
        roles=[role(GUILD_ID, name="@everyone"), role(5, 8), role(6, 16), role(7, 32)],
        members=[member(USER_ID, roles=[5, 6], nick="nick", pending=False)],
    ))
    return sync


def _member_roles(backend, user_id: int = USER_ID) -> set[int]:
    return {r.id for r in run_async(backend.list_member_roles(GUILD_ID, user_id))}


def _update(user_id: int = USER_ID, **fields) -> dict:
    return {"guild_id": str(GUILD_ID), "user": {"id": str(user_id)}, **fields}


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------
class TestMemberAdd:
    def test_add_caches_member_and_assignments(self, seeded, backend):
        apply(seeded, "GUILD_MEMBER_ADD", {**member(OTHER_ID, roles=[7]), "guild_id": str(GUILD_ID)})

        assert run_async(backend.get_member(GUILD_ID, OTHER_ID)).name == f"user{OTHER_ID}"
        assert _member_roles(backend, OTHER_ID) == {7}

    def test_add_with_unknown_role_writes_nothing(self, seeded, backend):
        with pytest.raises(MemberRoleMissing) as exc_info:
            apply(seeded, "GUILD_MEMBER_ADD", {**member(OTHER_ID, roles=[99]), "guild_id": str(GUILD_ID)})

        assert exc_info.value.role_id == 99
        assert run_async(backend.get_member(GUILD_ID, OTHER_ID)) is None


class TestMemberUpdate:
    def test_partial_update_preserves_other_fields(self, seeded, backend):
        apply(seeded, "GUILD_MEMBER_UPDATE", _update(pending=True))

        cached = run_async(backend.get_member(GUILD_ID, USER_ID))
        assert cached.pending is True
        assert cached.nick == "nick"
        assert _member_roles(backend) == {5, 6}

    def test_role_list_replaces_assignments(self, seeded, backend):
        apply(seeded, "GUILD_MEMBER_UPDATE", _update(roles=["6", "7"]))
        assert _member_roles(backend) == {6, 7}

    def test_empty_role_list_clears_assignments(self, seeded, backend):
        apply(seeded, "GUILD_MEMBER_UPDATE", _update(roles=[]))
        assert _member_roles(backend) == set()

    def test_unknown_role_keeps_previous_assignments(self, seeded, backend):
        with pytest.raises(MemberRoleMissing):
            apply(seeded, "GUILD_MEMBER_UPDATE", _update(roles=["6", "99"], nick="changed"))

        assert _member_roles(backend) == {5, 6}
        assert run_async(backend.get_member(GUILD_ID, USER_ID)).nick == "nick"

    def test_update_of_uncached_member_is_skipped(self, seeded, backend):
        apply(seeded, "GUILD_MEMBER_UPDATE", _update(OTHER_ID, roles=["5"]))

        assert run_async(backend.get_member(GUILD_ID, OTHER_ID)) is None
        assert _member_roles(backend, OTHER_ID) == set()


class TestMemberRemove:
    def test_remove_deletes_member_roles_and_presence(self, seeded, backend):
        apply(seeded, "PRESENCE_UPDATE", presence(USER_ID, activities=[{"name": "chess"}]))
        apply(seeded, "GUILD_MEMBER_REMOVE", {"guild_id": str(GUILD_ID), "user": {"id": str(USER_ID)}})

        assert run_async(backend.get_member(GUILD_ID, USER_ID)) is None
        assert _member_roles(backend) == set()
        assert run_async(backend.get_presence(GUILD_ID, USER_ID)) is None
        assert run_async(backend.list_user_activities(GUILD_ID, USER_ID)) == []
        # The role definitions survive.
        assert run_async(backend.get_role(5)) is not None


class TestMembersChunk:
    def test_chunk_adds_members_and_presences(self, seeded, backend):
        apply(seeded, "GUILD_MEMBERS_CHUNK", {
            "guild_id": str(GUILD_ID),
            "members": [member(OTHER_ID, roles=[7]), member(4)],
            "presences": [presence(OTHER_ID, "dnd", guild_id=None)],
            "chunk_index": 0,
            "chunk_count": 1,
        })

        assert {m.id for m in run_async(backend.list_guild_members(GUILD_ID))} == {USER_ID, OTHER_ID, 4}
        assert _member_roles(backend, OTHER_ID) == {7}
        assert run_async(backend.get_presence(GUILD_ID, OTHER_ID)).status == "dnd"


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
class TestRoles:
    def test_role_create(self, seeded, backend):
        apply(seeded, "GUILD_ROLE_CREATE", {"guild_id": str(GUILD_ID), "role": role(8, 64)})
        assert run_async(backend.get_role(8)).permissions == 64

    def test_role_update_refreshes_assignment_copies(self, seeded, backend):
        apply(seeded, "GUILD_ROLE_UPDATE", {"guild_id": str(GUILD_ID), "role": role(5, 4096, name="mod")})

        assert run_async(backend.get_role(5)).name == "mod"
        [assignment] = run_async(backend.list_role_assignments(5))
        assert assignment.user_id == USER_ID
        assert assignment.permissions == 4096

    def test_role_delete_removes_definition_and_assignments(self, seeded, backend):
        apply(seeded, "GUILD_ROLE_DELETE", {"guild_id": str(GUILD_ID), "role_id": "5"})

        assert run_async(backend.get_role(5)) is None
        assert _member_roles(backend) == {6}

    def test_assignment_rows_never_touch_the_definition(self, seeded, backend):
        apply(seeded, "GUILD_MEMBER_UPDATE", _update(roles=["5"]))
        definition = run_async(backend.get_role(5))
        assert definition.user_id is None
        assert {r.id for r in run_async(backend.list_guild_roles(GUILD_ID))} == {GUILD_ID, 5, 6, 7}


# ---------------------------------------------------------------------------
# Presences
# ---------------------------------------------------------------------------
class TestPresences:
    def test_activities_are_replaced(self, seeded, backend):
        apply(seeded, "PRESENCE_UPDATE", presence(USER_ID, activities=[
            {"name": "chess", "type": 0}, {"name": "lofi", "type": 2},
        ]))
        apply(seeded, "PRESENCE_UPDATE", presence(USER_ID, "idle", activities=[
            {"name": "go", "type": 0, "party": {"id": "p", "size": [1, 4]}},
        ]))

        assert run_async(backend.get_presence(GUILD_ID, USER_ID)).status == "idle"
        [activity] = run_async(backend.list_user_activities(GUILD_ID, USER_ID))
        assert activity.name == "go"
        assert activity.position == 0
        assert (activity.party_size_current, activity.party_size_max) == (1, 4)

    def test_presence_without_guild_is_ignored(self, seeded, backend):
        apply(seeded, "PRESENCE_UPDATE", presence(OTHER_ID, guild_id=None))
        assert run_async(backend.get_presence(GUILD_ID, OTHER_ID)) is None
