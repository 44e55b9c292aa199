"""Tests for AccessPolicy."""

import pytest

from raffledesk.access import AccessPolicy, Role
from raffledesk.errors import AuthenticationError, PermissionDeniedError


class TestFromHeaders:
    def test_full_headers(self):
        policy = AccessPolicy.from_headers(
            {
                "X-User-Id": "u-1",
                "X-Username": "mira",
                "X-User-Role": "Club_Owner",
                "X-Entity-Ids": "e-1, e-2,,",
            }
        )

        assert policy.user_id == "u-1"
        assert policy.username == "mira"
        assert policy.role is Role.CLUB_OWNER
        assert policy.entity_ids == frozenset({"e-1", "e-2"})

    def test_defaults(self):
        policy = AccessPolicy.from_headers({"X-User-Id": "u-1"})

        assert policy.role is Role.STAFF
        assert policy.username == "u-1"
        assert policy.entity_ids == frozenset()

    def test_missing_user(self):
        with pytest.raises(AuthenticationError):
            AccessPolicy.from_headers({"X-User-Role": "superuser"})

    def test_unknown_role(self):
        with pytest.raises(AuthenticationError):
            AccessPolicy.from_headers({"X-User-Id": "u-1", "X-User-Role": "wizard"})


class TestCapabilities:
    def test_superuser_sees_everything(self):
        policy = AccessPolicy.system()

        assert policy.can_access_entity("anything")
        assert policy.can_create_entities()
        assert policy.can_close_session("someone-else")

    def test_staff_is_limited_to_assigned_entities(self):
        policy = AccessPolicy("u-1", "mira", Role.STAFF, frozenset({"e-1"}))

        assert policy.visible_entity_ids(["e-1", "e-2"]) == ["e-1"]
        policy.require_entity("e-1")
        with pytest.raises(PermissionDeniedError):
            policy.require_entity("e-2")

    def test_staff_cannot_edit_entity_info(self):
        policy = AccessPolicy("u-1", "mira", Role.STAFF, frozenset({"e-1"}))

        with pytest.raises(PermissionDeniedError):
            policy.require_entity_edit("e-1")

    def test_event_manager_edits_assigned_entity_only(self):
        policy = AccessPolicy("u-1", "mira", Role.EVENT_MANAGER, frozenset({"e-1"}))

        policy.require_entity_edit("e-1")
        with pytest.raises(PermissionDeniedError):
            policy.require_entity_edit("e-2")

    def test_only_superuser_creates_and_deletes(self):
        owner = AccessPolicy("u-1", "mira", Role.CLUB_OWNER, frozenset({"e-1"}))

        with pytest.raises(PermissionDeniedError):
            owner.require_entity_create()
        with pytest.raises(PermissionDeniedError):
            owner.require_entity_delete()

    def test_close_own_session_only(self):
        policy = AccessPolicy("u-1", "mira", Role.CLUB_OWNER)

        assert policy.can_close_session("u-1")
        assert not policy.can_close_session("u-2")
