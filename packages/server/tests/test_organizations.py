"""
Tests for organizations and the membership transition table.

Tests cover:
- Transition table shape (which actions need admin, which delete the row)
- Org create request validation
- Org CRUD through the service layer (admin gate, delete cascade)
- Available organizations and member listing
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from conftest import admin, member
from memberdir.core.errors import Forbidden, NotFound
from memberdir.services import counters
from memberdir.services import organizations as org_service
from memberdir_shared.schemas.common import MembershipStatus
from memberdir_shared.schemas.organizations import (
    ADMIN_ACTIONS,
    MEMBERSHIP_TRANSITIONS,
    MembershipAction,
    OrgCreateRequest,
)


# ---------------------------------------------------------------------------
# Schema tests (no DB needed)
# ---------------------------------------------------------------------------

class TestMembershipTransitions:
    def test_every_action_has_a_transition(self):
        assert set(MEMBERSHIP_TRANSITIONS) == set(MembershipAction)

    def test_approve_promotes_pending(self):
        assert MEMBERSHIP_TRANSITIONS[MembershipAction.APPROVE] == (
            MembershipStatus.PENDING,
            MembershipStatus.APPROVED,
        )

    def test_reject_and_cancel_delete_pending_only(self):
        for action in (MembershipAction.REJECT, MembershipAction.CANCEL):
            assert MEMBERSHIP_TRANSITIONS[action] == (MembershipStatus.PENDING, None)

    def test_leave_deletes_approved_only(self):
        assert MEMBERSHIP_TRANSITIONS[MembershipAction.LEAVE] == (MembershipStatus.APPROVED, None)

    def test_only_moderation_needs_admin(self):
        assert ADMIN_ACTIONS == {MembershipAction.APPROVE, MembershipAction.REJECT}


class TestOrgCreateRequestValidation:
    def test_valid_name(self):
        assert OrgCreateRequest(name="Acme").name == "Acme"

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            OrgCreateRequest(name="")

    def test_long_name_rejected(self):
        with pytest.raises(ValidationError):
            OrgCreateRequest(name="x" * 201)


# ---------------------------------------------------------------------------
# Service tests
# ---------------------------------------------------------------------------

class TestOrgService:
    @pytest.mark.asyncio
    async def test_create_requires_admin(self, database):
        async with database.session() as session:
            with pytest.raises(Forbidden):
                await org_service.create_organization(session, member("u1"), "Acme")

    @pytest.mark.asyncio
    async def test_create_and_list_sorted_by_name(self, database):
        async with database.session() as session:
            await org_service.create_organization(session, admin(), "  Zeta ")
            await org_service.create_organization(session, admin(), "Alpha")
        async with database.session() as session:
            orgs = await org_service.list_organizations(session)
        assert [o.name for o in orgs] == ["Alpha", "Zeta"]

    @pytest.mark.asyncio
    async def test_get_missing_org(self, database):
        async with database.session() as session:
            with pytest.raises(NotFound):
                await org_service.get_organization(session, 999)

    @pytest.mark.asyncio
    async def test_delete_removes_memberships(self, database, seed):
        await seed.profile("u1")
        await seed.profile("u2")
        org_id = await seed.org("Acme")
        await seed.membership("u1", org_id, "approved")
        await seed.membership("u2", org_id, "pending")

        async with database.session() as session:
            await org_service.delete_organization(session, admin(), org_id)

        async with database.session() as session:
            with pytest.raises(NotFound):
                await org_service.get_organization(session, org_id)
            assert await counters.member_counts(session, [org_id]) == {}
            assert await counters.pending_counts(session, [org_id]) == {}

    @pytest.mark.asyncio
    async def test_delete_requires_admin(self, database, seed):
        org_id = await seed.org("Acme")
        async with database.session() as session:
            with pytest.raises(Forbidden):
                await org_service.delete_organization(session, member("u1"), org_id)

    @pytest.mark.asyncio
    async def test_delete_missing_org(self, database):
        async with database.session() as session:
            with pytest.raises(NotFound):
                await org_service.delete_organization(session, admin(), 999)


class TestAvailableOrganizations:
    @pytest.mark.asyncio
    async def test_excludes_pending_and_approved(self, database, seed):
        await seed.profile("u1")
        joined = await seed.org("Joined")
        asked = await seed.org("Asked")
        open_org = await seed.org("Open")
        await seed.membership("u1", joined, "approved")
        await seed.membership("u1", asked, "pending")

        async with database.session() as session:
            orgs = await org_service.list_available_organizations(session, member("u1"))
        assert [o.id for o in orgs] == [open_org]


class TestOrganizationMembers:
    @pytest.mark.asyncio
    async def test_member_sees_fellow_members(self, database, seed):
        await seed.profile("alice", first_name="Alice")
        await seed.profile("bob", first_name="Bob")
        await seed.profile("carol", first_name="Carol")
        org_id = await seed.org("Acme")
        await seed.membership("alice", org_id, "approved")
        await seed.membership("bob", org_id, "approved")
        await seed.membership("carol", org_id, "pending")

        async with database.session() as session:
            people = await org_service.list_organization_members(session, member("alice"), org_id)
        assert [p.id for p in people] == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_outsider_sees_nothing(self, database, seed):
        await seed.profile("alice")
        org_id = await seed.org("Acme")
        await seed.membership("alice", org_id, "approved")

        async with database.session() as session:
            people = await org_service.list_organization_members(session, member("mallory"), org_id)
        assert people == []

    @pytest.mark.asyncio
    async def test_admin_sees_any_org(self, database, seed):
        await seed.profile("alice")
        org_id = await seed.org("Acme")
        await seed.membership("alice", org_id, "approved")

        async with database.session() as session:
            people = await org_service.list_organization_members(session, admin(), org_id)
        assert [p.id for p in people] == ["alice"]
