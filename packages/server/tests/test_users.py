"""
Tests for profiles: onboarding completeness, self-service updates and
admin role management.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from conftest import admin, member
from memberdir.core.errors import Forbidden, NotFound
from memberdir.models.profile import Profile
from memberdir.services import profiles as profile_service
from memberdir_shared.schemas.common import Role
from memberdir_shared.schemas.users import ProfileUpdateRequest, RoleUpdateRequest


# ---------------------------------------------------------------------------
# Schema validation tests (no DB needed)
# ---------------------------------------------------------------------------

class TestProfileSchemas:
    def test_update_request_partial(self):
        req = ProfileUpdateRequest(job_title="Designer")
        assert req.model_dump(exclude_unset=True) == {"job_title": "Designer"}

    def test_update_request_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            ProfileUpdateRequest(first_name="")

    def test_role_update_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            RoleUpdateRequest(role="superuser")


class TestProfileCompleteness:
    def test_missing_profile_is_incomplete(self):
        assert not profile_service.is_profile_complete(None)

    def test_all_required_fields(self):
        p = Profile(id="u1", first_name="Ada", last_name="Lovelace", job_title="Analyst")
        assert profile_service.is_profile_complete(p)

    def test_blank_field_is_incomplete(self):
        p = Profile(id="u1", first_name="Ada", last_name="  ", job_title="Analyst")
        assert not profile_service.is_profile_complete(p)

    def test_optional_fields_do_not_matter(self):
        p = Profile(id="u1", first_name="Ada", last_name="Lovelace", job_title="Analyst")
        assert p.linkedin_account is None
        assert profile_service.to_response(p).is_complete


# ---------------------------------------------------------------------------
# Service tests
# ---------------------------------------------------------------------------

class TestEnsureProfile:
    @pytest.mark.asyncio
    async def test_creates_once(self, database):
        async with database.session() as session:
            profile, created = await profile_service.ensure_profile(session, "u1", "u1@example.com")
        assert created
        assert profile.role == Role.USER.value

        async with database.session() as session:
            profile, created = await profile_service.ensure_profile(session, "u1", "other@example.com")
        assert not created
        assert profile.email == "u1@example.com"


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_onboarding_completes_profile(self, database, seed):
        await seed.profile("u1", complete=False)
        req = ProfileUpdateRequest(first_name=" Ada ", last_name="Lovelace", job_title="Analyst")
        async with database.session() as session:
            profile = await profile_service.update_profile(session, member("u1"), req)
        assert profile.first_name == "Ada"
        assert profile_service.is_profile_complete(profile)

    @pytest.mark.asyncio
    async def test_unset_fields_are_kept(self, database, seed):
        await seed.profile("u1", first_name="Ada", job_title="Analyst")
        async with database.session() as session:
            profile = await profile_service.update_profile(
                session, member("u1"), ProfileUpdateRequest(linkedin_account="ada-l")
            )
        assert profile.first_name == "Ada"
        assert profile.job_title == "Analyst"
        assert profile.linkedin_account == "ada-l"

    @pytest.mark.asyncio
    async def test_missing_profile(self, database):
        async with database.session() as session:
            with pytest.raises(NotFound):
                await profile_service.update_profile(
                    session, member("ghost"), ProfileUpdateRequest(first_name="Ghost")
                )


class TestUpdateRole:
    @pytest.mark.asyncio
    async def test_admin_promotes_user(self, database, seed):
        await seed.profile("u1")
        async with database.session() as session:
            profile = await profile_service.update_role(session, admin(), "u1", Role.ADMIN)
        assert profile.role == "admin"

    @pytest.mark.asyncio
    async def test_user_cannot_change_roles(self, database, seed):
        await seed.profile("u1")
        async with database.session() as session:
            with pytest.raises(Forbidden):
                await profile_service.update_role(session, member("u1"), "u1", Role.ADMIN)

    @pytest.mark.asyncio
    async def test_unknown_user(self, database):
        async with database.session() as session:
            with pytest.raises(NotFound):
                await profile_service.update_role(session, admin(), "ghost", Role.ADMIN)


class TestListProfiles:
    @pytest.mark.asyncio
    async def test_admin_only(self, database, seed):
        await seed.profile("u1")
        async with database.session() as session:
            with pytest.raises(Forbidden):
                await profile_service.list_profiles(session, member("u1"))
            profiles = await profile_service.list_profiles(session, admin())
        assert [p.id for p in profiles] == ["u1"]
