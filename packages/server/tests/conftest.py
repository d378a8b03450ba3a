"""
Shared fixtures: a file-backed SQLite database per test, the app wired to it,
and helpers to seed profiles, organizations and memberships.
"""

from __future__ import annotations

from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert

from memberdir.core.auth import UserIdentity, create_jwt
from memberdir.core.database import Database
from memberdir.main import create_app
from memberdir.models.membership import Membership
from memberdir.models.organization import Organization
from memberdir.models.profile import Profile
from memberdir_shared.schemas.common import Role


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'memberdir.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def app(database):
    return create_app(database=database)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def bearer(user_id: str, email: Optional[str] = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_jwt(user_id, email)}"}


def admin(user_id: str = "admin-1") -> UserIdentity:
    return UserIdentity(id=user_id, role=Role.ADMIN)


def member(user_id: str) -> UserIdentity:
    return UserIdentity(id=user_id, role=Role.USER)


class Seed:
    """Writes fixture rows in their own committed transactions."""

    def __init__(self, database: Database):
        self.database = database

    async def profile(
        self,
        user_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        job_title: Optional[str] = None,
        role: str = "user",
        email: Optional[str] = None,
        complete: bool = True,
    ) -> str:
        if complete:
            first_name = first_name or user_id.capitalize()
            last_name = last_name or "Tester"
            job_title = job_title or "Engineer"
        async with self.database.session() as session:
            session.add(
                Profile(
                    id=user_id,
                    email=email or f"{user_id}@example.com",
                    first_name=first_name,
                    last_name=last_name,
                    job_title=job_title,
                    role=role,
                )
            )
        return user_id

    async def org(self, name: str) -> int:
        async with self.database.session() as session:
            org = Organization(name=name)
            session.add(org)
            await session.flush()
            return org.id

    async def membership(self, user_id: str, org_id: int, status: str = "approved") -> None:
        async with self.database.session() as session:
            await session.execute(
                insert(Membership).values(user_id=user_id, organization_id=org_id, status=status)
            )


@pytest.fixture
def seed(database) -> Seed:
    return Seed(database)
