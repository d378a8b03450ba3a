"""
Directory API endpoints.

GET    /api/v1/users                                    Search members visible to the caller
GET    /api/v1/users/filters                            Facet values (job titles, roles) for the same scope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from memberdir.core.auth import UserIdentity, get_identity
from memberdir.core.database import get_session
from memberdir.services import directory
from memberdir.services.scope import resolve_scope
from memberdir_shared.schemas.directory import FilterOptions, UserSummary

router = APIRouter()


@router.get("", response_model=list[UserSummary], tags=["Directory"])
async def list_users(
    query: Optional[str] = Query(None, max_length=200),
    roles: list[str] = Query(default=[]),
    job_titles: list[str] = Query(default=[], alias="jobTitles"),
    organization_ids: list[int] = Query(default=[], alias="organizationIds"),
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Search the directory by name, role and job title within the caller's scope."""
    scope = await resolve_scope(session, identity, organization_ids)
    return await directory.list_users(session, scope, query, roles, job_titles)


@router.get("/filters", response_model=FilterOptions, tags=["Directory"])
async def list_filter_options(
    organization_ids: list[int] = Query(default=[], alias="organizationIds"),
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Distinct job titles and roles among the members the caller can see."""
    scope = await resolve_scope(session, identity, organization_ids)
    return await directory.list_filter_options(session, scope)
