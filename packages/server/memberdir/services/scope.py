"""
Authorization scope: which organizations a caller may query against.

Admins are default-open: without an explicit organization filter they browse
everything. Everyone else is default-closed to the organizations they are an
approved member of, and an explicit filter can only narrow that set. An empty
result is a real answer ("nothing visible"), never "no filter".

Every directory, filter-option, member and pending-request read resolves its
scope here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from memberdir.core.auth import UserIdentity
from memberdir.services import membership_store


@dataclass(frozen=True)
class OrgScope:
    org_ids: list[int] = field(default_factory=list)
    apply_filter: bool = True

    @property
    def is_empty(self) -> bool:
        """True when the caller can see nothing; queries must short-circuit."""
        return self.apply_filter and not self.org_ids

    @property
    def unrestricted(self) -> bool:
        return not self.apply_filter


def _dedupe(ids: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    out: list[int] = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


def compute_scope(
    identity: UserIdentity,
    requested_org_ids: Optional[Iterable[int]],
    own_org_ids: Iterable[int] = (),
) -> OrgScope:
    """Effective organization scope for ``identity``.

    ``own_org_ids`` are the caller's approved organizations; they are ignored
    for admins.
    """
    requested = _dedupe(requested_org_ids or [])

    if identity.is_admin:
        if requested:
            return OrgScope(org_ids=requested, apply_filter=True)
        return OrgScope(org_ids=[], apply_filter=False)

    own = _dedupe(own_org_ids)
    if requested:
        own_set = set(own)
        return OrgScope(org_ids=[i for i in requested if i in own_set], apply_filter=True)
    return OrgScope(org_ids=own, apply_filter=True)


async def resolve_scope(
    session: AsyncSession,
    identity: UserIdentity,
    requested_org_ids: Optional[Iterable[int]] = None,
) -> OrgScope:
    """Load the caller's approved organizations (non-admins only) and compute the scope."""
    own: list[int] = []
    if not identity.is_admin:
        own = await membership_store.approved_org_ids(session, identity.id)
    return compute_scope(identity, requested_org_ids, own)
