"""User-Organization membership (the pending/approved relation)."""

from sqlmodel import Field

from .base import CreatedAtMixin


class Membership(CreatedAtMixin, table=True):
    __tablename__ = "memberships"

    # The composite primary key is the uniqueness guard that join requests rely on.
    user_id: str = Field(foreign_key="profiles.id", primary_key=True)
    organization_id: int = Field(foreign_key="organizations.id", primary_key=True, index=True)
    status: str = Field(nullable=False, default="pending", index=True)  # pending | approved
