"""Profile model. The id is the identity provider's subject."""

from typing import Optional

from sqlmodel import Field

from .base import TimestampMixin


class Profile(TimestampMixin, table=True):
    __tablename__ = "profiles"

    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    job_title: Optional[str] = Field(default=None, index=True)
    linkedin_account: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = Field(default="user", nullable=False)  # user | admin
