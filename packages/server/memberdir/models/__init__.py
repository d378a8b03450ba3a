# SQLModel definitions, imported so metadata is populated for create_all.
from .base import CreatedAtMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .profile import Profile  # noqa: F401
from .membership import Membership  # noqa: F401
