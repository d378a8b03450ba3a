"""
Grant the admin role to an existing profile, looked up by email.

Admins can only be appointed by other admins through the API, so the first
one has to be bootstrapped from the command line:

    python -m memberdir.scripts.promote_admin --email alice@example.com
"""

import argparse
import asyncio
import sys

import structlog

from memberdir.core.config import get_settings
from memberdir.core.database import Database
from memberdir.core.log_config import configure_logging
from memberdir.services.profiles import find_by_email
from memberdir_shared.schemas.common import Role

log = structlog.get_logger()


async def promote(database: Database, email: str, role: Role = Role.ADMIN) -> bool:
    """Set ``role`` on the profile with ``email``. Returns False if no profile matches."""
    async with database.session() as session:
        profile = await find_by_email(session, email)
        if not profile:
            log.warning("promote.profile_not_found", email=email)
            return False
        profile.role = role.value
        session.add(profile)
        await session.flush()
        log.info("promote.role_set", user_id=profile.id, email=email, role=role.value)
    return True


async def _main(email: str, role: Role) -> int:
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        found = await promote(database, email, role)
    finally:
        await database.dispose()
    return 0 if found else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Grant a role to a member by email.")
    parser.add_argument("--email", required=True, help="Email address on the member's profile")
    parser.add_argument(
        "--role",
        default=Role.ADMIN.value,
        choices=[r.value for r in Role],
        help="Role to grant (default: admin)",
    )

    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings.log_level, "text")
    sys.exit(asyncio.run(_main(args.email, Role(args.role))))
