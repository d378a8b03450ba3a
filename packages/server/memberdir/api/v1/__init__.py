"""
API v1 Router
"""

from fastapi import APIRouter
from . import memberships, organizations, profiles, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["Directory"])
router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
router.include_router(organizations.router, prefix="/orgs", tags=["Organizations"])
router.include_router(memberships.router, prefix="/memberships", tags=["Memberships"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/users",
            "/users/filters",
            "/profiles",
            "/orgs",
            "/memberships/me",
        ],
    }
