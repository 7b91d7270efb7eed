"""API v1 routes."""

from fastapi import APIRouter

from idhub.api.v1 import auth, health, my_profile, profiles

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(my_profile.router, prefix="/user-profile/my-profile", tags=["my-profile"])
router.include_router(profiles.router, prefix="/user-profile/profiles", tags=["profiles"])
