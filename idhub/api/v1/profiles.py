"""Administrative profile management (user_profiles and moderation permissions)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from idhub.api.v1.auth import require_permission
from idhub.core.acs import ACS
from idhub.core.database import get_db
from idhub.core.errors import NotFoundError, NotFoundErrorCodes
from idhub.core.permissions import Permission
from idhub.models.enums import Language
from idhub.schemas.profile import (
    AdminPasswordUpdate,
    PagedProfiles,
    PersonUpdate,
    ProfileCreate,
    ProfileDTO,
    SystemStatusUpdate,
    UserDetailsUpdate,
)
from idhub.services import profiles

router = APIRouter()

UserProfilesACS = Annotated[ACS, Depends(require_permission(Permission.USER_PROFILES))]
ModerationACS = Annotated[ACS, Depends(require_permission(Permission.MODERATION))]
DB = Annotated[Session, Depends(get_db)]


@router.get("", response_model=PagedProfiles)
def list_profiles(
    acs: UserProfilesACS,
    db: DB,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=profiles.MAX_PAGE_LIMIT)] = 20,
) -> PagedProfiles:
    return profiles.list_profiles(db, acs, page=page, limit=limit)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_profile(
    body: ProfileCreate, acs: UserProfilesACS, db: DB, language: Language = Language.UA
) -> dict[str, str]:
    return {"uid": profiles.create_profile(db, body, acs, language)}


@router.get("/{email}", response_model=ProfileDTO)
def get_profile(email: str, acs: UserProfilesACS, db: DB) -> ProfileDTO:
    profile = profiles.get_profile_by_email(db, email, acs)
    if profile is None:
        raise NotFoundError(
            "Profile not found", NotFoundErrorCodes.ENTITY_NOT_FOUND_ERROR, "profiles"
        )
    return profile


@router.delete("/{username}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(username: str, acs: UserProfilesACS, db: DB) -> Response:
    profiles.delete_profile(db, username, acs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{username}/person", status_code=status.HTTP_204_NO_CONTENT)
def update_person(username: str, body: PersonUpdate, acs: UserProfilesACS, db: DB) -> Response:
    profiles.update_person_by_username(db, username, body, acs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{username}/user-details", status_code=status.HTTP_204_NO_CONTENT)
def update_details(
    username: str, body: UserDetailsUpdate, acs: UserProfilesACS, db: DB
) -> Response:
    profiles.update_details_by_username(db, username, body, acs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{username}/password", status_code=status.HTTP_202_ACCEPTED)
def update_password(
    username: str, body: AdminPasswordUpdate, acs: UserProfilesACS, db: DB
) -> Response:
    profiles.update_password(db, username, body.new_password, acs)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.put("/{username}/system-status", status_code=status.HTTP_204_NO_CONTENT)
def update_system_status(
    username: str, body: SystemStatusUpdate, acs: ModerationACS, db: DB
) -> Response:
    """Ban or unban a user."""
    profiles.update_system_status(db, username, body.system_status, acs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
