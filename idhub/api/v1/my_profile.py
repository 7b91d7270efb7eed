"""Endpoints for the authenticated user's own profile plus public recovery flows."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from idhub.api.v1.auth import get_auth_service, get_current_user, require_permission
from idhub.core.acs import ACS
from idhub.core.config import get_settings
from idhub.core.database import get_db
from idhub.core.errors import ValidationError
from idhub.core.permissions import Permission
from idhub.models import User
from idhub.models.enums import Language
from idhub.schemas.profile import (
    EmailUpdate,
    PasswordUpdate,
    PersonUpdate,
    PhoneUpdate,
    ProfileDTO,
    ResetPasswordRequest,
    SetNewPasswordRequest,
    UserDetailsUpdate,
)
from idhub.services import profiles
from idhub.services.auth import AuthService

router = APIRouter()

OwnProfileACS = Annotated[ACS, Depends(require_permission(Permission.OWN_PROFILE))]
CurrentUser = Annotated[User, Depends(get_current_user)]
DB = Annotated[Session, Depends(get_db)]


@router.get("", response_model=ProfileDTO)
def get_my_profile(current_user: CurrentUser, db: DB) -> ProfileDTO:
    return profiles.to_profile_dto(profiles.get_my_profile(db, current_user.uid))


@router.put("/person", status_code=status.HTTP_204_NO_CONTENT)
def update_person(body: PersonUpdate, current_user: CurrentUser, acs: OwnProfileACS, db: DB) -> Response:
    profiles.update_person_by_username(db, current_user.username, body, acs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/user-details", status_code=status.HTTP_204_NO_CONTENT)
def update_details(
    body: UserDetailsUpdate, current_user: CurrentUser, acs: OwnProfileACS, db: DB
) -> Response:
    profiles.update_details_by_username(db, current_user.username, body, acs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/user-language/{language}", status_code=status.HTTP_204_NO_CONTENT)
def update_language(
    language: Language, current_user: CurrentUser, acs: OwnProfileACS, db: DB
) -> Response:
    profiles.update_details_by_username(
        db, current_user.username, UserDetailsUpdate(language=language), acs
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/phone", status_code=status.HTTP_202_ACCEPTED)
def update_phone(body: PhoneUpdate, current_user: CurrentUser, acs: OwnProfileACS, db: DB) -> Response:
    profiles.update_own_phone(db, current_user, body.phone, acs)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.post("/phone-confirmation/{code}", status_code=status.HTTP_200_OK)
def confirm_phone(code: str, current_user: CurrentUser, acs: OwnProfileACS, db: DB) -> Response:
    profiles.confirm_phone(db, current_user.username, code, acs)
    return Response(status_code=status.HTTP_200_OK)


@router.put("/email", status_code=status.HTTP_202_ACCEPTED)
def update_email(
    body: EmailUpdate,
    current_user: CurrentUser,
    acs: OwnProfileACS,
    db: DB,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Response:
    """Change the login email; requires the current password and drops all sessions."""
    auth_service.verify_username_password(
        current_user.username, body.password, current_user, "update-own-email"
    )
    profiles.update_own_email(db, current_user, str(body.email), acs)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.get("/email-confirmation/{code}")
def confirm_email(code: str, db: DB) -> RedirectResponse:
    """Public link from the confirmation email; redirects to the front end either way."""
    settings = get_settings()
    redirect_url = settings.EMAIL_CONFIRMATION_REDIRECT_URL
    try:
        profiles.confirm_email(db, code)
    except ValidationError:
        redirect_url = settings.EMAIL_CONFIRMATION_REDIRECT_EXPIRED_URL
    return RedirectResponse(redirect_url)


@router.put("/password", status_code=status.HTTP_202_ACCEPTED)
def update_password(
    body: PasswordUpdate,
    current_user: CurrentUser,
    acs: OwnProfileACS,
    db: DB,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Response:
    auth_service.verify_username_password(
        current_user.username, body.password, current_user, "update-password"
    )
    profiles.update_password(db, current_user.username, body.new_password, acs)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.post("/reset-password", status_code=status.HTTP_200_OK)
def reset_password(body: ResetPasswordRequest, db: DB) -> Response:
    profiles.reset_password(db, str(body.email), get_settings())
    return Response(status_code=status.HTTP_200_OK)


@router.post("/set-new-password", status_code=status.HTTP_202_ACCEPTED)
def set_new_password(body: SetNewPasswordRequest, db: DB) -> Response:
    profiles.set_new_password(db, body.password_restoration_code, body.new_password, get_settings())
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_my_profile(current_user: CurrentUser, acs: OwnProfileACS, db: DB) -> Response:
    profiles.delete_profile(db, current_user.username, acs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
