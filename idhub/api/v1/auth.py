"""Auth endpoints and auth dependencies (get_current_user, require_permission)."""

import logging
from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from idhub.core.acs import ACS
from idhub.core.config import Settings, get_settings
from idhub.core.database import get_db, get_session_factory
from idhub.core.permissions import Permission, resolve_acs
from idhub.models import User
from idhub.models.enums import Language, UserRole
from idhub.schemas.auth import (
    AuthTokens,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RefreshTokenResponse,
    RegistrationRequest,
    SocialLoginRequest,
    SocialLoginResponse,
)
from idhub.schemas.profile import ProfileCreate
from idhub.services.auth import AuthService
from idhub.services.header_info import HeaderInfo, get_header_info
from idhub.services.token_provider import TokenProvider
from idhub.services.users import update_last_login

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


@lru_cache
def get_auth_service() -> AuthService:
    """Process-wide AuthService; holds no per-request state."""
    settings = get_settings()
    return AuthService(TokenProvider(settings), settings)


def _set_auth_cookie(response: Response, tokens: AuthTokens, settings: Settings) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=tokens.auth_token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        domain=settings.AUTH_COOKIE_DOMAIN,
        secure=settings.AUTH_COOKIE_SECURE,
        httponly=True,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )


def _after_login(
    response: Response,
    background_tasks: BackgroundTasks,
    session_factory: sessionmaker,
    tokens: AuthTokens,
) -> None:
    _set_auth_cookie(response, tokens, get_settings())
    background_tasks.add_task(update_last_login, session_factory, tokens.user_uid)


@router.post("/registration", status_code=status.HTTP_201_CREATED)
def register(
    body: RegistrationRequest,
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    language: Language = Language.UA,
) -> Response:
    """Register a native account; the email doubles as the username."""
    profile = ProfileCreate(
        username=body.email,
        email=body.email,
        password=body.password,
        role=body.role,
        first_name=body.first_name,
        middle_name=body.middle_name,
        last_name=body.last_name,
        legal_name=body.legal_name,
        short_name=body.short_name,
        gender=body.gender,
    )
    auth_service.register_user(db, profile, language)
    return Response(status_code=status.HTTP_201_CREATED)


@router.post("/login/direct", response_model=RefreshTokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    header_info: Annotated[HeaderInfo, Depends(get_header_info)],
    db: Annotated[Session, Depends(get_db)],
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RefreshTokenResponse:
    """
    Authenticate with email and password.
    The access token is set as an HttpOnly cookie; the refresh token is returned in the body.
    """
    tokens = auth_service.login(db, body.username, body.password, header_info, body.device_token)
    _after_login(response, background_tasks, session_factory, tokens)
    return RefreshTokenResponse(refresh_token=tokens.refresh_token.token)


@router.post("/login/google", response_model=SocialLoginResponse)
def login_google(
    body: SocialLoginRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    header_info: Annotated[HeaderInfo, Depends(get_header_info)],
    db: Annotated[Session, Depends(get_db)],
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    language: Language = Language.UA,
) -> SocialLoginResponse:
    tokens = auth_service.login_google(db, body.token, header_info, language, body.device_token)
    _after_login(response, background_tasks, session_factory, tokens)
    return SocialLoginResponse(refresh_token=tokens.refresh_token.token, is_new=tokens.is_new)


@router.post("/login/facebook", response_model=SocialLoginResponse)
def login_facebook(
    body: SocialLoginRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    header_info: Annotated[HeaderInfo, Depends(get_header_info)],
    db: Annotated[Session, Depends(get_db)],
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    language: Language = Language.UA,
) -> SocialLoginResponse:
    tokens = auth_service.login_facebook(db, body.token, header_info, language, body.device_token)
    _after_login(response, background_tasks, session_factory, tokens)
    return SocialLoginResponse(refresh_token=tokens.refresh_token.token, is_new=tokens.is_new)


@router.post("/refresh", response_model=RefreshTokenResponse)
def refresh(
    body: RefreshRequest,
    response: Response,
    header_info: Annotated[HeaderInfo, Depends(get_header_info)],
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RefreshTokenResponse:
    """Exchange a refresh token for a new pair. The presented token is single-use."""
    tokens = auth_service.refresh_auth_tokens(db, body.refresh_token, header_info)
    _set_auth_cookie(response, tokens, get_settings())
    return RefreshTokenResponse(refresh_token=tokens.refresh_token.token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    body: LogoutRequest | None = None,
) -> Response:
    """Clear the auth cookie; revoke the refresh token too when one is supplied."""
    auth_service.logout(db, body.refresh_token if body else None)
    settings = get_settings()
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.AUTH_COOKIE_NAME, domain=settings.AUTH_COOKIE_DOMAIN)
    return response


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """Dependency: user behind the auth cookie or Bearer token. Raises 401 if missing or invalid."""
    token = request.cookies.get(get_settings().AUTH_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    return auth_service.validate_access_token(db, token)


def require_permission(permission: Permission) -> Callable[..., ACS]:
    """Dependency factory: resolve the ACS the current user holds for permission."""

    def _resolve(current_user: Annotated[User, Depends(get_current_user)]) -> ACS:
        return resolve_acs(UserRole(current_user.role), permission, current_user.uid)

    return _resolve
