"""Authentication endpoints."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from httpx import QueryParams

from auth_service.core.config import Settings
from auth_service.core.dependencies import (
    get_app_settings,
    get_auth_service,
    get_client_info,
    get_current_user,
    get_github_client,
    get_state_signer,
)
from auth_service.core.security import StateSigner
from auth_service.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    ClientInfo,
    CurrentUser,
    DeleteAccountRequest,
    LoginRequest,
    MessageResponse,
    PasswordResetRequest,
    PasswordResetRequested,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from auth_service.schemas.records import UserPublic
from auth_service.services.auth import AuthService
from auth_service.services.github_oauth import GitHubOAuthClient, GitHubOAuthError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> AuthResult:
    return await service.register(payload)


@router.post("/login", response_model=AuthResult)
async def login(
    payload: LoginRequest,
    client: ClientInfo = Depends(get_client_info),
    service: AuthService = Depends(get_auth_service),
) -> AuthResult:
    return await service.login(payload.email, payload.password, client)


@router.post("/refresh", response_model=AuthResult)
async def refresh(payload: RefreshRequest, service: AuthService = Depends(get_auth_service)) -> AuthResult:
    return await service.refresh(payload.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.logout(current_user.user_id)


@router.post("/logout-all", response_model=MessageResponse)
async def logout_all(
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.logout_all(current_user.user_id)


@router.get("/profile", response_model=UserPublic)
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> UserPublic:
    return await service.get_profile(current_user.user_id)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.change_password(current_user.user_id, payload.current_password, payload.new_password)


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_account(
    payload: DeleteAccountRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.delete_account(current_user.user_id, payload.password)


@router.post("/request-password-reset", response_model=PasswordResetRequested, response_model_exclude_none=True)
async def request_password_reset(
    payload: PasswordResetRequest,
    service: AuthService = Depends(get_auth_service),
) -> PasswordResetRequested:
    return await service.request_password_reset(payload.email)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    return await service.reset_password(payload.token, payload.new_password)


@router.get("/health")
async def health() -> dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "authentication",
    }


@router.get("/github")
async def github_login(
    github: GitHubOAuthClient = Depends(get_github_client),
    signer: StateSigner = Depends(get_state_signer),
) -> RedirectResponse:
    if not github.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="GitHub login is not configured")
    state = signer.dumps({"provider": "github"})
    return RedirectResponse(url=github.authorize_url(state), status_code=status.HTTP_302_FOUND)


@router.get("/github/callback")
async def github_callback(
    code: str = Query(..., min_length=1),
    state: str = Query(..., min_length=1),
    github: GitHubOAuthClient = Depends(get_github_client),
    signer: StateSigner = Depends(get_state_signer),
    settings: Settings = Depends(get_app_settings),
    service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    try:
        signer.loads(state, max_age=settings.oauth_state_max_age_seconds)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    try:
        profile = await github.resolve(code)
    except GitHubOAuthError as exc:
        logger.warning("GitHub login failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Failed to authenticate with GitHub"
        ) from exc

    result = await service.oauth_upsert(profile)
    params = QueryParams({"accessToken": result.access_token, "refreshToken": result.refresh_token})
    redirect_url = f"{settings.frontend_url.rstrip('/')}/auth/callback?{params}"
    return RedirectResponse(url=redirect_url, status_code=status.HTTP_302_FOUND)
