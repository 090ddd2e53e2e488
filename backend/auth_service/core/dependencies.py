"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth_service.core.config import Settings
from auth_service.core.security import StateSigner
from auth_service.schemas.auth import ClientInfo, CurrentUser
from auth_service.services.auth import AuthService
from auth_service.services.github_oauth import GitHubOAuthClient

_bearer = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_github_client(request: Request) -> GitHubOAuthClient:
    return request.app.state.github_client


def get_state_signer(request: Request) -> StateSigner:
    return request.app.state.state_signer


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_client_info(request: Request) -> ClientInfo:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return ClientInfo(ip_address=ip_address, user_agent=request.headers.get("User-Agent"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    service: AuthService = Depends(get_auth_service),
) -> CurrentUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await service.authenticate_access_token(credentials.credentials)
