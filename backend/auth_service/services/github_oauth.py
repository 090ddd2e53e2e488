"""GitHub OAuth code exchange and profile lookup."""
from __future__ import annotations

import logging

import httpx

from auth_service.core.config import Settings
from auth_service.schemas.auth import ExternalProfile

logger = logging.getLogger(__name__)

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"


class GitHubOAuthError(RuntimeError):
    """Raised when GitHub rejects the code or returns an unusable profile."""


class GitHubOAuthClient:
    """Talk to GitHub on behalf of the OAuth callback."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http
        self._settings = settings

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubOAuthClient":
        return cls(httpx.AsyncClient(timeout=30), settings)

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def configured(self) -> bool:
        return bool(self._settings.github_client_id and self._settings.github_client_secret)

    def authorize_url(self, state: str) -> str:
        params = httpx.QueryParams(
            {
                "client_id": self._settings.github_client_id,
                "redirect_uri": self._settings.github_callback_url,
                "scope": self._settings.github_scope,
                "state": state,
            }
        )
        return f"{GITHUB_AUTHORIZE_URL}?{params}"

    async def exchange_code(self, code: str) -> str:
        payload = {
            "client_id": self._settings.github_client_id,
            "client_secret": self._settings.github_client_secret,
            "code": code,
            "redirect_uri": self._settings.github_callback_url,
        }
        try:
            response = await self._http.post(
                GITHUB_ACCESS_TOKEN_URL, json=payload, headers={"Accept": "application/json"}
            )
            response.raise_for_status()
            access_token = response.json().get("access_token")
        except (httpx.HTTPError, ValueError) as exc:
            raise GitHubOAuthError("GitHub OAuth token exchange failed") from exc

        if not access_token:
            raise GitHubOAuthError("GitHub OAuth token exchange failed")
        return access_token

    async def fetch_profile(self, access_token: str) -> ExternalProfile:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        }
        try:
            user_resp = await self._http.get(f"{GITHUB_API_URL}/user", headers=headers)
            user_resp.raise_for_status()
            user_data = user_resp.json()

            email = None
            emails_resp = await self._http.get(f"{GITHUB_API_URL}/user/emails", headers=headers)
            if emails_resp.status_code == 200:
                for entry in emails_resp.json():
                    if entry.get("primary") and entry.get("verified", True):
                        email = entry.get("email")
                        break
        except (httpx.HTTPError, ValueError) as exc:
            raise GitHubOAuthError("Failed to fetch GitHub profile") from exc

        github_id = user_data.get("id")
        email = email or user_data.get("email")
        if github_id is None:
            raise GitHubOAuthError("GitHub profile has no id")
        if not email:
            raise GitHubOAuthError("GitHub account has no usable email address")

        login = user_data.get("login")
        display_name = (user_data.get("name") or "").split()
        return ExternalProfile(
            external_id=str(github_id),
            email=email,
            username=login if login and len(login) >= 3 else None,
            first_name=display_name[0] if display_name else None,
            last_name=" ".join(display_name[1:]) or None,
            avatar=user_data.get("avatar_url"),
        )

    async def resolve(self, code: str) -> ExternalProfile:
        """Exchange an authorization code for the caller's GitHub profile."""
        profile = await self.fetch_profile(await self.exchange_code(code))
        logger.info("Resolved GitHub identity %s", profile.external_id)
        return profile
