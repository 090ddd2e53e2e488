"""
Integration tests for GitHub sign-in and external identity linking.
"""
import httpx
import pytest

from auth_service.core.config import Settings
from auth_service.core.errors import AuthServiceError, ErrorKind
from auth_service.core.security import StateSigner
from auth_service.main import app as auth_app
from auth_service.schemas.auth import ExternalProfile
from auth_service.services.github_oauth import GitHubOAuthClient, GitHubOAuthError

PROFILE = ExternalProfile(external_id="4242", email="mona@x.com", username="octocat", avatar="https://avatars/1")


async def _start(client) -> str:
    resp = await client.get("/api/auth/github")
    assert resp.status_code == 302
    location = httpx.URL(resp.headers["location"])
    assert location.host == "github.com"
    assert location.params["client_id"] == "test-client-id"
    return location.params["state"]


async def test_callback_redirects_to_frontend_with_tokens(client, store_http):
    state = await _start(client)

    resp = await client.get("/api/auth/github/callback", params={"code": "good-code", "state": state})
    assert resp.status_code == 302
    location = httpx.URL(resp.headers["location"])
    assert location.path == "/auth/callback"
    assert location.params["accessToken"]
    assert location.params["refreshToken"]

    user = (await store_http.get("/users/by-github", params={"github_id": "4242"})).json()
    assert user["email"] == "mona@x.com"
    assert user["username"] == "octocat"
    assert user["first_name"] == "Mona"
    assert user["last_name"] == "Lisa Octocat"
    assert user["email_verified"] is True
    assert user["password_hash"] is None


async def test_callback_rejects_forged_state(client):
    resp = await client.get("/api/auth/github/callback", params={"code": "good-code", "state": "forged"})
    assert resp.status_code == 401


async def test_callback_rejects_bad_code(client):
    state = await _start(client)
    resp = await client.get("/api/auth/github/callback", params={"code": "bad-code", "state": state})
    assert resp.status_code == 401


async def test_login_start_requires_configuration(client):
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    auth_app.state.github_client = GitHubOAuthClient(http, Settings(github_client_id="", github_client_secret=""))
    resp = await client.get("/api/auth/github")
    assert resp.status_code == 503
    await http.aclose()


async def test_same_external_identity_resolves_to_same_user(auth_service):
    first = await auth_service.oauth_upsert(PROFILE)
    second = await auth_service.oauth_upsert(PROFILE)
    assert first.user.id == second.user.id
    assert first.user.last_login_at is not None
    assert second.user.avatar == "https://avatars/1"


async def test_external_identity_links_existing_password_account(auth_service, register_user, store_http):
    registered = await register_user(email="mona@x.com")

    result = await auth_service.oauth_upsert(PROFILE)
    assert result.user.id == registered["user"]["id"]
    assert result.user.github_id == "4242"

    page = (await store_http.get("/users")).json()
    assert page["total"] == 1
    # the password still works after linking
    login = await auth_service.login("mona@x.com", "Abc12345!")
    assert login.user.id == registered["user"]["id"]


async def test_callback_uses_injected_settings_and_signer(client):
    state = await _start(client)
    resp = await client.get("/api/auth/github/callback", params={"code": "good-code", "state": state})
    assert httpx.URL(resp.headers["location"]).host == "frontend.test"

    foreign = StateSigner("some-other-secret").dumps({"provider": "github"})
    rejected = await client.get("/api/auth/github/callback", params={"code": "good-code", "state": foreign})
    assert rejected.status_code == 401


async def test_inactive_linked_account_cannot_sign_in(auth_service, store_http):
    first = await auth_service.oauth_upsert(PROFILE)
    await store_http.patch(f"/users/{first.user.id}", json={"status": "SUSPENDED"})

    with pytest.raises(AuthServiceError) as excinfo:
        await auth_service.oauth_upsert(PROFILE)
    assert excinfo.value.message == "Account is not active"


async def test_inactive_password_account_is_not_linked(auth_service, register_user, store_http):
    registered = await register_user(email="mona@x.com")
    user_id = registered["user"]["id"]
    await store_http.patch(f"/users/{user_id}", json={"status": "SUSPENDED"})

    with pytest.raises(AuthServiceError) as excinfo:
        await auth_service.oauth_upsert(PROFILE)
    assert excinfo.value.kind is ErrorKind.UNAUTHORIZED
    assert excinfo.value.message == "Account is not active"

    user = (await store_http.get(f"/users/{user_id}")).json()
    assert user["github_id"] is None
    assert user["last_login_at"] is None
    sessions = (await store_http.get(f"/sessions/user/{user_id}")).json()
    assert sessions == []


async def test_taken_username_is_dropped_for_new_external_user(auth_service, register_user):
    await register_user(email="other@x.com", username="octocat")

    result = await auth_service.oauth_upsert(PROFILE)
    assert result.user.email == "mona@x.com"
    assert result.user.github_id == "4242"
    assert result.user.username is None


async def test_non_json_github_response_is_an_oauth_error(settings):
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>")))
    github = GitHubOAuthClient(http, settings)
    with pytest.raises(GitHubOAuthError):
        await github.exchange_code("good-code")
    with pytest.raises(GitHubOAuthError):
        await github.fetch_profile("gho_test")
    await http.aclose()
