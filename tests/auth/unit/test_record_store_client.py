"""
Unit tests for the record store client's failure classification.
"""
import httpx
import pytest

from auth_service.core.errors import AuthServiceError, ErrorKind
from auth_service.services.record_store import RecordStoreClient


def _client(handler) -> RecordStoreClient:
    return RecordStoreClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://store/api"))


async def test_conflict_keeps_upstream_message():
    client = _client(lambda request: httpx.Response(409, json={"detail": "User with this email already exists"}))
    result = await client.create_user(email="a@x.com")
    assert not result.ok
    assert result.kind is ErrorKind.CONFLICT
    assert result.failure.message == "User with this email already exists"
    assert result.failure.status_code == 409


async def test_not_found_without_body_uses_default_message():
    client = _client(lambda request: httpx.Response(404))
    result = await client.find_user_by_email("a@x.com")
    assert result.kind is ErrorKind.NOT_FOUND
    assert result.failure.message == "User not found"


async def test_unexpected_status_is_upstream_and_keeps_code():
    client = _client(lambda request: httpx.Response(503, json={"detail": "down"}))
    result = await client.find_user_by_id("u1")
    assert result.kind is ErrorKind.UPSTREAM
    assert result.failure.status_code == 503
    with pytest.raises(AuthServiceError) as excinfo:
        result.unwrap()
    assert excinfo.value.status_code == 503
    assert excinfo.value.message == "down"


async def test_transport_error_is_upstream_500():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await _client(handler).find_user_by_id("u1")
    assert result.kind is ErrorKind.UPSTREAM
    assert result.failure.status_code == 500


async def test_malformed_body_is_upstream():
    client = _client(lambda request: httpx.Response(200, content=b"not json"))
    result = await client.find_user_by_id("u1")
    assert result.kind is ErrorKind.UPSTREAM


async def test_absent_lookups_and_deletes_are_not_failures():
    client = _client(lambda request: httpx.Response(404, json={"detail": "Refresh token not found"}))

    found = await client.find_refresh_token("rt")
    assert found.ok and found.value is None

    external = await client.find_user_by_external_id("4242")
    assert external.ok and external.value is None

    deleted = await client.delete_refresh_token("rt")
    assert deleted.ok


async def test_email_lookup_sends_address_as_query_parameter():
    seen = []

    def handler(request):
        seen.append((request.url.path, request.url.params["email"]))
        return httpx.Response(404)

    await _client(handler).find_user_by_email("a+b/c@x.com")
    assert seen == [("/api/users/by-email", "a+b/c@x.com")]
