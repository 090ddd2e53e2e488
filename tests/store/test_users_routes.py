"""
Integration tests for the record store user endpoints.
"""


async def _create(store_http, **payload):
    body = {"email": "a@x.com", "password_hash": "hashed", **payload}
    resp = await store_http.post("/users", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_user_applies_defaults(store_http):
    user = await _create(store_http, username="alice")
    assert user["role"] == "USER"
    assert user["status"] == "ACTIVE"
    assert user["email_verified"] is False
    assert "password_hash" not in user


async def test_duplicate_email_conflicts(store_http):
    await _create(store_http)
    resp = await store_http.post("/users", json={"email": "a@x.com"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "User with this email already exists"


async def test_duplicate_username_conflicts(store_http):
    await _create(store_http, username="alice")
    resp = await store_http.post("/users", json={"email": "b@x.com", "username": "alice"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Username already taken"


async def test_lookup_by_email_includes_hash_but_by_id_does_not(store_http):
    user = await _create(store_http)

    by_email = await store_http.get("/users/by-email", params={"email": "a@x.com"})
    assert by_email.status_code == 200
    assert by_email.json()["password_hash"] == "hashed"

    by_id = await store_http.get(f"/users/{user['id']}")
    assert by_id.status_code == 200
    assert "password_hash" not in by_id.json()

    with_hash = await store_http.get(f"/users/{user['id']}/with-password")
    assert with_hash.json()["password_hash"] == "hashed"


async def test_lookup_by_github_id(store_http):
    user = await _create(store_http, github_id="4242")
    resp = await store_http.get("/users/by-github", params={"github_id": "4242"})
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]

    missing = await store_http.get("/users/by-github", params={"github_id": "1"})
    assert missing.status_code == 404


async def test_partial_update_only_touches_given_fields(store_http):
    user = await _create(store_http, first_name="Ada")
    resp = await store_http.patch(f"/users/{user['id']}", json={"last_name": "Lovelace"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["first_name"] == "Ada"
    assert body["last_name"] == "Lovelace"


async def test_update_unknown_user_is_not_found(store_http):
    resp = await store_http.patch("/users/does-not-exist", json={"first_name": "x"})
    assert resp.status_code == 404


async def test_update_to_taken_email_conflicts(store_http):
    await _create(store_http)
    other = await _create(store_http, email="b@x.com")
    resp = await store_http.put(f"/users/{other['id']}", json={"email": "a@x.com"})
    assert resp.status_code == 409


async def test_list_hides_deleted_users(store_http):
    await _create(store_http)
    gone = await _create(store_http, email="b@x.com")
    await store_http.patch(f"/users/{gone['id']}", json={"status": "DELETED"})

    resp = await store_http.get("/users", params={"skip": 0, "take": 10})
    assert resp.status_code == 200
    page = resp.json()
    assert page["total"] == 1
    assert [user["email"] for user in page["users"]] == ["a@x.com"]


async def test_delete_user_cascades_to_tokens_and_sessions(store_http):
    user = await _create(store_http)
    await store_http.post(
        "/refresh-tokens",
        json={"token": "rt-1", "user_id": user["id"], "expires_at": "2999-01-01T00:00:00Z"},
    )
    await store_http.post("/sessions", json={"user_id": user["id"], "ip_address": "127.0.0.1"})

    resp = await store_http.delete(f"/users/{user['id']}")
    assert resp.status_code == 204

    assert (await store_http.get(f"/users/{user['id']}")).status_code == 404
    assert (await store_http.get("/refresh-tokens/rt-1")).status_code == 404
    assert (await store_http.get(f"/sessions/user/{user['id']}")).json() == []


async def test_delete_unknown_user_is_not_found(store_http):
    resp = await store_http.delete("/users/does-not-exist")
    assert resp.status_code == 404


async def test_lookup_by_email_with_slash_in_local_part(store_http):
    user = await _create(store_http, email="a/b@x.com")
    resp = await store_http.get("/users/by-email", params={"email": "a/b@x.com"})
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]
