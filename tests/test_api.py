"""
End-to-end checks through the HTTP layer: gate behaviour, status codes and
response shapes.
"""
import time

import pytest

from devconnector.auth.tokens import TokenCodec, TokenConfig

from conftest import TEST_SECRET


async def register(client, name="Alice", email=None, password="secret123"):
    resp = await client.post(
        "/api/users",
        json={"name": name, "email": email or f"{name.lower()}@example.com", "password": password},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def auth(token):
    return {"x-auth-token": token}


# ─────────────────────────── Accounts & gate ──────────────────────────────

@pytest.mark.asyncio
async def test_register_login_and_current_user(client, codec):
    token = await register(client)
    user_id = codec.verify(token)

    resp = await client.post(
        "/api/auth", json={"email": "alice@example.com", "password": "secret123"}
    )
    assert resp.status_code == 200
    assert codec.verify(resp.json()["token"]) == user_id

    resp = await client.get("/api/auth", headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == user_id
    assert body["name"] == "Alice"
    assert body["avatar"].startswith("//www.gravatar.com/avatar/")
    assert "password" not in body


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await register(client)
    resp = await client.post(
        "/api/users",
        json={"name": "Other", "email": "alice@example.com", "password": "secret123"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"msg": "User already exists"}


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    await register(client)
    resp = await client.post(
        "/api/auth", json={"email": "alice@example.com", "password": "wrong-one"}
    )
    assert resp.status_code == 400
    assert resp.json() == {"msg": "Invalid Credentials"}


@pytest.mark.asyncio
async def test_register_validation_errors(client):
    resp = await client.post(
        "/api/users", json={"name": "", "email": "not-an-email", "password": "123"}
    )
    assert resp.status_code == 400
    params = {e["param"] for e in resp.json()["errors"]}
    assert params == {"name", "email", "password"}


@pytest.mark.asyncio
async def test_gate_rejects_missing_token(client):
    resp = await client.get("/api/auth")
    assert resp.status_code == 401
    assert resp.json() == {"msg": "No token, authorization denied"}


@pytest.mark.asyncio
async def test_gate_rejects_foreign_signature(client, codec):
    user_id = codec.verify(await register(client))
    forged = TokenCodec(
        TokenConfig(secret_key="someone-elses-key-0123456789abcdefghij")
    ).issue(user_id)
    resp = await client.get("/api/posts", headers=auth(forged))
    assert resp.status_code == 401
    assert resp.json() == {"msg": "Token is not valid"}


@pytest.mark.asyncio
async def test_gate_rejects_expired_token(client):
    token = await register(client)
    user_id = TokenCodec(TokenConfig(secret_key=TEST_SECRET)).verify(token)
    stale = TokenCodec(
        TokenConfig(secret_key=TEST_SECRET), clock=lambda: time.time() - 10
    ).issue(user_id, ttl_seconds=0)

    resp = await client.get("/api/auth", headers=auth(stale))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_missing_signing_key_is_a_server_error(client):
    from devconnector.auth.gate import get_token_codec
    from devconnector.main import app

    app.dependency_overrides[get_token_codec] = lambda: TokenCodec(TokenConfig(secret_key=None))
    resp = await client.post(
        "/api/users",
        json={"name": "Alice", "email": "alice@example.com", "password": "secret123"},
    )
    assert resp.status_code == 500
    assert resp.json() == {"msg": "Server error"}


# ─────────────────────────── Posts ────────────────────────────────────────

@pytest.mark.asyncio
async def test_post_like_comment_flow(client):
    alice = await register(client, "Alice")
    bob = await register(client, "Bob")

    resp = await client.post("/api/posts", json={"text": "Hello"}, headers=auth(alice))
    assert resp.status_code == 200
    post_id = resp.json()["post_id"]

    resp = await client.put(f"/api/posts/like/{post_id}", headers=auth(bob))
    assert resp.status_code == 200
    assert len(resp.json()) == 1

    resp = await client.put(f"/api/posts/like/{post_id}", headers=auth(bob))
    assert resp.status_code == 400
    assert resp.json() == {"msg": "Post already liked"}

    resp = await client.put(f"/api/posts/unlike/{post_id}", headers=auth(bob))
    assert resp.status_code == 200
    assert resp.json() == []

    resp = await client.put(f"/api/posts/unlike/{post_id}", headers=auth(bob))
    assert resp.status_code == 400
    assert resp.json() == {"msg": "Post has not yet been liked"}

    resp = await client.post(
        f"/api/posts/comment/{post_id}", json={"text": "Nice post"}, headers=auth(bob)
    )
    assert resp.status_code == 200
    comment = resp.json()[0]
    assert comment["text"] == "Nice post"
    assert comment["name"] == "Bob"

    # The post owner may not remove Bob's comment
    resp = await client.delete(
        f"/api/posts/comment/{post_id}/{comment['comment_id']}", headers=auth(alice)
    )
    assert resp.status_code == 401
    assert resp.json() == {"msg": "Unauthorized"}

    resp = await client.delete(
        f"/api/posts/comment/{post_id}/{comment['comment_id']}", headers=auth(bob)
    )
    assert resp.status_code == 200
    assert resp.json() == []

    resp = await client.get(f"/api/posts/{post_id}", headers=auth(bob))
    assert resp.status_code == 200
    assert resp.json()["likes"] == [] and resp.json()["comments"] == []


@pytest.mark.asyncio
async def test_empty_comment_rejected(client):
    alice = await register(client)
    resp = await client.post("/api/posts", json={"text": "Hello"}, headers=auth(alice))
    post_id = resp.json()["post_id"]

    resp = await client.post(
        f"/api/posts/comment/{post_id}", json={"text": "   "}, headers=auth(alice)
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_post_owner_only(client):
    alice = await register(client, "Alice")
    bob = await register(client, "Bob")
    resp = await client.post("/api/posts", json={"text": "Mine"}, headers=auth(alice))
    post_id = resp.json()["post_id"]

    resp = await client.delete(f"/api/posts/{post_id}", headers=auth(bob))
    assert resp.status_code == 401
    assert resp.json() == {"msg": "Unauthorized"}

    resp = await client.delete(f"/api/posts/{post_id}", headers=auth(alice))
    assert resp.status_code == 200
    assert resp.json() == {"msg": "Post removed"}

    resp = await client.get(f"/api/posts/{post_id}", headers=auth(alice))
    assert resp.status_code == 404
    assert resp.json() == {"msg": "Post not found"}


@pytest.mark.asyncio
async def test_list_posts_requires_token(client):
    resp = await client.get("/api/posts")
    assert resp.status_code == 401


# ─────────────────────────── Profiles ─────────────────────────────────────

@pytest.mark.asyncio
async def test_profile_upsert_and_public_reads(client, codec):
    token = await register(client)
    user_id = codec.verify(token)

    resp = await client.get("/api/profile/me", headers=auth(token))
    assert resp.status_code == 404
    assert resp.json() == {"msg": "There is no profile for this user"}

    resp = await client.post(
        "/api/profile",
        json={"status": "dev", "skills": "js, go , rust", "twitter": "@alice"},
        headers=auth(token),
    )
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["skills"] == ["js", "go", "rust"]
    assert profile["social"] == {"twitter": "@alice"}

    resp = await client.post(
        "/api/profile",
        json={"status": "lead", "skills": "js", "bio": "hi"},
        headers=auth(token),
    )
    assert resp.json()["social"] == {"twitter": "@alice"}
    assert resp.json()["status"] == "lead"

    resp = await client.get("/api/profile")
    assert resp.status_code == 200
    assert [p["user"]["name"] for p in resp.json()] == ["Alice"]

    resp = await client.get(f"/api/profile/user/{user_id}")
    assert resp.status_code == 200
    assert resp.json()["bio"] == "hi"

    resp = await client.get("/api/profile/user/nobody")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_profile_requires_status_and_skills(client):
    token = await register(client)
    resp = await client.post("/api/profile", json={"bio": "x"}, headers=auth(token))
    assert resp.status_code == 400
    params = {e["param"] for e in resp.json()["errors"]}
    assert params == {"status", "skills"}


@pytest.mark.asyncio
async def test_profile_upsert_requires_token(client):
    resp = await client.post("/api/profile", json={"status": "dev", "skills": "js"})
    assert resp.status_code == 401
