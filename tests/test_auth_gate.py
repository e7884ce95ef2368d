import pytest

from chat_app.services import AuthAPI
from conftest import signup, auth_headers

PROTECTED_ROUTES = [
    ("GET", "/api/auth/check"),
    ("PUT", "/api/auth/update-profile"),
    ("GET", "/api/messages/users"),
    ("GET", "/api/messages/1"),
    ("POST", "/api/messages/send/1"),
    ("GET", "/api/emojis/config"),
    ("GET", "/api/emojis/search"),
]


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
async def test_missing_cookie_is_rejected(client, method, path):
    response = await client.request(method, path, json={})

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized - No Token Provided"}


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
async def test_tampered_token_is_rejected(client, method, path):
    _, headers = await signup(client, "gate@example.com")
    token = headers["Cookie"].split("=", 1)[1]
    tampered = token[:-2] + ("AA" if not token.endswith("AA") else "BB")

    response = await client.request(method, path, json={}, headers=auth_headers(tampered))

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized - Invalid Token"}


async def test_token_signed_with_other_secret_is_rejected(client):
    from jose import jwt

    token = jwt.encode({"sub": "1"}, "another-secret", algorithm="HS256")
    response = await client.get("/api/auth/check", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized - Invalid Token"


async def test_token_for_deleted_user_is_not_found(client, container):
    auth_api = await container.get(AuthAPI)
    token = auth_api.create_access_token(999)

    response = await client.get("/api/auth/check", headers=auth_headers(token))

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


async def test_expired_token_is_rejected(client, container):
    auth_api = await container.get(AuthAPI)
    auth_api.ACCESS_TOKEN_EXPIRE_DAYS = -1
    token = auth_api.create_access_token(1)

    response = await client.get("/api/auth/check", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized - Invalid Token"


# The gate runs before path and body validation, so a missing session wins
# over a malformed request.
MALFORMED_REQUESTS = [
    ("GET", "/api/messages/not-an-id", None),
    ("POST", "/api/messages/send/1", None),
    ("POST", "/api/messages/send/abc", {"text": "hi"}),
    ("POST", "/api/messages/send/1", {"text": ["not", "a", "string"]}),
    ("PUT", "/api/auth/update-profile", None),
    ("PUT", "/api/auth/update-profile", {"profilePic": 42}),
    ("GET", "/api/emojis/category/smileys-emotion", None),
]


@pytest.mark.parametrize("method,path,body", MALFORMED_REQUESTS)
async def test_missing_cookie_beats_validation(client, method, path, body):
    response = await client.request(method, path, json=body)

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized - No Token Provided"}


@pytest.mark.parametrize("method,path,body", MALFORMED_REQUESTS)
async def test_tampered_token_beats_validation(client, method, path, body):
    response = await client.request(method, path, json=body, headers=auth_headers("not-a-token"))

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized - Invalid Token"}


async def test_deleted_user_beats_validation(client, container):
    auth_api = await container.get(AuthAPI)
    headers = auth_headers(auth_api.create_access_token(999))

    response = await client.get("/api/messages/not-an-id", headers=headers)

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


async def test_malformed_request_with_session_is_bad_request(client):
    _, headers = await signup(client, "valid@example.com")

    response = await client.get("/api/messages/not-an-id", headers=headers)

    assert response.status_code == 400
    assert "message" in response.json()


async def test_missing_body_with_session_is_bad_request(client):
    bob, headers = await signup(client, "bodyless@example.com")

    send = await client.post(f"/api/messages/send/{bob['id']}", headers=headers)
    profile = await client.put("/api/auth/update-profile", headers=headers)

    assert send.status_code == 400
    assert send.json() == {"message": "Message must contain text or an image"}
    assert profile.status_code == 400
    assert profile.json() == {"message": "Profile pic is required"}
