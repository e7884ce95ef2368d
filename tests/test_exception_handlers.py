import httpx
from sqlalchemy.exc import OperationalError

from chat_app.core.gateways import UserGateway
from conftest import signup


async def test_store_failure_is_internal_error(client, monkeypatch):
    _, headers = await signup(client, "alice@example.com")

    async def broken_get_users_except(self, user_id):
        raise OperationalError("SELECT users", {}, Exception("database is locked"))

    monkeypatch.setattr(UserGateway, "get_users_except", broken_get_users_except)

    response = await client.get("/api/messages/users", headers=headers)

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


async def test_unexpected_failure_is_internal_error(app, monkeypatch):
    async def broken_get_user_by_email(self, email):
        raise RuntimeError("boom")

    monkeypatch.setattr(UserGateway, "get_user_by_email", broken_get_user_by_email)

    # The server error middleware re-raises after responding; keep the response
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/api/auth/signup",
            json={"email": "alice@example.com", "fullName": "Alice", "password": "secret123"}
        )

    assert response.status_code == 500
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"message": "Internal server error"}


async def test_unknown_route_uses_message_body(client):
    response = await client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}
