import asyncio
import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from chat_app.core.emoji import EmojiClient
from chat_app.core.notifier import ConnectionManager
from chat_app.main import create_app, make_container
from chat_app.services import AuthAPI
from conftest import FakeAssetStorage, FakeCollaboratorsProvider, auth_headers, session_cookie


@pytest.fixture
def realtime_client(config):
    emoji_client = EmojiClient(api_key=None, http_client=httpx.AsyncClient())
    container = make_container(
        config,
        FakeCollaboratorsProvider(FakeAssetStorage(), ConnectionManager(logger=logging.getLogger("tests")), emoji_client)
    )
    app = asyncio.run(create_app(container))
    jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    # One portal for every socket so all connections share an event loop;
    # leaving the block closes the container through the app lifespan
    with TestClient(app, cookies=jar) as client:
        client.container = container
        yield client
    asyncio.run(emoji_client.close())


def register(client: TestClient, email: str) -> tuple[dict, dict]:
    response = client.post(
        "/api/auth/signup",
        json={"email": email, "fullName": "Test User", "password": "secret123"}
    )
    assert response.status_code == 201, response.text
    return response.json(), auth_headers(session_cookie(response))


def test_connection_without_cookie_is_refused(realtime_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with realtime_client.websocket_connect("/api/ws"):
            pass

    assert exc_info.value.code == 1008


def test_connection_with_invalid_token_is_refused(realtime_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with realtime_client.websocket_connect("/api/ws", headers=auth_headers("not-a-token")):
            pass

    assert exc_info.value.code == 1008


def test_connection_for_deleted_user_is_refused(realtime_client):
    auth_api = realtime_client.portal.call(realtime_client.container.get, AuthAPI)
    headers = auth_headers(auth_api.create_access_token(999))

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with realtime_client.websocket_connect("/api/ws", headers=headers):
            pass

    assert exc_info.value.code == 1008


def test_online_users_are_broadcast(realtime_client):
    alice, alice_headers = register(realtime_client, "alice@example.com")
    bob, bob_headers = register(realtime_client, "bob@example.com")

    with realtime_client.websocket_connect("/api/ws", headers=alice_headers) as alice_ws:
        assert alice_ws.receive_json() == {"event": "getOnlineUsers", "data": [alice["id"]]}

        with realtime_client.websocket_connect("/api/ws", headers=bob_headers) as bob_ws:
            online = [alice["id"], bob["id"]]
            assert bob_ws.receive_json() == {"event": "getOnlineUsers", "data": online}
            assert alice_ws.receive_json() == {"event": "getOnlineUsers", "data": online}

        assert alice_ws.receive_json() == {"event": "getOnlineUsers", "data": [alice["id"]]}


def test_binary_frames_are_ignored(realtime_client):
    alice, alice_headers = register(realtime_client, "alice@example.com")
    bob, bob_headers = register(realtime_client, "bob@example.com")

    with realtime_client.websocket_connect("/api/ws", headers=alice_headers) as alice_ws:
        alice_ws.receive_json()
        alice_ws.send_bytes(b"\x00\x01")
        alice_ws.send_text("ping")

        with realtime_client.websocket_connect("/api/ws", headers=bob_headers) as bob_ws:
            bob_ws.receive_json()
            assert alice_ws.receive_json() == {"event": "getOnlineUsers", "data": [alice["id"], bob["id"]]}


def test_sent_message_reaches_online_receiver(realtime_client):
    alice, alice_headers = register(realtime_client, "alice@example.com")
    bob, bob_headers = register(realtime_client, "bob@example.com")

    with realtime_client.websocket_connect("/api/ws", headers=bob_headers) as bob_ws:
        bob_ws.receive_json()

        response = realtime_client.post(f"/api/messages/send/{bob['id']}", json={"text": "hi bob"}, headers=alice_headers)
        assert response.status_code == 201

        assert bob_ws.receive_json() == {"event": "newMessage", "data": response.json()}
