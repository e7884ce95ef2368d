from http.cookiejar import CookieJar, DefaultCookiePolicy
import logging

import httpx
import pytest
from dishka import Provider, Scope, provide

from chat_app.config import Config, JWTConfig, DBConfig, EmojiConfig
from chat_app.core.emoji import EmojiClient
from chat_app.core.notifier import ConnectionManager
from chat_app.core.password_hash import PasswordHash
from chat_app.core.storage import AssetStorage, AssetStorageError
from chat_app.main import create_app, make_container

TEST_SECRET = "test-secret"
COOKIE_NAME = "jwt"

EMOJI_FIXTURE = [
    {"slug": "grinning-face", "character": "😀", "unicodeName": "grinning face", "group": "smileys-emotion"},
    {"slug": "smiling-face", "character": "☺️", "unicodeName": "smiling face", "group": "smileys-emotion"},
    {"slug": "dog-face", "character": "🐶", "unicodeName": "dog face", "group": "animals-nature"},
]


class FakeAssetStorage(AssetStorage):
    """Stores nothing, hands out predictable URLs."""

    def __init__(self):
        self.uploads: list[str] = []
        self.fail = False

    async def upload(self, payload: str) -> str:
        if self.fail:
            raise AssetStorageError("Asset upload failed")
        self.uploads.append(payload)
        return f"https://assets.test/{len(self.uploads)}.png"


class FakeCollaboratorsProvider(Provider):
    def __init__(self, asset_storage, connection_manager, emoji_client):
        super().__init__()
        self.asset_storage = asset_storage
        self.connection_manager = connection_manager
        self.emoji_client = emoji_client

    @provide(scope=Scope.APP)
    def get_asset_storage(self) -> AssetStorage:
        return self.asset_storage

    @provide(scope=Scope.APP)
    def get_connection_manager(self) -> ConnectionManager:
        return self.connection_manager

    @provide(scope=Scope.APP)
    def get_password_hash(self) -> PasswordHash:
        # Low cost factor keeps the suite fast
        return PasswordHash(n=2 ** 10)

    @provide(scope=Scope.APP)
    def get_emoji_client(self) -> EmojiClient:
        return self.emoji_client


def emoji_transport(requests: list[httpx.Request]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        term = request.url.params.get("search")
        if term is None:
            return httpx.Response(200, json=EMOJI_FIXTURE)
        hits = [e for e in EMOJI_FIXTURE if term in e["unicodeName"]]
        if not hits:
            return httpx.Response(200, json={"status": "error", "message": "No results"})
        return httpx.Response(200, json=hits)

    return httpx.MockTransport(handler)


def session_cookie(response: httpx.Response) -> str:
    """Token from the response's Set-Cookie header."""
    header = response.headers["set-cookie"]
    name, _, value = header.split(";")[0].partition("=")
    assert name == COOKIE_NAME
    return value


def auth_headers(token: str) -> dict:
    return {"Cookie": f"{COOKIE_NAME}={token}"}


async def signup(client: httpx.AsyncClient, email: str, full_name: str = "Test User", password: str = "secret123"):
    """Register a user; returns its identity and the headers of its session."""
    response = await client.post(
        "/api/auth/signup",
        json={"email": email, "fullName": full_name, "password": password}
    )
    assert response.status_code == 201, response.text
    return response.json(), auth_headers(session_cookie(response))


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        jwt=JWTConfig(secret_key=TEST_SECRET, cookie_secure=False),
        db=DBConfig(path=str(tmp_path / "chat.db")),
        emoji=EmojiConfig(api_key="test-key")
    )


@pytest.fixture
def asset_storage() -> FakeAssetStorage:
    return FakeAssetStorage()


@pytest.fixture
def connection_manager() -> ConnectionManager:
    return ConnectionManager(logger=logging.getLogger("tests"))


@pytest.fixture
def emoji_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
async def emoji_client(config, emoji_requests):
    client = EmojiClient(
        api_key=config.emoji.api_key,
        base_url=config.emoji.base_url,
        http_client=httpx.AsyncClient(transport=emoji_transport(emoji_requests))
    )
    yield client
    await client.close()


@pytest.fixture
async def container(config, asset_storage, connection_manager, emoji_client):
    container = make_container(
        config,
        FakeCollaboratorsProvider(asset_storage, connection_manager, emoji_client)
    )
    yield container
    await container.close()


@pytest.fixture
async def app(container):
    return await create_app(container)


@pytest.fixture
async def client(app):
    # A jar that never stores cookies: every request states its session explicitly
    jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
        cookies=jar
    ) as client:
        yield client
