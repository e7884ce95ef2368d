from datetime import datetime, timezone
from pydantic import BaseModel
import logging

import httpx


class EmojiDTO(BaseModel):
    character: str
    unicode_name: str
    category: str
    slug: str | None = None

class EmojiCategoryDTO(BaseModel):
    id: str
    name: str
    icon: str

class EmojiStatusDTO(BaseModel):
    status: str  # status: 'connected', 'disconnected', 'not_configured'
    api_key: bool
    last_checked: datetime
    message: str


class EmojiAPIError(Exception):
    """Upstream emoji API failed or answered with an unexpected payload."""

class EmojiAPIKeyMissingError(EmojiAPIError):
    """No API key configured for the emoji API."""


CATEGORIES = [
    EmojiCategoryDTO(id="smileys-emotion", name="Smileys", icon="😀"),
    EmojiCategoryDTO(id="people-body", name="People", icon="👋"),
    EmojiCategoryDTO(id="animals-nature", name="Nature", icon="🐶"),
    EmojiCategoryDTO(id="food-drink", name="Food", icon="🍎"),
    EmojiCategoryDTO(id="travel-places", name="Travel", icon="🚗"),
    EmojiCategoryDTO(id="activities", name="Activities", icon="⚽"),
    EmojiCategoryDTO(id="objects", name="Objects", icon="📱"),
    EmojiCategoryDTO(id="symbols", name="Symbols", icon="❤️"),
    EmojiCategoryDTO(id="flags", name="Flags", icon="🏳️"),
]


class EmojiClient:
    """
    Client for the Open Emoji API (https://emoji-api.com/).

    One instance is created per process and shared by reference. Results are
    memoized per query and per category for the lifetime of the instance;
    changing the API key clears the memo.

    Attributes:
        api_key (str | None): Open Emoji API access key
        base_url (str): Emoji API endpoint
        logger (logging.Logger): Logger instance
    """
    ALL_EMOJIS_KEY = "all_emojis"

    def __init__(
            self,
            api_key: str | None,
            base_url: str = "https://emoji-api.com/emojis",
            timeout: float = 10.0,
            http_client: httpx.AsyncClient | None = None,
            logger: logging.Logger | None = None
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.logger = logger or logging.getLogger(__name__)
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._cache: dict[str, list[EmojiDTO]] = {}

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def set_api_key(self, api_key: str | None) -> None:
        self.api_key = api_key
        self._cache.clear()

    def get_categories(self) -> list[EmojiCategoryDTO]:
        return list(CATEGORIES)

    async def get_all_emojis(self) -> list[EmojiDTO]:
        if self.ALL_EMOJIS_KEY in self._cache:
            return self._cache[self.ALL_EMOJIS_KEY]

        emojis = await self._fetch({})
        self._cache[self.ALL_EMOJIS_KEY] = emojis
        return emojis

    async def search(self, term: str | None) -> list[EmojiDTO]:
        """
        Search emojis by name.
        Args:
            term: Search term; blank terms return the full collection
        Returns:
            list[EmojiDTO]: Matching emojis
        Raises:
            EmojiAPIKeyMissingError: If no API key is configured
            EmojiAPIError: If the upstream call fails
        """
        if not term or not term.strip():
            return await self.get_all_emojis()

        cache_key = f"search_{term}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        emojis = await self._fetch({"search": term})
        self._cache[cache_key] = emojis
        return emojis

    async def by_category(self, category_id: str) -> list[EmojiDTO]:
        cache_key = f"category_{category_id}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        all_emojis = await self.get_all_emojis()
        emojis = [e for e in all_emojis if e.category.lower() == category_id.lower()]
        self._cache[cache_key] = emojis
        return emojis

    async def check_status(self) -> EmojiStatusDTO:
        now = datetime.now(timezone.utc)
        if not self.api_key:
            return EmojiStatusDTO(
                status="not_configured",
                api_key=False,
                last_checked=now,
                message="No API key configured. Add EMOJI_API_KEY to environment variables."
            )

        try:
            response = await self._http_client.get(
                self.base_url,
                params={"access_key": self.api_key, "limit": 1}
            )
        except httpx.HTTPError as e:
            return EmojiStatusDTO(
                status="disconnected",
                api_key=True,
                last_checked=now,
                message=f"Connection error: {e}"
            )

        if response.is_success:
            return EmojiStatusDTO(
                status="connected",
                api_key=True,
                last_checked=now,
                message="Open Emoji API is connected and working"
            )

        return EmojiStatusDTO(
            status="disconnected",
            api_key=True,
            last_checked=now,
            message=f"API error: {response.status_code} {response.reason_phrase}"
        )

    async def close(self) -> None:
        await self._http_client.aclose()

    async def _fetch(self, params: dict) -> list[EmojiDTO]:
        if not self.api_key:
            raise EmojiAPIKeyMissingError("API key is required. Please set your Open Emoji API key.")

        try:
            response = await self._http_client.get(
                self.base_url,
                params={"access_key": self.api_key, **params}
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            self.logger.error("Emoji API request failed: %s", str(e))
            raise EmojiAPIError(f"API request failed: {e}") from e
        except ValueError as e:
            raise EmojiAPIError("Invalid API response format") from e

        # A search with no hits comes back as null or an error object
        if "search" in params and not isinstance(data, list):
            return []

        if not isinstance(data, list):
            raise EmojiAPIError("Invalid API response format")

        return [
            EmojiDTO(
                character=item["character"],
                unicode_name=item.get("unicodeName") or item.get("slug") or item["character"],
                category=item.get("group") or "misc",
                slug=item.get("slug")
            ) for item in data if isinstance(item, dict) and item.get("character")
        ]
