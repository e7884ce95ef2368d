from fastapi import APIRouter, HTTPException, status, Depends
import logging

from chat_app.core.emoji import EmojiClient, EmojiDTO, EmojiAPIError, EmojiAPIKeyMissingError
from ..models.emoji_api_models import (
    EmojiResponse,
    EmojiCategoryResponse,
    EmojiConfigResponse,
    EmojiStatusResponse,
)
from .auth_api import AuthAPI


class EmojiAPI:
    """
    Emoji picker endpoints backed by the shared ``EmojiClient``.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for user validation
        emoji_client: Process-wide Open Emoji API client
        emoji_router: FastAPI router containing emoji endpoints
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
            emoji_client: EmojiClient
    ):
        self.logger = logger
        self.auth_api = auth_api
        self.emoji_client = emoji_client

        # Every emoji route sits behind the auth gate
        self._emoji_router = APIRouter(
            prefix="/api/emojis",
            tags=["Emojis"],
            dependencies=[Depends(self.auth_api.current_user)]
        )
        self._register_endpoints()

    @property
    def emoji_router(self) -> APIRouter:
        return self._emoji_router

    def get_router(self) -> APIRouter:
        return self._emoji_router

    def _to_response(self, emojis: list[EmojiDTO]) -> list[EmojiResponse]:
        return [
            EmojiResponse(
                character=e.character,
                unicode_name=e.unicode_name,
                category=e.category,
                slug=e.slug
            ) for e in emojis
        ]

    def _raise_for(self, error: EmojiAPIError):
        if isinstance(error, EmojiAPIKeyMissingError):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Emoji API key is not configured"
            )
        self.logger.error("Emoji API error: %s", error)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Emoji API request failed"
        )

    def _register_endpoints(self):
        @self.emoji_router.get("/config", response_model=EmojiConfigResponse)
        async def get_emoji_config():
            """
            Emoji picker configuration: categories, features and limits.
            """
            return EmojiConfigResponse(
                api_enabled=self.emoji_client.is_configured,
                categories=[
                    EmojiCategoryResponse(id=c.id, name=c.name, icon=c.icon)
                    for c in self.emoji_client.get_categories()
                ]
            )

        @self.emoji_router.get("/status", response_model=EmojiStatusResponse)
        async def get_emoji_status():
            """
            Check that the Open Emoji API is configured and reachable.
            """
            api_status = await self.emoji_client.check_status()
            return EmojiStatusResponse(
                status=api_status.status,
                api_key=api_status.api_key,
                last_checked=api_status.last_checked,
                message=api_status.message
            )

        @self.emoji_router.get("/search", response_model=list[EmojiResponse])
        async def search_emojis(q: str = ""):
            try:
                emojis = await self.emoji_client.search(q)
            except EmojiAPIError as e:
                self._raise_for(e)
            return self._to_response(emojis)

        @self.emoji_router.get("/category/{category_id}", response_model=list[EmojiResponse])
        async def get_emojis_by_category(category_id: str):
            try:
                emojis = await self.emoji_client.by_category(category_id)
            except EmojiAPIError as e:
                self._raise_for(e)
            return self._to_response(emojis)
