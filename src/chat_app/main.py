import asyncio
import logging
from contextlib import asynccontextmanager

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from chat_app.config import Config, load_config
from chat_app.logging_config import setup_logging
from chat_app.providers.dishka_app import (
    AdaptersProvider,
    CollaboratorsProvider,
    GatewaysProvider,
    ServicesProvider,
)
from chat_app.services import AuthAPI, MessageAPI, RealtimeAPI, EmojiAPI
from chat_app.services.exception_handlers import register_exception_handlers

API_VERSION = "1.0.0"

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()

def make_container(config: Config, *providers) -> AsyncContainer:
    return make_async_container(
        AdaptersProvider(),
        *(providers or (CollaboratorsProvider(),)),
        GatewaysProvider(),
        ServicesProvider(),
        context={Config: config},
    )

async def create_app(container: AsyncContainer | None = None) -> FastAPI:
    if container is None:
        container = make_container(load_config(".env"))

    config = await container.get(Config)
    logger = await container.get(logging.Logger)

    app = FastAPI(
        title="Chat App API",
        version=API_VERSION,
        docs_url="/api-docs",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_dishka(container, app)
    register_exception_handlers(app, logger)

    auth_api = await container.get(AuthAPI)
    message_api = await container.get(MessageAPI)
    realtime_api = await container.get(RealtimeAPI)
    emoji_api = await container.get(EmojiAPI)

    app.include_router(auth_api.get_router())
    app.include_router(message_api.get_router())
    app.include_router(realtime_api.get_router())
    app.include_router(emoji_api.get_router())

    @app.get("/api", tags=["Info"])
    async def api_info():
        return {
            "message": "Welcome to Chat App API",
            "version": API_VERSION,
            "documentation": "/api-docs",
            "endpoints": {
                "auth": "/api/auth",
                "messages": "/api/messages",
                "emojis": "/api/emojis",
                "realtime": "/api/ws",
            },
        }

    return app

def main():
    config = load_config(".env")
    setup_logging(config.app.log_level)
    app = asyncio.run(create_app(make_container(config)))
    uvicorn.run(app, host=config.app.host, port=config.app.port, log_level=config.app.log_level.lower())

if __name__ == "__main__":
    main()
