from typing import AsyncIterable
from dishka import Provider, Scope, provide, from_context
import logging

from chat_app.config import Config
from chat_app.core.db_manager import DatabaseManager
from chat_app.core.emoji import EmojiClient
from chat_app.core.gateways import UserGateway, MessageGateway
from chat_app.core.notifier import ConnectionManager
from chat_app.core.password_hash import PasswordHash
from chat_app.core.storage import AssetStorage, CloudinaryAssetStorage
from chat_app.services.routers.auth_api import AuthAPI
from chat_app.services.routers.emoji_api import EmojiAPI
from chat_app.services.routers.message_api import MessageAPI
from chat_app.services.routers.realtime_api import RealtimeAPI

class AdaptersProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_logger(self) -> logging.Logger:
        return logging.getLogger("chat_app")

    @provide(scope=Scope.APP)
    async def get_db_manager(self, config: Config) -> AsyncIterable[DatabaseManager]:
        db_manager = DatabaseManager(config)
        await db_manager.initialize()
        await db_manager.create_tables()
        yield db_manager
        await db_manager.close()

class CollaboratorsProvider(Provider):
    @provide(scope=Scope.APP)
    def get_asset_storage(self, config: Config, logger: logging.Logger) -> AssetStorage:
        return CloudinaryAssetStorage(config.cloudinary, logger=logger)

    @provide(scope=Scope.APP)
    def get_connection_manager(self, logger: logging.Logger) -> ConnectionManager:
        return ConnectionManager(logger=logger)

    @provide(scope=Scope.APP)
    def get_password_hash(self, logger: logging.Logger) -> PasswordHash:
        return PasswordHash(logger=logger)

    @provide(scope=Scope.APP)
    async def get_emoji_client(self, config: Config, logger: logging.Logger) -> AsyncIterable[EmojiClient]:
        emoji_client = EmojiClient(
            api_key=config.emoji.api_key,
            base_url=config.emoji.base_url,
            timeout=config.emoji.timeout,
            logger=logger
        )
        yield emoji_client
        await emoji_client.close()

class GatewaysProvider(Provider):
    @provide(scope=Scope.REQUEST)
    def get_user_gateway(self, db_manager: DatabaseManager, logger: logging.Logger) -> UserGateway:
        return UserGateway(db_manager, logger)

    @provide(scope=Scope.REQUEST)
    def get_message_gateway(self, db_manager: DatabaseManager, logger: logging.Logger) -> MessageGateway:
        return MessageGateway(db_manager, logger)

class ServicesProvider(Provider):
    @provide(scope=Scope.APP)
    def get_auth_api(
        self,
        config: Config,
        password_hash: PasswordHash,
        logger: logging.Logger
    ) -> AuthAPI:
        return AuthAPI(
            jwt_config=config.jwt,
            password_hash=password_hash,
            logger=logger
        )

    @provide(scope=Scope.APP)
    def get_message_api(
        self,
        auth_api: AuthAPI,
        connection_manager: ConnectionManager,
        logger: logging.Logger
    ) -> MessageAPI:
        return MessageAPI(
            logger=logger,
            auth_api=auth_api,
            connection_manager=connection_manager
        )

    @provide(scope=Scope.APP)
    def get_realtime_api(
        self,
        auth_api: AuthAPI,
        connection_manager: ConnectionManager,
        logger: logging.Logger
    ) -> RealtimeAPI:
        return RealtimeAPI(
            logger=logger,
            auth_api=auth_api,
            connection_manager=connection_manager
        )

    @provide(scope=Scope.APP)
    def get_emoji_api(
        self,
        auth_api: AuthAPI,
        emoji_client: EmojiClient,
        logger: logging.Logger
    ) -> EmojiAPI:
        return EmojiAPI(
            logger=logger,
            auth_api=auth_api,
            emoji_client=emoji_client
        )
