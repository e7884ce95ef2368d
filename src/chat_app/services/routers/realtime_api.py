from fastapi import APIRouter, HTTPException, WebSocket, status
import asyncio
import logging

from chat_app.core.dto import UserDTO
from chat_app.core.gateways import UserGateway
from chat_app.core.notifier import ConnectionManager
from .auth_api import AuthAPI


ONLINE_USERS_EVENT = "getOnlineUsers"


class RealtimeAPI:
    """
    Websocket endpoint for live updates.

    The socket is authenticated with the same session cookie as the HTTP
    API and goes through the same auth gate. Connected users receive
    ``newMessage`` events and the list of online user ids as
    ``getOnlineUsers`` whenever somebody connects or disconnects.
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
            connection_manager: ConnectionManager
    ):
        self.logger = logger
        self.auth_api = auth_api
        self.connection_manager = connection_manager

        self._realtime_router = APIRouter(prefix="/api", tags=["Realtime"])
        self._register_endpoints()

    def get_router(self) -> APIRouter:
        return self._realtime_router

    def _broadcast_online_users(self):
        self.connection_manager.broadcast(ONLINE_USERS_EVENT, self.connection_manager.get_online_users())

    async def _authenticate(self, websocket: WebSocket) -> UserDTO:
        token = websocket.cookies.get(self.auth_api.COOKIE_NAME)
        # The socket lives in a session scope; the gateway is request scoped
        async with websocket.state.dishka_container() as request_container:
            user_gateway = await request_container.get(UserGateway)
            return await self.auth_api.get_current_user(token, user_gateway)

    def _register_endpoints(self):
        @self._realtime_router.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            try:
                user = await self._authenticate(websocket)
            except HTTPException as e:
                self.logger.warning("Rejected websocket connection: %s", e.detail)
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                return

            await websocket.accept()
            outbox = self.connection_manager.register(user.id, websocket)
            sender = asyncio.create_task(self.connection_manager.forward(websocket, outbox))
            self._broadcast_online_users()

            try:
                while True:
                    # Clients only listen; any frame, text or binary, is ignored
                    message = await websocket.receive()
                    if message["type"] == "websocket.disconnect":
                        break
            finally:
                sender.cancel()
                self.connection_manager.unregister(user.id, websocket)
                self._broadcast_online_users()
