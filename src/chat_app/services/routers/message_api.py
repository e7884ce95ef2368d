from fastapi import APIRouter, HTTPException, status, Depends
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from chat_app.core.dto import MessageDTO, UserDTO
from chat_app.core.gateways import MessageGateway, UserGateway
from chat_app.core.notifier import ConnectionManager
from chat_app.core.storage import AssetStorage, AssetStorageError
from ..models.auth_api_models import UserResponse
from ..models.message_api_models import MessageSendRequest, MessageResponse
from .auth_api import AuthAPI, to_user_response


NEW_MESSAGE_EVENT = "newMessage"


def to_message_response(message: MessageDTO) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        text=message.text,
        image=message.image,
        created_at=message.created_at,
        updated_at=message.updated_at
    )


class MessageAPI:
    """
    Message API handler: the sidebar user list, conversation history and
    sending messages between two users.

    Every endpoint goes through the auth gate of ``auth_api``. A sent message
    is pushed to the receiver through ``connection_manager`` when the
    receiver is online; that push never affects the HTTP response.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for user validation
        connection_manager: Registry of live websocket connections
        message_router: FastAPI router containing message endpoints
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

        self._message_router = APIRouter(prefix="/api/messages", tags=["Messages"])
        self._register_endpoints()

    @property
    def message_router(self) -> APIRouter:
        return self._message_router

    def get_router(self) -> APIRouter:
        return self._message_router

    def notify_receiver(self, message: MessageResponse) -> None:
        """
        Best-effort push of a new message to its receiver. Failures are logged only.
        """
        try:
            if not self.connection_manager.is_connected(message.receiver_id):
                return

            delivered = self.connection_manager.push(
                message.receiver_id,
                NEW_MESSAGE_EVENT,
                message.model_dump(mode="json", by_alias=True)
            )
            if not delivered:
                self.logger.warning("New message %s was not queued for user %s", message.id, message.receiver_id)
        except Exception as e:
            self.logger.error("Error notifying user %s about message %s: %s", message.receiver_id, message.id, e)

    def _register_endpoints(self):
        # Declared before "/{other_user_id}" so "users" is not read as an id
        @self.message_router.get("/users", response_model=list[UserResponse])
        @inject
        async def get_users_for_sidebar(
                user_gateway: FromDishka[UserGateway],
                user: UserDTO = Depends(self.auth_api.current_user)
        ):
            """
            List every user except the caller.

            Args:
                user_gateway: User persistence interface
                user: Caller's identity, resolved by the auth gate

            Returns:
                List of users, in store order, without password hashes
            """
            users = await user_gateway.get_users_except(user.id)
            return [to_user_response(u) for u in users]

        @self.message_router.get("/{other_user_id}", response_model=list[MessageResponse])
        @inject
        async def get_messages(
                other_user_id: int,
                message_gateway: FromDishka[MessageGateway],
                user: UserDTO = Depends(self.auth_api.current_user)
        ):
            """
            Retrieve the whole conversation with another user, oldest first.

            The other user is not looked up: an unknown id simply has no
            messages and yields an empty list. Sending checks the receiver,
            reading does not.

            Args:
                other_user_id: ID of the other conversation participant
                message_gateway: Message persistence interface
                user: Caller's identity, resolved by the auth gate

            Returns:
                List of messages exchanged in both directions
            """
            history = await message_gateway.get_conversation(user.id, other_user_id)
            return [to_message_response(msg) for msg in history]

        @self.message_router.post("/send/{receiver_id}", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
        @inject
        async def send_message(
                receiver_id: int,
                user_gateway: FromDishka[UserGateway],
                message_gateway: FromDishka[MessageGateway],
                asset_storage: FromDishka[AssetStorage],
                message_data: MessageSendRequest | None = None,
                sender: UserDTO = Depends(self.auth_api.current_user)
        ):
            """
            Send a new message to a receiver.

            Args:
                receiver_id: ID of the receiving user
                user_gateway: User persistence interface
                message_gateway: Message persistence interface
                asset_storage: Storage for the attached image
                message_data: Optional text and optional inline image
                sender: Caller's identity, resolved by the auth gate

            Returns:
                The created message

            Raises:
                HTTPException: If the message is empty, the receiver does not exist
                               or the image upload fails
            """
            message_data = message_data or MessageSendRequest()
            text = message_data.text.strip() if message_data.text else ""
            image = message_data.image.strip() if message_data.image else ""
            if not text and not image:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Message must contain text or an image"
                )

            receiver = await user_gateway.get_user_by_id(receiver_id)
            if not receiver:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Receiver not found"
                )

            image_url = None
            if image:
                try:
                    image_url = await asset_storage.upload(image)
                except AssetStorageError:
                    raise HTTPException(
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        detail="Failed to upload image"
                    )

            new_message = await message_gateway.create_message(
                sender_id=sender.id,
                receiver_id=receiver.id,
                text=text or None,
                image=image_url
            )
            self.logger.info("Message %s sent from %s to %s", new_message.id, sender.id, receiver.id)

            message_response = to_message_response(new_message)
            self.notify_receiver(message_response)
            return message_response
