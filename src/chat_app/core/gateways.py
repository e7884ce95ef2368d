from sqlalchemy import select, insert, update, or_, and_
import logging

from .database import User, Message, utcnow
from .interfaces import UserInterface, MessageInterface
from .dto import UserDTO, UserCredentialsDTO, MessageDTO
from .db_manager import DatabaseManager

class UserGateway(UserInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def create_user(self, email: str, full_name: str, hashed_password: str) -> UserDTO:
        async with self._db_manager.session() as session:
            try:
                stmt = insert(User).values(
                    email=email,
                    full_name=full_name,
                    hashed_password=hashed_password
                ).returning(User)
                result = await session.execute(stmt)
                user = result.scalars().first()
                return UserDTO.model_validate(user)
            except Exception as e:
                self._logger.error("Error creating user in database: %s", e)
                raise

    async def get_user_by_id(self, user_id: int) -> UserDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User).where(User.id == user_id)
                result = await session.execute(stmt)
                user = result.scalars().first()
                if user:
                    return UserDTO.model_validate(user)
                else:
                    return None
            except Exception as e:
                self._logger.error("Error getting user by id in database: %s", e)
                raise

    async def get_user_by_email(self, email: str) -> UserDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User).where(User.email == email)
                result = await session.execute(stmt)
                user = result.scalars().first()
                if user:
                    return UserDTO.model_validate(user)
                else:
                    return None
            except Exception as e:
                self._logger.error("Error getting user by email in database: %s", e)
                raise

    async def get_credentials_by_email(self, email: str) -> UserCredentialsDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User).where(User.email == email)
                result = await session.execute(stmt)
                user = result.scalars().first()
                if user is None:
                    return None

                return UserCredentialsDTO.model_validate(user)
            except Exception as e:
                self._logger.error("Error getting user credentials in database: %s", e)
                raise

    async def get_users_except(self, user_id: int) -> list[UserDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User).where(User.id != user_id).order_by(User.id)
                result = await session.execute(stmt)
                users = result.scalars().all()

                return [UserDTO.model_validate(user) for user in users]
            except Exception as e:
                self._logger.error("Error getting sidebar users in database: %s", e)
                raise

    async def update_profile_pic(self, user_id: int, profile_pic: str) -> UserDTO | None:
        async with self._db_manager.session() as session:
            try:
                stmt = update(User).where(
                    User.id == user_id
                ).values(profile_pic=profile_pic, updated_at=utcnow()).returning(User)
                result = await session.execute(stmt)
                user = result.scalars().first()

                if user is None:
                    return None

                return UserDTO.model_validate(user)
            except Exception as e:
                self._logger.error("Error updating profile pic in database: %s", e)
                raise

class MessageGateway(MessageInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def create_message(
            self,
            sender_id: int,
            receiver_id: int,
            text: str | None,
            image: str | None
    ) -> MessageDTO:
        async with self._db_manager.session() as session:
            try:
                stmt = insert(Message).values(
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    text=text,
                    image=image
                ).returning(Message)
                result = await session.execute(stmt)
                msg = result.scalars().first()

                return MessageDTO.model_validate(msg)

            except Exception as e:
                self._logger.error("Error creating message in database: %s", e)
                raise

    async def get_conversation(self, user1_id: int, user2_id: int) -> list[MessageDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(Message).where(
                    or_(
                        and_(
                            Message.sender_id == user1_id,
                            Message.receiver_id == user2_id
                        ),
                        and_(
                            Message.sender_id == user2_id,
                            Message.receiver_id == user1_id
                        )
                    )
                ).order_by(Message.created_at, Message.id)
                result = await session.execute(stmt)
                messages = result.scalars().all()

                return [MessageDTO.model_validate(m) for m in messages]

            except Exception as e:
                self._logger.error("Error getting conversation in database: %s", e)
                raise
