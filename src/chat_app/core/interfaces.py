from abc import ABC, abstractmethod

from .dto import UserDTO, UserCredentialsDTO, MessageDTO

class UserInterface(ABC):
    @abstractmethod
    async def create_user(
            self,
            email: str,
            full_name: str,
            hashed_password: str
    ) -> UserDTO:
        """
        Creates a new user in the database.
        :param email:
        :param full_name:
        :param hashed_password:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_user_by_id(
            self,
            user_id: int
    ) -> UserDTO | None:
        """
        Get user by User.id
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_user_by_email(
            self,
            email: str
    ) -> UserDTO | None:
        """
        Get user by User.email (exact, case-sensitive match)
        :param email:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_credentials_by_email(
            self,
            email: str
    ) -> UserCredentialsDTO | None:
        """
        Get user together with the password hash, for login only
        :param email:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_users_except(
            self,
            user_id: int
    ) -> list[UserDTO]:
        """
        Get every user except the given one, in store order
        :param user_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def update_profile_pic(
            self,
            user_id: int,
            profile_pic: str
    ) -> UserDTO | None:
        """
        Updates the avatar URL of a user.
        :param user_id:
        :param profile_pic:
        :return: updated user or None if the user does not exist
        """
        raise NotImplementedError()


class MessageInterface(ABC):
    @abstractmethod
    async def create_message(
            self,
            sender_id: int,
            receiver_id: int,
            text: str | None,
            image: str | None
    ) -> MessageDTO:
        """
        Creates a new message in the database.
        :param sender_id:
        :param receiver_id:
        :param text:
        :param image: durable URL, never an inline payload
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_conversation(
            self,
            user1_id: int,
            user2_id: int
    ) -> list[MessageDTO]:
        """
        Gets the full conversation between two users in both directions,
        oldest first.
        :param user1_id:
        :param user2_id:
        :return:
        """
        raise NotImplementedError()
