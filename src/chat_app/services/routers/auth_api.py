from fastapi import status, HTTPException, Depends, APIRouter, Response
from fastapi.security import APIKeyCookie
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import IntegrityError

from dishka import FromDishka
from dishka.integrations.fastapi import inject

import logging

from chat_app.config import JWTConfig
from chat_app.core.dto import UserDTO
from chat_app.core.gateways import UserGateway
from chat_app.core.password_hash import PasswordHash
from chat_app.core.storage import AssetStorage, AssetStorageError
from ..models.auth_api_models import (
    SignupRequest,
    LoginRequest,
    UpdateProfileRequest,
    UserResponse,
    LogoutResponse,
)


MIN_PASSWORD_LENGTH = 6


def to_user_response(user: UserDTO) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        profile_pic=user.profile_pic,
        created_at=user.created_at,
        updated_at=user.updated_at
    )


class AuthAPI:
    """
    Authentication API service: cookie-based JWT sessions and the auth gate
    shared by every protected router.
    Attributes:
        SECRET_KEY (str): Secret key for JWT token signing
        ALGORITHM (str): JWT signing algorithm
        ACCESS_TOKEN_EXPIRE_DAYS (int): Token and cookie lifetime in days
        COOKIE_NAME (str): Name of the HTTP-only session cookie
        password_hash (PasswordHash): Password hasher
        logger (logging.Logger): Logger instance
        cookie_scheme (APIKeyCookie): Extracts the session cookie (no auto error)
        _auth_router (APIRouter): FastAPI router for authentication endpoints
    """
    def __init__(
            self,
            jwt_config: JWTConfig,
            password_hash: PasswordHash,
            logger: logging.Logger
    ):
        self.SECRET_KEY = jwt_config.secret_key
        self.ALGORITHM = jwt_config.algorithm
        self.ACCESS_TOKEN_EXPIRE_DAYS: int = jwt_config.expire_days
        self.COOKIE_NAME = jwt_config.cookie_name
        self.COOKIE_SECURE = jwt_config.cookie_secure
        self.password_hash = password_hash
        self.logger = logger
        self.cookie_scheme = APIKeyCookie(name=self.COOKIE_NAME, auto_error=False)
        self._auth_router = APIRouter(prefix="/api/auth", tags=["Authentication"])
        # Route dependency: runs before path and body validation
        self.current_user = self._build_current_user()
        self._register_endpoints()

    @property
    def auth_router(self) -> APIRouter:
        return self._auth_router

    def get_router(self) -> APIRouter:
        return self._auth_router

    def create_access_token(self, user_id: int) -> str:
        """
        Create JWT access token for authenticated user.
        Args:
            user_id: User ID to include in the token payload
        Returns:
            str: Encoded JWT access token
        """
        try:
            now = datetime.now(timezone.utc)
            payload = {
                "sub": str(user_id),
                "exp": now + timedelta(days=self.ACCESS_TOKEN_EXPIRE_DAYS),
                "iat": now
            }
            return jwt.encode(payload, self.SECRET_KEY, algorithm=self.ALGORITHM)
        except Exception as e:
            self.logger.error("Error creating access token: %s", str(e), exc_info=True)
            raise

    def set_auth_cookie(self, response: Response, user_id: int) -> str:
        token = self.create_access_token(user_id)
        response.set_cookie(
            key=self.COOKIE_NAME,
            value=token,
            max_age=self.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
            httponly=True,
            samesite="strict",
            secure=self.COOKIE_SECURE
        )
        return token

    def clear_auth_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.COOKIE_NAME,
            httponly=True,
            samesite="strict",
            secure=self.COOKIE_SECURE
        )

    def decode_token(self, token: str | None) -> int:
        """
        Validate JWT token and extract user ID.
        Args:
            token: JWT token string taken from the session cookie
        Returns:
            int: User ID extracted from token
        Raises:
            HTTPException: 401 if the token is missing, invalid or expired
        """
        if not token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized - No Token Provided"
            )

        try:
            payload = jwt.decode(token, self.SECRET_KEY, algorithms=[self.ALGORITHM])
            user_id = payload.get("sub")
            if user_id is None:
                raise ValueError("Token has no subject")
            return int(user_id)
        except (JWTError, ValueError) as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized - Invalid Token"
            ) from e

    async def get_current_user(self, token: str | None, user_gateway: UserGateway) -> UserDTO:
        """
        Auth gate: resolve the session cookie to the caller's identity.
        Args:
            token: JWT token string taken from the session cookie
            user_gateway: User gateway for database operations
        Returns:
            UserDTO: Caller's identity, without the password hash
        Raises:
            HTTPException: 401 on a missing or invalid token, 404 if the user no longer exists
        """
        user_id = self.decode_token(token)
        user = await user_gateway.get_user_by_id(user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return user

    def _build_current_user(self):
        @inject
        async def current_user(
                user_gateway: FromDishka[UserGateway],
                token: str | None = Depends(self.cookie_scheme)
        ) -> UserDTO:
            return await self.get_current_user(token, user_gateway)

        return current_user

    def _register_endpoints(self):
        """
        Register all authentication endpoints with the FastAPI router.

        This method sets up the following endpoints:
        - POST /signup: User registration, sets the session cookie
        - POST /login: Email/password login, sets the session cookie
        - POST /logout: Clears the session cookie
        - PUT /update-profile: Upload and store a new profile picture
        - GET /check: Current user information
        """
        @self.auth_router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
        @inject
        async def signup(
                user_data: SignupRequest,
                response: Response,
                user_gateway: FromDishka[UserGateway]
        ):
            """
            Register a new user and start a session.
            Args:
                user_data: Email, full name and password
                response: Outgoing response, receives the session cookie
                user_gateway: User gateway for database operations
            Returns:
                UserResponse: Created user information
            Raises:
                HTTPException: If fields are missing, the password is too short or the email is taken
            """
            if not user_data.email or not user_data.full_name or not user_data.password:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="All fields are required"
                )

            if len(user_data.password) < MIN_PASSWORD_LENGTH:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
                )

            existing_user = await user_gateway.get_user_by_email(user_data.email)
            if existing_user:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Email already exists"
                )

            hashed_password = await self.password_hash.hash(user_data.password)
            try:
                user = await user_gateway.create_user(
                    email=user_data.email,
                    full_name=user_data.full_name,
                    hashed_password=hashed_password
                )
            except IntegrityError:
                # Lost a race against a concurrent signup with the same email
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Email already exists"
                )

            self.set_auth_cookie(response, user.id)
            self.logger.info("New user registered: %s (ID: %s)", user.email, user.id)
            return to_user_response(user)

        @self.auth_router.post("/login", response_model=UserResponse)
        @inject
        async def login(
                login_data: LoginRequest,
                response: Response,
                user_gateway: FromDishka[UserGateway]
        ):
            """
            Authenticate user with email and password.
            Args:
                login_data: Email and password
                response: Outgoing response, receives the session cookie
                user_gateway: User gateway for database operations
            Returns:
                UserResponse: Authenticated user information
            Raises:
                HTTPException: If the credentials do not match
            """
            if not login_data.email or not login_data.password:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Invalid credentials"
                )

            credentials = await user_gateway.get_credentials_by_email(login_data.email)
            if not credentials:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Invalid credentials"
                )

            if not await self.password_hash.compare(login_data.password, credentials.hashed_password):
                self.logger.warning("Invalid password for user: %s", login_data.email)
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Invalid credentials"
                )

            self.set_auth_cookie(response, credentials.id)
            self.logger.info("User logged in: %s (ID: %s)", credentials.email, credentials.id)
            return to_user_response(credentials)

        @self.auth_router.post("/logout", response_model=LogoutResponse)
        async def logout(response: Response):
            """
            Logout user by clearing the session cookie.
            Note: JWT sessions are stateless, the token itself stays valid until it expires.
            Returns:
                LogoutResponse: Success message
            """
            self.clear_auth_cookie(response)
            self.logger.debug("User logged out")
            return LogoutResponse(message="Logged out successfully")

        @self.auth_router.put("/update-profile", response_model=UserResponse)
        @inject
        async def update_profile(
                user_gateway: FromDishka[UserGateway],
                asset_storage: FromDishka[AssetStorage],
                profile_data: UpdateProfileRequest | None = None,
                user: UserDTO = Depends(self.current_user)
        ):
            """
            Upload a new profile picture for the authenticated user.
            Args:
                user_gateway: User gateway for database operations
                asset_storage: Asset storage for the uploaded picture
                profile_data: Inline-encoded picture
                user: Caller's identity, resolved by the auth gate
            Returns:
                UserResponse: Updated user information
            Raises:
                HTTPException: If the picture is missing or the upload fails
            """
            profile_pic = profile_data.profile_pic if profile_data else None
            if not profile_pic or not profile_pic.strip():
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Profile pic is required"
                )

            try:
                profile_pic_url = await asset_storage.upload(profile_pic)
            except AssetStorageError:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to upload profile picture"
                )

            updated_user = await user_gateway.update_profile_pic(user.id, profile_pic_url)
            if not updated_user:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User not found"
                )

            self.logger.info("Profile picture updated for user: %s", user.id)
            return to_user_response(updated_user)

        @self.auth_router.get("/check", response_model=UserResponse)
        async def check_auth(user: UserDTO = Depends(self.current_user)):
            """
            Get current authenticated user's information.
            Args:
                user: Caller's identity, resolved by the auth gate
            Returns:
                UserResponse: Current user's information
            """
            return to_user_response(user)
