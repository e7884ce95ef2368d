from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )

class SignupRequest(CamelModel):
    # Presence is checked by the handler so the client gets "All fields are required"
    email: str | None = None
    full_name: str | None = None
    password: str | None = None

class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None

class UpdateProfileRequest(CamelModel):
    profile_pic: str | None = None  # data URI

class UserResponse(CamelModel):
    id: int
    email: str
    full_name: str
    profile_pic: str = ""
    created_at: datetime
    updated_at: datetime

class LogoutResponse(BaseModel):
    message: str
