from pydantic import AfterValidator, BaseModel, ConfigDict
from datetime import datetime, timezone
from typing import Annotated


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]

class UserDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    profile_pic: str = ""
    created_at: UTCDateTime
    updated_at: UTCDateTime

class UserCredentialsDTO(UserDTO):
    # Only produced for the login path.
    hashed_password: str

class MessageDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    text: str | None = None
    image: str | None = None
    created_at: UTCDateTime
    updated_at: UTCDateTime
