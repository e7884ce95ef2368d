from datetime import datetime

from .auth_api_models import CamelModel

class MessageSendRequest(CamelModel):
    text: str | None = None
    image: str | None = None  # data URI, replaced by a durable URL before persistence

class MessageResponse(CamelModel):
    id: int
    sender_id: int
    receiver_id: int
    text: str | None = None
    image: str | None = None
    created_at: datetime
    updated_at: datetime
