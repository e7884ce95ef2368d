from datetime import datetime
from pydantic import Field

from .auth_api_models import CamelModel

class EmojiResponse(CamelModel):
    character: str
    unicode_name: str
    category: str
    slug: str | None = None

class EmojiCategoryResponse(CamelModel):
    id: str
    name: str
    icon: str

class EmojiFeatures(CamelModel):
    search: bool = True
    categories: bool = True
    fallback: bool = False

class EmojiLimits(CamelModel):
    per_page: int = 64
    search_debounce: int = 300

class EmojiConfigResponse(CamelModel):
    api_enabled: bool
    categories: list[EmojiCategoryResponse]
    features: EmojiFeatures = Field(default_factory=EmojiFeatures)
    limits: EmojiLimits = Field(default_factory=EmojiLimits)

class EmojiStatusResponse(CamelModel):
    status: str
    api_key: bool
    last_checked: datetime
    message: str
