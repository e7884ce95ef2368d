from .routers.auth_api import AuthAPI
from .routers.message_api import MessageAPI
from .routers.realtime_api import RealtimeAPI
from .routers.emoji_api import EmojiAPI

__all__ = ["AuthAPI", "MessageAPI", "RealtimeAPI", "EmojiAPI"]
