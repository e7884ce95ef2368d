from dataclasses import dataclass, field
from environs import Env

@dataclass
class JWTConfig:
    secret_key: str
    algorithm: str = "HS256"
    expire_days: int = 7
    cookie_name: str = "jwt"
    cookie_secure: bool = True

@dataclass
class DBConfig:
    """ PostgreSQL """
    host: str | None = None
    port: int | None = None
    name: str | None = None
    user: str | None = None
    password: str | None = None

    """ SQLite """
    path: str | None = None

@dataclass
class CloudinaryConfig:
    cloud_name: str | None = None
    api_key: str | None = None
    api_secret: str | None = None
    folder: str = "chat-app"

@dataclass
class EmojiConfig:
    api_key: str | None = None
    base_url: str = "https://emoji-api.com/emojis"
    timeout: float = 10.0

@dataclass
class AppConfig:
    host: str = "0.0.0.0"
    port: int = 5001
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"

@dataclass
class Config:
    """ Config """
    jwt: JWTConfig
    db: DBConfig
    cloudinary: CloudinaryConfig = field(default_factory=CloudinaryConfig)
    emoji: EmojiConfig = field(default_factory=EmojiConfig)
    app: AppConfig = field(default_factory=AppConfig)

def load_config(path: str | None) -> Config:
    env = Env()
    env.read_env(path)

    return Config(
        jwt=JWTConfig(
            secret_key=env('SECRET_KEY'),
            algorithm=env('JWT_ALGORITHM', 'HS256'),
            expire_days=env.int('JWT_EXPIRE_DAYS', 7),
            cookie_name=env('JWT_COOKIE_NAME', 'jwt'),
            cookie_secure=env.bool('JWT_COOKIE_SECURE', True)
        ),
        db=DBConfig(
            host=env('DB_HOST', None),
            port=env.int('DB_PORT', None),
            name=env('DB_NAME', None),
            user=env('DB_USER', None),
            password=env('DB_PASSWORD', None),
            path=env('DB_PATH', 'data/chat.db')
        ),
        cloudinary=CloudinaryConfig(
            cloud_name=env('CLOUDINARY_CLOUD_NAME', None),
            api_key=env('CLOUDINARY_API_KEY', None),
            api_secret=env('CLOUDINARY_API_SECRET', None),
            folder=env('CLOUDINARY_FOLDER', 'chat-app')
        ),
        emoji=EmojiConfig(
            api_key=env('EMOJI_API_KEY', None),
            base_url=env('EMOJI_API_URL', 'https://emoji-api.com/emojis'),
            timeout=env.float('EMOJI_API_TIMEOUT', 10.0)
        ),
        app=AppConfig(
            host=env('APP_HOST', '0.0.0.0'),
            port=env.int('PORT', 5001),
            cors_origins=env.list('CORS_ORIGINS', ['http://localhost:5173']),
            log_level=env('LOG_LEVEL', 'INFO')
        )
    )
