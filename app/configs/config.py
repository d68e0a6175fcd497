from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    REDIS_HOST: Optional[str] = None
    REDIS_PORT: Optional[int] = None
    REDIS_USERNAME: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None

    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash-image"

    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None

    ENV: Optional[str] = None

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    UPLOAD_SESSION_TTL_SECONDS: int = 43200
    MAX_UPLOAD_SESSIONS: int = 100

    # Auth sessions
    REMEMBER_ME_DEFAULT: bool = True
    REMEMBER_ME_TTL_SECONDS: int = 60 * 60 * 24 * 30
    SESSION_TTL_SECONDS: int = 43200

    SECURE_COOKIE: bool = False
    SAMESITE: str = 'lax'

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def __init__(self, **values):
        super().__init__(**values)
        # Set SECURE_COOKIE and SAMESITE based on ENV
        if self.ENV == "production":
            self.SECURE_COOKIE = True
            self.SAMESITE = "none"
        elif self.ENV == "local":
            self.SECURE_COOKIE = False
            self.SAMESITE = "lax"


def get_settings() -> Settings:
    return Settings()
