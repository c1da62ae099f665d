from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # app
    APP_NAME: str = "HR Portal"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # database
    DATABASE_URL: str = "sqlite:///./hr.db"

    # auth
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    # one-time tokens
    TOKEN_HASH_SECRET: str = ""
    INVITATION_TOKEN_TTL_HOURS: float = 72
    PASSWORD_RESET_TOKEN_TTL_HOURS: float = 0.5
    ATTACHMENT_UNLOCK_TOKEN_TTL_HOURS: float = 720
    INVOICE_UNLOCK_TOKEN_TTL_HOURS: float = 72
    SITE_BASE_URL: str = "http://localhost:3000"

    # mail
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = ""
    SMTP_USE_TLS: bool = True

    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_origins(cls, v):
        if isinstance(v, str):
            if v.strip().startswith("["):
                import json
                return json.loads(v)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def token_hash_key(self) -> bytes:
        return (self.TOKEN_HASH_SECRET or self.SECRET_KEY).encode("utf-8")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
