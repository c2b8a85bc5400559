from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseModel):
    database_url: str = Field(default="sqlite:///./app.db")
    jwt_secret: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24)
    password_pepper: str = Field(default="")
    admin_secret: Optional[str] = Field(default=None)
    allowed_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    login_rate_limit: str = Field(default="5/minute")
    log_dir: str = Field(default="logs")


def _split_origins(raw: str) -> List[str]:
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or list(DEFAULT_ALLOWED_ORIGINS)


def _load_settings() -> Settings:
    env = os.getenv
    admin_secret = env("ADMIN_SECRET")
    if admin_secret == "":
        admin_secret = None
    return Settings(
        database_url=env("DATABASE_URL", "sqlite:///./app.db") or "sqlite:///./app.db",
        jwt_secret=env("JWT_SECRET", "change-me") or "change-me",
        jwt_algorithm=env("JWT_ALGORITHM", "HS256") or "HS256",
        access_token_expire_minutes=int(env("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")),
        password_pepper=env("PASSWORD_PEPPER", ""),
        admin_secret=admin_secret,
        allowed_origins=_split_origins(env("ALLOWED_ORIGINS", "")),
        login_rate_limit=env("LOGIN_RATE_LIMIT", "5/minute") or "5/minute",
        log_dir=env("LOG_DIR", "logs") or "logs",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return _load_settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


__all__ = ["DEFAULT_ALLOWED_ORIGINS", "Settings", "get_settings", "reload_settings"]
