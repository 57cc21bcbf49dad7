from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Application settings loaded from environment variables.

    Keep all storage, directory and context settings centralized here.
    """

    app_env: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    redis_url: Optional[str] = os.getenv("REDIS_URL") or None
    directory_api_url: str = os.getenv("DIRECTORY_API_URL", "https://www.reddit.com")
    directory_user_agent: str = os.getenv(
        "DIRECTORY_USER_AGENT", "community-eightball/1.0"
    )
    directory_timeout: float = float(os.getenv("DIRECTORY_TIMEOUT", "5.0"))
    metadata_cache_ttl: int = int(os.getenv("METADATA_CACHE_TTL", "3600"))
    history_ttl: int = int(os.getenv("HISTORY_TTL", "86400"))
    history_limit: int = int(os.getenv("HISTORY_LIMIT", "10"))
    post_id_header: str = os.getenv("POST_ID_HEADER", "X-Post-Id")
    user_id_header: str = os.getenv("USER_ID_HEADER", "X-User-Id")
    subreddit_header: str = os.getenv("SUBREDDIT_HEADER", "X-Subreddit-Name")

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
