"""
Relay service configuration.
"""
from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


def find_env_file() -> str:
    """Find .env file - check local dir, then project root."""
    local_env = Path(".env")
    root_env = Path(__file__).parent.parent / ".env"

    if local_env.exists():
        return str(local_env)
    elif root_env.exists():
        return str(root_env)
    return ".env"  # default


class Settings(BaseSettings):
    """Service settings from environment variables."""

    # Server
    host: str = "0.0.0.0"
    port: int = 10000

    # Upstream provider (OpenAI-compatible chat completions)
    groq_api_key: str = ""
    groq_url: str = "https://api.groq.com/openai/v1/chat/completions"
    upstream_timeout: float = 30.0
    require_api_key: bool = True  # refuse to start without a key

    # Models
    text_model: str = "deepseek-r1-distill-llama-70b"
    vision_model: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    action_model: str = "llama-3.3-70b-versatile"
    temperature: float = 0.5
    max_tokens: int = 1024

    # "strict": action replies must be a JSON array
    # "lenient": non-JSON action replies come back as plain text
    action_mode: Literal["strict", "lenient"] = "strict"

    # Logging
    log_level: str = "info"
    log_path: str = ""  # e.g. /app/logs/relay.log

    # Version
    version: str = "1.0.0"

    class Config:
        env_prefix = ""
        env_file = find_env_file()
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def has_api_key(self) -> bool:
        return bool(self.groq_api_key.strip())


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
