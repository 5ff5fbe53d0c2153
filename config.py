"""
Runtime configuration read from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


def parse_api_keys(raw: Optional[str]) -> List[str]:
    """Split a comma separated key list, dropping blanks."""
    if not raw:
        return []
    return [key.strip() for key in raw.split(",") if key.strip()]


@dataclass
class Settings:
    """Service configuration."""

    api_keys: List[str] = field(default_factory=list)
    """Gemini API keys in preference order"""

    llm_base_url: str = GEMINI_OPENAI_BASE_URL
    llm_model: str = "gemini-1.5-flash"
    max_output_tokens: int = 2048
    llm_timeout: float = 120.0
    temperature: float = 0.7

    key_cooldown_seconds: float = 60.0
    """How long a rate limited key sits out"""

    key_max_retries: int = 3
    key_backoff_seconds: float = 1.0

    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "ai_news"

    @classmethod
    def from_env(cls) -> "Settings":
        keys = parse_api_keys(os.getenv("GEMINI_API_KEYS"))
        if not keys:
            keys = parse_api_keys(os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"))

        return cls(
            api_keys=keys,
            llm_base_url=os.getenv("LLM_BASE_URL", GEMINI_OPENAI_BASE_URL),
            llm_model=os.getenv("LLM_MODEL") or os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            max_output_tokens=int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "2048")),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "120")),
            key_cooldown_seconds=float(os.getenv("KEY_COOLDOWN_SECONDS", "60")),
            key_max_retries=int(os.getenv("KEY_MAX_RETRIES", "3")),
            key_backoff_seconds=float(os.getenv("KEY_BACKOFF_SECONDS", "1")),
            mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
            mongodb_db=os.getenv("MONGODB_DB", "ai_news"),
        )
