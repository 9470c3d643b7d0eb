"""Environment-driven settings for the insight pipeline."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Runtime configuration, normally built by :func:`load_settings`."""

    inference_provider: Literal["openai", "claude"] = "openai"
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    claude_model: str = "claude-3-5-haiku-latest"

    max_attempts: int = Field(3, ge=1)
    retry_base_delay: float = Field(2.0, ge=0, description="Seconds; multiplied by the attempt number")
    breaker_cooldown: float = Field(300.0, ge=0, description="Seconds the breaker stays open")
    payload_cap: int = Field(500, ge=1, description="Maximum records sent per inference call")

    records_path: Path = Path("data/records.csv")
    fetch_limit: int = Field(1000, ge=1)

    reddit_client_id: str | None = None
    reddit_client_secret: str | None = None
    reddit_user_agent: str = "insight-engine/0.1"

    model_config = {
        "frozen": True,
    }

    def require_inference_key(self) -> str:
        """Return the API key for the selected provider or raise."""
        if self.inference_provider == "openai":
            key, name = self.openai_api_key, "OPENAI_API_KEY"
        else:
            key, name = self.anthropic_api_key, "ANTHROPIC_API_KEY"
        if not key:
            raise ConfigurationError(f"{name} is not configured")
        return key


def _env_number(name: str, default: float, cast=float):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def load_settings() -> Settings:
    """Read settings from the environment (and a local ``.env`` file if present)."""
    load_dotenv()

    provider = os.getenv("INFERENCE_PROVIDER", "openai").strip().lower()
    if provider not in ("openai", "claude"):
        raise ConfigurationError(f"Unknown INFERENCE_PROVIDER {provider!r} (expected 'openai' or 'claude')")

    try:
        settings = Settings(
            inference_provider=provider,
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            claude_model=os.getenv("CLAUDE_MODEL", "claude-3-5-haiku-latest"),
            max_attempts=_env_number("INSIGHT_MAX_ATTEMPTS", 3, int),
            retry_base_delay=_env_number("INSIGHT_RETRY_DELAY", 2.0),
            breaker_cooldown=_env_number("INSIGHT_BREAKER_COOLDOWN", 300.0),
            payload_cap=_env_number("INSIGHT_PAYLOAD_CAP", 500, int),
            records_path=Path(os.getenv("INSIGHT_RECORDS_PATH", "data/records.csv")),
            fetch_limit=_env_number("INSIGHT_FETCH_LIMIT", 1000, int),
            reddit_client_id=os.getenv("REDDIT_CLIENT_ID"),
            reddit_client_secret=os.getenv("REDDIT_CLIENT_SECRET"),
            reddit_user_agent=os.getenv("REDDIT_USER_AGENT", "insight-engine/0.1"),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
    logger.debug("Loaded settings (provider=%s, records=%s)", settings.inference_provider, settings.records_path)
    return settings
