import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False

    # Fixed seed for every room's shuffles; unset means fresh randomness
    SHUFFLE_SEED: int | None = None

    # WebSocket config
    WS_HEARTBEAT_INTERVAL: int = 30
    WS_CONNECTION_TIMEOUT: int = 300
    WS_MAX_MESSAGE_SIZE: int = 4 * 1024
    WS_MAX_MESSAGES_PER_SECOND: int = 10
    WS_RATE_LIMIT_WINDOW: float = 1.0

    @field_validator(
        "WS_HEARTBEAT_INTERVAL",
        "WS_CONNECTION_TIMEOUT",
        "WS_MAX_MESSAGE_SIZE",
        "WS_MAX_MESSAGES_PER_SECOND",
        "WS_RATE_LIMIT_WINDOW",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v


def configure_logging(debug: bool = False) -> None:
    """Send application logs to stdout; DEBUG shows per-card draws."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Per-frame chatter from the websocket stack
    for noisy in ("websockets", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info(
        "Settings loaded: debug=%s, seeded_shuffle=%s",
        settings.DEBUG,
        settings.SHUFFLE_SEED is not None,
    )
    logger.debug(
        "WebSocket limits: max_message_size=%d, rate=%d/%.1fs, idle_timeout=%ds",
        settings.WS_MAX_MESSAGE_SIZE,
        settings.WS_MAX_MESSAGES_PER_SECOND,
        settings.WS_RATE_LIMIT_WINDOW,
        settings.WS_CONNECTION_TIMEOUT,
    )
    return settings
