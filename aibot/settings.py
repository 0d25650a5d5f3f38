import enum
from typing import List, Optional, Sequence

from pydantic_settings import BaseSettings, SettingsConfigDict

from aibot.errors import ConfigurationError

# Needed by the index and answer pipelines
ASSISTANT_REQUIRED_SETTINGS = ("openai_api_key", "qdrant_api_key", "qdrant_url")

# The bot also needs the chat transport
BOT_REQUIRED_SETTINGS = ("telegram_bot_token",) + ASSISTANT_REQUIRED_SETTINGS


class LogLevel(str, enum.Enum):  # noqa: WPS600
    """Possible log levels."""

    NOTSET = "NOTSET"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    # Current environment
    environment: str = "dev"

    log_level: LogLevel = LogLevel.INFO
    enable_file_logging: bool = False
    logs_dir: Optional[str] = None
    structured_logging: bool = False

    # Telegram settings
    telegram_bot_token: str = ""
    telegram_api_url: str = "https://api.telegram.org"
    telegram_poll_timeout: int = 30  # Seconds, long polling
    telegram_poll_error_delay: float = 5.0  # Seconds

    # Outbound file downloads
    http_timeout: int = 60  # Seconds

    # Qdrant Vector DB settings
    qdrant_url: str = ""
    qdrant_api_key: str = ""
    qdrant_collection_name: str = "aibot-documents"
    qdrant_timeout: int = 10  # Seconds
    search_top_k: int = 5

    # OpenAI settings
    openai_api_key: str = ""
    openai_embedding_model: str = "text-embedding-ada-002"
    embedding_dimension: int = 1536
    openai_completion_model: str = "gpt-4o-mini"

    # Prompt context guard, in UTF-8 bytes
    prompt_context_max_bytes: int = 16000
    prompt_include_vector_values: bool = False

    def missing_required(self, names: Optional[Sequence[str]] = None) -> List[str]:
        """
        List required settings that are empty.

        :param names: settings to check, defaults to everything the bot needs
        :return: names of the missing settings
        """
        required = BOT_REQUIRED_SETTINGS if names is None else names
        return [name for name in required if not getattr(self, name).strip()]

    def validate_required(self, names: Optional[Sequence[str]] = None) -> None:
        """
        Fail fast when a required setting is empty.

        :param names: settings to check, defaults to everything the bot needs
        :raises ConfigurationError: if any required setting is missing
        """
        missing = self.missing_required(names)
        if missing:
            env_names = ", ".join(f"AIBOT_{name.upper()}" for name in missing)
            raise ConfigurationError(f"Missing required configuration: {env_names}")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AIBOT_",
        extra="ignore",
    )


settings = Settings()
