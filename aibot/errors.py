"""Error types raised by aibot services."""

from typing import Optional


class AIBotError(Exception):
    """Base class for errors that are reported back to the chat user."""

    user_message = "Something went wrong while processing your request."

    def __init__(self, detail: str = "", user_message: Optional[str] = None):
        super().__init__(detail or self.user_message)
        self.detail = detail
        if user_message is not None:
            self.user_message = user_message


class ConfigurationError(AIBotError):
    """Required configuration is missing or invalid."""

    user_message = "The bot is not configured correctly."


class TelegramAPIError(AIBotError):
    """The Telegram Bot API rejected a call or could not be reached."""

    user_message = "Failed to communicate with the chat service."


class FileDownloadError(AIBotError):
    """A document could not be downloaded."""

    user_message = "Failed to download the file."


class DocumentDecodeError(AIBotError):
    """A document payload does not match its expected format."""

    def __init__(self, file_format: str, detail: str = ""):
        super().__init__(
            detail, user_message=f"Failed to process {file_format.upper()} file."
        )
        self.file_format = file_format


class EmbeddingError(AIBotError):
    """The embedding provider failed or returned nothing."""

    user_message = "Failed to generate an embedding for your input."


class VectorStoreError(AIBotError):
    """The vector database call failed."""

    user_message = "Failed to access the vector database."


class CompletionError(AIBotError):
    """The completion provider failed or returned no choices."""

    user_message = "Failed to generate an answer."
