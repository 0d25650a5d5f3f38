"""Telegram Bot API objects used by the bot."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    """Sender of a message."""

    id: int
    is_bot: bool = False
    first_name: Optional[str] = None
    username: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Username when set, otherwise first name or numeric id."""
        return self.username or self.first_name or str(self.id)


class TelegramChat(BaseModel):
    """Chat a message belongs to."""

    id: int
    type: Optional[str] = None


class TelegramDocument(BaseModel):
    """File attached to a message."""

    file_id: str
    file_unique_id: Optional[str] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class TelegramFile(BaseModel):
    """Result of getFile: where an attachment can be downloaded from."""

    file_id: str
    file_size: Optional[int] = None
    file_path: Optional[str] = None


class TelegramMessage(BaseModel):
    """Inbound chat message."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(None, alias="from")
    text: Optional[str] = None
    document: Optional[TelegramDocument] = None
    caption: Optional[str] = None

    @property
    def user_id(self) -> int:
        """Sender id; falls back to the chat id for anonymous channel posts."""
        return self.from_user.id if self.from_user else self.chat.id

    @property
    def command(self) -> Optional[str]:
        """
        Bot command carried by the message, without the leading slash.

        ``/start@my_bot payload`` yields ``start``.
        """
        if not self.text or not self.text.startswith("/"):
            return None
        parts = self.text[1:].split(maxsplit=1)
        if not parts:
            return None
        return parts[0].split("@", 1)[0] or None


class TelegramUpdate(BaseModel):
    """One item returned by getUpdates."""

    update_id: int
    message: Optional[TelegramMessage] = None

