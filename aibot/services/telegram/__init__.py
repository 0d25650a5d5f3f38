"""Telegram service for receiving messages and sending replies."""

from aibot.services.telegram.client import TelegramClient
from aibot.services.telegram.types import (
    TelegramDocument,
    TelegramMessage,
    TelegramUpdate,
    TelegramUser,
)

__all__ = [
    "TelegramClient",
    "TelegramDocument",
    "TelegramMessage",
    "TelegramUpdate",
    "TelegramUser",
]
