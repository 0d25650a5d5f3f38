"""Telegram Bot API client for receiving messages and sending replies."""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
from loguru import logger
from pydantic import ValidationError

from aibot.errors import FileDownloadError, TelegramAPIError
from aibot.services.documents.fetcher import fetch_url
from aibot.services.telegram.types import TelegramFile, TelegramUpdate, TelegramUser
from aibot.settings import settings

# Telegram rejects sendMessage texts longer than this
MAX_MESSAGE_LENGTH = 4096


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Split a reply into chunks Telegram accepts, preferring line breaks.

    :param text: reply text
    :param limit: maximum chunk length
    :return: non-empty list of chunks
    """
    if len(text) <= limit:
        return [text]

    chunks = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    if remaining:
        chunks.append(remaining)
    return chunks


class TelegramClient:
    """Telegram client for long polling and replies."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> None:
        """
        Initialize Telegram client.

        :param token: Telegram bot token
        :param api_url: Bot API server URL
        :param timeout: Timeout for regular requests in seconds
        """
        self.token = token or settings.telegram_bot_token
        self.timeout = timeout or settings.http_timeout
        base = (api_url or settings.telegram_api_url).rstrip("/")

        if not self.token:
            logger.warning("Telegram bot token not configured, bot cannot poll")

        self._api_url = f"{base}/bot{self.token}"
        self._file_url = f"{base}/file/bot{self.token}"

    async def _request(
        self,
        method: str,
        payload: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Call a Bot API method.

        :param method: API method name, e.g. ``sendMessage``
        :param payload: JSON body
        :param timeout: total request timeout in seconds
        :return: the ``result`` field of the response
        :raises TelegramAPIError: on network errors or ``ok: false`` responses
        """
        client_timeout = aiohttp.ClientTimeout(total=timeout or self.timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            try:
                async with session.post(
                    f"{self._api_url}/{method}", json=payload or {}
                ) as response:
                    try:
                        result = await response.json(content_type=None)
                    except ValueError as e:
                        raise TelegramAPIError(
                            f"{method} returned a non-JSON response (HTTP {response.status})"
                        ) from e
            except aiohttp.ClientError as e:
                raise TelegramAPIError(f"{method} failed: {e}") from e
            except asyncio.TimeoutError as e:
                raise TelegramAPIError(f"{method} timed out") from e

        if not isinstance(result, dict) or not result.get("ok", False):
            description = (
                result.get("description", "unknown_error")
                if isinstance(result, dict)
                else "invalid_response"
            )
            raise TelegramAPIError(f"{method} rejected: {description}")
        return result.get("result")

    async def get_me(self) -> TelegramUser:
        """
        Identify the bot account behind the token.

        :return: bot user
        """
        return TelegramUser.model_validate(await self._request("getMe"))

    async def get_updates(
        self, offset: Optional[int] = None, timeout: Optional[int] = None
    ) -> List[TelegramUpdate]:
        """
        Long-poll for new updates.

        :param offset: first update id to return; earlier updates are confirmed
        :param timeout: long polling timeout in seconds
        :return: received updates, possibly empty
        """
        poll_timeout = settings.telegram_poll_timeout if timeout is None else timeout
        payload: Dict[str, Any] = {
            "timeout": poll_timeout,
            "allowed_updates": ["message"],
        }
        if offset is not None:
            payload["offset"] = offset

        result = await self._request(
            "getUpdates", payload, timeout=poll_timeout + 10
        )

        updates = []
        for item in result or []:
            try:
                updates.append(TelegramUpdate.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed update: {e}")
                # Still confirm it so polling moves past it
                if isinstance(item, dict) and isinstance(item.get("update_id"), int):
                    updates.append(TelegramUpdate(update_id=item["update_id"]))
        return updates

    async def send_message(self, chat_id: int, text: str) -> None:
        """
        Send a plain-text message, split into several if it is too long.

        :param chat_id: target chat
        :param text: message text
        """
        for chunk in split_message(text):
            await self._request("sendMessage", {"chat_id": chat_id, "text": chunk})
        logger.debug(f"Telegram message sent to chat {chat_id}")

    async def get_file(self, file_id: str) -> TelegramFile:
        """
        Resolve an attachment id to its download path.

        :param file_id: Telegram file identifier
        :return: file descriptor
        """
        return TelegramFile.model_validate(
            await self._request("getFile", {"file_id": file_id})
        )

    async def download_file(self, file_id: str) -> bytes:
        """
        Download an attachment.

        :param file_id: Telegram file identifier
        :return: file contents
        :raises FileDownloadError: if the file cannot be resolved or fetched
        """
        try:
            telegram_file = await self.get_file(file_id)
        except TelegramAPIError as e:
            raise FileDownloadError(str(e)) from e

        if not telegram_file.file_path:
            raise FileDownloadError(f"No download path for file {file_id}")

        return await fetch_url(
            f"{self._file_url}/{telegram_file.file_path}", timeout=self.timeout
        )

    @property
    def is_configured(self) -> bool:
        """Check if Telegram client is properly configured."""
        return bool(self.token)
