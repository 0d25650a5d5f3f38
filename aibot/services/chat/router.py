"""Dispatch inbound chat messages to the command, query and upload handlers."""

from enum import Enum
from typing import Optional

from loguru import logger

from aibot import __version__
from aibot.errors import AIBotError
from aibot.services.assistant import (
    AnswerStatus,
    Assistant,
    IndexResult,
    IndexStatus,
)
from aibot.services.chat import messages
from aibot.services.chat.sessions import SessionStore
from aibot.services.documents.classifier import FileFormat, classify_file, is_url
from aibot.services.telegram.client import TelegramClient
from aibot.services.telegram.types import TelegramMessage


class MessageKind(str, Enum):
    """Shape of an inbound message."""

    COMMAND = "command"
    TEXT = "text"
    DOCUMENT = "document"
    UNSUPPORTED = "unsupported"


def classify_message(message: TelegramMessage) -> MessageKind:
    """
    Decide which handler a message goes to.

    :param message: inbound message
    :return: message kind
    """
    if message.document is not None:
        return MessageKind.DOCUMENT
    if message.command is not None:
        return MessageKind.COMMAND
    if message.text is not None:
        return MessageKind.TEXT
    return MessageKind.UNSUPPORTED


def index_reply(result: IndexResult) -> str:
    """Reply text for an indexing outcome."""
    if result.status == IndexStatus.UNSUPPORTED:
        return messages.UNSUPPORTED_FILE_MESSAGE
    if result.status == IndexStatus.NO_TEXT:
        return messages.NO_TEXT_MESSAGE
    return messages.INDEXED_TEMPLATE.format(source=result.source)


class MessageRouter:
    """Routes each chat message to one handler and sends exactly one reply."""

    def __init__(
        self,
        assistant: Assistant,
        telegram: TelegramClient,
        sessions: Optional[SessionStore] = None,
        version: str = __version__,
    ):
        """
        Initialize the router.

        :param assistant: index/answer pipelines
        :param telegram: transport used for replies and downloads
        :param sessions: per-user session map
        :param version: version shown in the welcome message
        """
        self.assistant = assistant
        self.telegram = telegram
        self.sessions = sessions if sessions is not None else SessionStore()
        self.version = version

    async def handle(self, message: TelegramMessage) -> str:
        """
        Handle one inbound message and send the reply.

        :param message: inbound message
        :return: the reply that was sent
        """
        await self.sessions.get_or_create(message.user_id)
        kind = classify_message(message)
        sender = message.from_user.display_name if message.from_user else message.chat.id
        logger.info(f"[{sender}] received {kind.value}: {self._describe(message, kind)}")

        try:
            if kind == MessageKind.COMMAND:
                reply = await self.handle_command(message.command or "")
            elif kind == MessageKind.TEXT:
                reply = await self.handle_text(message.text or "")
            elif kind == MessageKind.DOCUMENT:
                reply = await self.handle_document(message)
            else:
                reply = messages.UNSUPPORTED_MESSAGE
        except AIBotError as e:
            logger.error(f"Failed to handle {kind.value} from {sender}: {e}")
            reply = e.user_message
        except Exception:
            logger.exception(f"Unexpected error handling {kind.value} from {sender}")
            reply = messages.GENERIC_ERROR_MESSAGE

        await self.telegram.send_message(message.chat.id, reply)
        return reply

    async def handle_command(self, command: str) -> str:
        """Reply to a bot command."""
        if command == "start":
            return messages.WELCOME_TEMPLATE.format(version=self.version)
        return messages.UNKNOWN_COMMAND_TEMPLATE.format(command=command)

    async def handle_text(self, text: str) -> str:
        """Treat text as a document link or as a query."""
        if is_url(text):
            return index_reply(await self.assistant.index_url(text))

        result = await self.assistant.answer(text)
        if result.status == AnswerStatus.EMPTY_QUERY:
            return messages.EMPTY_QUERY_MESSAGE
        if result.status == AnswerStatus.NO_MATCHES:
            return messages.NO_MATCHES_MESSAGE
        return result.answer

    async def handle_document(self, message: TelegramMessage) -> str:
        """Download an attachment and index it."""
        document = message.document
        filename = document.file_name or document.file_id
        # Reject before downloading anything we could not decode
        if classify_file(filename) == FileFormat.UNKNOWN:
            return messages.UNSUPPORTED_FILE_MESSAGE

        payload = await self.telegram.download_file(document.file_id)
        return index_reply(await self.assistant.index_document(filename, payload))

    @staticmethod
    def _describe(message: TelegramMessage, kind: MessageKind) -> str:
        if kind == MessageKind.DOCUMENT:
            return message.document.file_name or message.document.file_id
        if message.text is not None:
            return repr(message.text[:100])
        return "-"
