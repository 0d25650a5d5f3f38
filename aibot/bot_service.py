"""
Bot Service

This module provides a standalone service that long-polls the Telegram
Bot API and answers every message it receives.

Usage:
    python -m aibot bot
"""

import asyncio
import signal
from typing import Optional, Set

from loguru import logger
from openai import AsyncOpenAI

from aibot.errors import TelegramAPIError
from aibot.services.ai.composer import AnswerComposer
from aibot.services.ai.embedding import EmbeddingClient
from aibot.services.assistant import Assistant
from aibot.services.chat.router import MessageRouter
from aibot.services.chat.sessions import SessionStore
from aibot.services.telegram.client import TelegramClient
from aibot.services.telegram.types import TelegramMessage
from aibot.services.vector_db.qdrant_client import VectorStoreClient
from aibot.settings import Settings, settings


class BotService:
    """Long-polling loop that hands each message to the router."""

    def __init__(
        self,
        telegram: TelegramClient,
        router: MessageRouter,
        poll_timeout: Optional[int] = None,
        error_delay: Optional[float] = None,
    ):
        """
        Initialize the bot service.

        :param telegram: transport to poll
        :param router: handler for inbound messages
        :param poll_timeout: long polling timeout in seconds
        :param error_delay: pause after a failed poll, in seconds
        """
        self.telegram = telegram
        self.router = router
        self.poll_timeout = (
            settings.telegram_poll_timeout if poll_timeout is None else poll_timeout
        )
        self.error_delay = (
            settings.telegram_poll_error_delay if error_delay is None else error_delay
        )
        self.offset: Optional[int] = None
        self.should_exit = False
        self._tasks: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """Poll for updates until stopped."""
        logger.info("Bot service polling for updates")
        while not self.should_exit:
            await self.poll_once()

    async def poll_once(self) -> int:
        """
        Fetch one batch of updates and dispatch its messages.

        :return: number of messages dispatched
        """
        try:
            updates = await self.telegram.get_updates(
                offset=self.offset, timeout=self.poll_timeout
            )
        except TelegramAPIError as e:
            logger.error(f"Polling failed: {e}")
            await asyncio.sleep(self.error_delay)
            return 0
        except Exception:
            logger.exception("Unexpected error while polling for updates")
            await asyncio.sleep(self.error_delay)
            return 0

        dispatched = 0
        for update in updates:
            self.offset = update.update_id + 1
            if update.message is None:
                continue
            task = asyncio.create_task(self._dispatch(update.message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            dispatched += 1
        return dispatched

    async def _dispatch(self, message: TelegramMessage) -> None:
        try:
            await self.router.handle(message)
        except Exception as e:
            logger.exception(
                f"Error processing message {message.message_id} in chat {message.chat.id}: {e}"
            )

    async def stop(self) -> None:
        """Stop polling and wait for in-flight messages."""
        self.should_exit = True
        logger.info("Bot service stopping")
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


def build_assistant(config: Settings = settings) -> Assistant:
    """
    Create the shared provider clients and the pipelines that use them.

    :param config: application settings
    :return: assistant holding long-lived client handles
    """
    openai_client = AsyncOpenAI(api_key=config.openai_api_key)
    return Assistant(
        embedder=EmbeddingClient(
            openai_client=openai_client, model=config.openai_embedding_model
        ),
        vector_store=VectorStoreClient(
            url=config.qdrant_url,
            api_key=config.qdrant_api_key,
            collection_name=config.qdrant_collection_name,
            timeout=config.qdrant_timeout,
            top_k=config.search_top_k,
        ),
        composer=AnswerComposer(
            openai_client=openai_client,
            model=config.openai_completion_model,
            max_context_bytes=config.prompt_context_max_bytes,
            include_vector_values=config.prompt_include_vector_values,
        ),
    )


def build_service(config: Settings = settings) -> BotService:
    """
    Wire clients, pipelines and router from settings.

    :param config: application settings
    :return: ready-to-start service
    """
    assistant = build_assistant(config)
    telegram = TelegramClient(
        token=config.telegram_bot_token,
        api_url=config.telegram_api_url,
        timeout=config.http_timeout,
    )
    router = MessageRouter(assistant=assistant, telegram=telegram, sessions=SessionStore())
    return BotService(
        telegram=telegram,
        router=router,
        poll_timeout=config.telegram_poll_timeout,
        error_delay=config.telegram_poll_error_delay,
    )


async def main(config: Settings = settings) -> None:
    """Run the bot service."""
    logger.info("Starting bot service")
    config.validate_required()

    service = build_service(config)
    await service.router.assistant.vector_store.ensure_collection_exists(
        config.embedding_dimension
    )

    me = await service.telegram.get_me()
    logger.info(f"Authorized as @{me.display_name}")

    # Set up signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, main_task.cancel)

    try:
        await service.start()
    except asyncio.CancelledError:
        logger.info("Bot service cancelled, shutting down...")
    finally:
        await service.stop()

    logger.info("Bot service terminated")
