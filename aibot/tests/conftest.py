"""Pytest configuration and fixtures."""

import json
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from aibot.services.ai.composer import AnswerComposer
from aibot.services.ai.embedding import EmbeddingClient
from aibot.services.assistant import Assistant
from aibot.services.chat.router import MessageRouter
from aibot.services.chat.sessions import SessionStore
from aibot.services.telegram.types import TelegramMessage
from aibot.services.vector_db.qdrant_client import VectorStoreClient

QUERY_VECTOR = [0.1, 0.2, 0.3]


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["AIBOT_LOG_LEVEL"] = "DEBUG"


def make_embedding_response(vectors: List[List[float]]) -> SimpleNamespace:
    """Build an object shaped like an OpenAI embeddings response."""
    return SimpleNamespace(data=[SimpleNamespace(embedding=v) for v in vectors])


def make_completion_response(*contents: str) -> SimpleNamespace:
    """Build an object shaped like an OpenAI chat completion response."""
    return SimpleNamespace(
        choices=[
            SimpleNamespace(message=SimpleNamespace(content=content))
            for content in contents
        ]
    )


def make_scored_point(
    point_id: str,
    score: float,
    payload: Dict[str, Any],
    vector: Optional[List[float]] = None,
) -> SimpleNamespace:
    """Build an object shaped like a Qdrant scored point."""
    return SimpleNamespace(
        id=point_id, score=score, payload=payload, vector=vector or [0.5, 0.5, 0.5]
    )


def make_message(
    text: Optional[str] = None,
    document: Optional[Dict[str, Any]] = None,
    chat_id: int = 42,
    user_id: int = 7,
) -> TelegramMessage:
    """Build an inbound Telegram message."""
    data: Dict[str, Any] = {
        "message_id": 1,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": user_id, "is_bot": False, "username": "alice"},
    }
    if text is not None:
        data["text"] = text
    if document is not None:
        data["document"] = document
    return TelegramMessage.model_validate(data)


@pytest.fixture
def openai_client():
    """Mock AsyncOpenAI client with embeddings and chat completions."""
    client = MagicMock()
    client.embeddings.create = AsyncMock(
        return_value=make_embedding_response([QUERY_VECTOR])
    )
    client.chat.completions.create = AsyncMock(
        return_value=make_completion_response("Paris is the capital of France.")
    )
    return client


@pytest.fixture
def qdrant():
    """Mock synchronous Qdrant SDK client."""
    client = MagicMock()
    client.collection_exists.return_value = True
    client.query_points.return_value = SimpleNamespace(
        points=[
            make_scored_point(
                "rec-1", 0.91, {"source": "geo.json", "text": "Paris is in France."}
            )
        ]
    )
    return client


@pytest.fixture
def vector_store(qdrant):
    return VectorStoreClient(
        url="http://localhost:6333",
        api_key="test-key",
        collection_name="test-documents",
        top_k=5,
        client=qdrant,
    )


@pytest.fixture
def assistant(openai_client, vector_store):
    """Assistant wired to mocked provider SDKs."""
    return Assistant(
        embedder=EmbeddingClient(openai_client=openai_client, model="test-embedding"),
        vector_store=vector_store,
        composer=AnswerComposer(
            openai_client=openai_client,
            model="test-completion",
            max_context_bytes=16000,
            include_vector_values=False,
        ),
    )


@pytest.fixture
def telegram():
    """Mock Telegram transport."""
    client = MagicMock()
    client.send_message = AsyncMock()
    client.download_file = AsyncMock()
    client.get_updates = AsyncMock(return_value=[])
    return client


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def router(assistant, telegram, sessions):
    return MessageRouter(
        assistant=assistant, telegram=telegram, sessions=sessions, version="9.9.9"
    )


def make_http_session(status: int, body: bytes) -> MagicMock:
    """
    Build a stand-in for ``aiohttp.ClientSession`` whose requests all return one response.

    :param status: HTTP status of the response
    :param body: raw response body
    :return: mock session class
    """
    response = MagicMock()
    response.status = status
    response.read = AsyncMock(return_value=body)
    response.json = AsyncMock(side_effect=lambda **kwargs: json.loads(body))

    request_ctx = MagicMock()
    request_ctx.__aenter__ = AsyncMock(return_value=response)
    request_ctx.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.post.return_value = request_ctx
    session.get.return_value = request_ctx

    session_ctx = MagicMock()
    session_ctx.__aenter__ = AsyncMock(return_value=session)
    session_ctx.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session_ctx)
