"""Tests for prompt building and answer composition."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from aibot.errors import CompletionError
from aibot.services.ai.composer import (
    SYSTEM_INSTRUCTION,
    TRUNCATION_NOTICE,
    AnswerComposer,
)
from aibot.services.vector_db.types import SearchMatch

from .conftest import make_completion_response


@pytest.fixture
def mock_openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=make_completion_response("The answer.", "Ignored.")
    )
    return client


@pytest.fixture
def matches():
    return [
        SearchMatch(
            id="rec-1",
            score=0.92,
            vector=[0.1, 0.2],
            metadata={"source": "catalog.xml", "text": "Name: Widget, Price: 10"},
        ),
        SearchMatch(id="rec-2", score=0.41, vector=[0.3, 0.4], metadata={}),
    ]


def make_composer(client, **kwargs):
    options = {
        "model": "test-model",
        "max_context_bytes": 16000,
        "include_vector_values": False,
    }
    options.update(kwargs)
    return AnswerComposer(openai_client=client, **options)


def test_build_prompt_contains_query_and_matches(mock_openai_client, matches):
    composer = make_composer(mock_openai_client)

    prompt = composer.build_prompt("How much is the widget?", matches)

    assert prompt.startswith("Question: How much is the widget?\n\nContext:\n")
    assert "Match 1 (id: rec-1, score: 0.9200)" in prompt
    assert '"source": "catalog.xml"' in prompt
    assert "Name: Widget, Price: 10" in prompt
    assert "Match 2 (id: rec-2, score: 0.4100)" in prompt
    assert "Values:" not in prompt


def test_build_context_can_include_vector_values(mock_openai_client, matches):
    composer = make_composer(mock_openai_client, include_vector_values=True)

    context = composer.build_context(matches)

    assert "Values: [0.1, 0.2]" in context


def test_build_context_keeps_non_ascii_metadata(mock_openai_client):
    composer = make_composer(mock_openai_client)
    match = SearchMatch(id="r", score=1.0, metadata={"text": "Привет"})

    assert "Привет" in composer.build_context([match])


def test_build_context_truncates_to_byte_cap(mock_openai_client):
    composer = make_composer(mock_openai_client, max_context_bytes=200)
    big = [
        SearchMatch(id=f"rec-{i}", score=0.5, metadata={"text": "x" * 500})
        for i in range(3)
    ]

    context = composer.build_context(big)

    assert context.endswith(TRUNCATION_NOTICE)
    body = context[: -len(TRUNCATION_NOTICE)]
    assert len(body.encode("utf-8")) <= 200


def test_build_context_truncation_drops_partial_characters(mock_openai_client):
    composer = make_composer(mock_openai_client, max_context_bytes=82)
    match = SearchMatch(id="r", score=1.0, metadata={"text": "é" * 100})

    context = composer.build_context([match])

    body = context[: -len(TRUNCATION_NOTICE)]
    assert len(body.encode("utf-8")) <= 82
    assert "�" not in body


@pytest.mark.asyncio
async def test_compose_sends_system_and_user_messages(mock_openai_client, matches):
    composer = make_composer(mock_openai_client)

    answer = await composer.compose("How much is the widget?", matches)

    assert answer == "The answer."
    mock_openai_client.chat.completions.create.assert_awaited_once()
    kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    system, user = kwargs["messages"]
    assert system == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert user["role"] == "user"
    assert user["content"] == composer.build_prompt("How much is the widget?", matches)


def test_zero_byte_cap_is_honoured(mock_openai_client, matches):
    composer = make_composer(mock_openai_client, max_context_bytes=0)

    assert composer.max_context_bytes == 0
    assert composer.build_context(matches) == TRUNCATION_NOTICE


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, ""])
async def test_compose_blank_content(mock_openai_client, matches, content):
    mock_openai_client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )
    composer = make_composer(mock_openai_client)

    with pytest.raises(CompletionError) as exc_info:
        await composer.compose("q", matches)
    assert exc_info.value.user_message == "Failed to generate an answer."


@pytest.mark.asyncio
async def test_compose_no_choices(mock_openai_client, matches):
    mock_openai_client.chat.completions.create.return_value = SimpleNamespace(choices=[])
    composer = make_composer(mock_openai_client)

    with pytest.raises(CompletionError) as exc_info:
        await composer.compose("q", matches)
    assert exc_info.value.user_message == "Failed to generate an answer."


@pytest.mark.asyncio
async def test_compose_provider_failure(mock_openai_client, matches):
    mock_openai_client.chat.completions.create.side_effect = OpenAIError("overloaded")
    composer = make_composer(mock_openai_client)

    with pytest.raises(CompletionError):
        await composer.compose("q", matches)
