"""Answer generation from a user query and retrieved records."""

import json
from typing import List, Optional

from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from aibot.errors import CompletionError
from aibot.services.vector_db.types import SearchMatch
from aibot.settings import settings

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that answers questions using documents "
    "the user has indexed. Base your answer on the provided context. "
    "If the context does not contain the answer, say so briefly."
)

TRUNCATION_NOTICE = "\n[Context truncated]"


class AnswerComposer:
    """Builds a prompt from retrieved matches and asks the completion API for an answer."""

    def __init__(
        self,
        openai_client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        max_context_bytes: Optional[int] = None,
        include_vector_values: Optional[bool] = None,
    ):
        """
        Initialize the answer composer.

        :param openai_client: OpenAI client instance
        :param model: Completion model identifier
        :param max_context_bytes: Cap on the serialized match context, in UTF-8 bytes
        :param include_vector_values: Whether raw vector values go into the prompt
        """
        self.openai_client = openai_client or AsyncOpenAI(api_key=settings.openai_api_key)
        self.model = model or settings.openai_completion_model
        self.max_context_bytes = (
            settings.prompt_context_max_bytes
            if max_context_bytes is None
            else max_context_bytes
        )
        self.include_vector_values = (
            settings.prompt_include_vector_values
            if include_vector_values is None
            else include_vector_values
        )

    def _format_match(self, index: int, match: SearchMatch) -> str:
        lines = [
            f"Match {index} (id: {match.id}, score: {match.score:.4f})",
            f"Metadata: {json.dumps(match.metadata, ensure_ascii=False, default=str)}",
        ]
        if self.include_vector_values:
            lines.append(f"Values: {match.vector}")
        return "\n".join(lines) + "\n"

    def build_context(self, matches: List[SearchMatch]) -> str:
        """
        Serialize matches into the prompt context.

        :param matches: ranked search matches
        :return: context text, truncated to the byte cap
        """
        context = "\n".join(
            self._format_match(i, match) for i, match in enumerate(matches, start=1)
        )
        encoded = context.encode("utf-8")
        if len(encoded) <= self.max_context_bytes:
            return context

        logger.warning(
            f"Prompt context of {len(encoded)} bytes exceeds cap of {self.max_context_bytes}, truncating"
        )
        # Cutting inside a multi-byte character drops the partial character
        truncated = encoded[: self.max_context_bytes].decode("utf-8", errors="ignore")
        return truncated + TRUNCATION_NOTICE

    def build_prompt(self, query: str, matches: List[SearchMatch]) -> str:
        """
        Build the user message for the completion request.

        :param query: the user's question
        :param matches: ranked search matches
        :return: prompt text
        """
        return f"Question: {query}\n\nContext:\n{self.build_context(matches)}"

    async def compose(self, query: str, matches: List[SearchMatch]) -> str:
        """
        Generate an answer.

        :param query: the user's question
        :param matches: ranked search matches
        :return: text of the first completion choice
        :raises CompletionError: if the call fails or returns no answer text
        """
        prompt = self.build_prompt(query, matches)
        logger.debug(
            f"Requesting completion with model {self.model}, {len(matches)} matches in context"
        )
        try:
            response = await self.openai_client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": prompt},
                ],
            )
        except OpenAIError as e:
            raise CompletionError(f"Completion request failed: {e}") from e

        if not response.choices:
            raise CompletionError("Completion provider returned no choices")

        content = response.choices[0].message.content
        if not content:
            raise CompletionError("Completion provider returned empty content")
        return content
