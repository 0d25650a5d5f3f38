"""OpenAI embedding client."""

from typing import List, Optional

from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from aibot.errors import EmbeddingError
from aibot.settings import settings


class EmbeddingClient:
    """Turns text into a fixed-length vector through the OpenAI embeddings API."""

    def __init__(
        self,
        openai_client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
    ):
        """
        Initialize the embedding client.

        :param openai_client: OpenAI client instance
        :param model: Embedding model identifier
        """
        self.openai_client = openai_client or AsyncOpenAI(api_key=settings.openai_api_key)
        self.model = model or settings.openai_embedding_model

    async def embed(self, text: str) -> List[float]:
        """
        Generate vector embedding for text.

        The input is forwarded as-is; provider-side rejections surface as errors.

        :param text: Text to generate embedding for
        :return: Vector embedding as list of floats
        :raises EmbeddingError: if the call fails or returns no entries
        """
        logger.debug(f"Generating embedding using model: {self.model}")
        try:
            response = await self.openai_client.embeddings.create(
                model=self.model,
                input=[text],
            )
        except OpenAIError as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if not response.data:
            raise EmbeddingError("Embedding provider returned no results")

        vector = list(response.data[0].embedding)
        logger.debug(f"Generated embedding with {len(vector)} dimensions")
        return vector
