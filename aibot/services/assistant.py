"""Index and answer pipelines shared by the chat router and the CLI."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from aibot.services.ai.composer import AnswerComposer
from aibot.services.ai.embedding import EmbeddingClient
from aibot.services.documents.classifier import FileFormat, classify_file, classify_url
from aibot.services.documents.decoder import decode_document
from aibot.services.documents.fetcher import fetch_url
from aibot.services.vector_db.qdrant_client import VectorStoreClient
from aibot.services.vector_db.types import SearchMatch


class IndexStatus(str, Enum):
    """Outcome of an indexing request."""

    INDEXED = "indexed"
    NO_TEXT = "no_text"
    UNSUPPORTED = "unsupported"


class AnswerStatus(str, Enum):
    """Outcome of a query."""

    ANSWERED = "answered"
    EMPTY_QUERY = "empty_query"
    NO_MATCHES = "no_matches"


class IndexResult(BaseModel):
    """Result of indexing one document."""

    status: IndexStatus
    source: str
    file_format: FileFormat
    record_id: Optional[str] = None
    text: str = ""


class AnswerResult(BaseModel):
    """Result of answering one query."""

    status: AnswerStatus
    answer: Optional[str] = None
    matches: List[SearchMatch] = Field(default_factory=list)


class Assistant:
    """Runs the embed/store and embed/search/compose pipelines."""

    def __init__(
        self,
        embedder: EmbeddingClient,
        vector_store: VectorStoreClient,
        composer: AnswerComposer,
    ):
        self.embedder = embedder
        self.vector_store = vector_store
        self.composer = composer

    async def answer(self, query: str) -> AnswerResult:
        """
        Answer a natural-language query from indexed documents.

        :param query: user question
        :return: answer result; soft failures are reported through its status
        """
        if not query.strip():
            return AnswerResult(status=AnswerStatus.EMPTY_QUERY)

        vector = await self.embedder.embed(query)
        matches = await self.vector_store.search(vector)
        if not matches:
            logger.info("No relevant matches found for query")
            return AnswerResult(status=AnswerStatus.NO_MATCHES)

        answer = await self.composer.compose(query, matches)
        logger.info(f"Composed answer from {len(matches)} matches")
        return AnswerResult(status=AnswerStatus.ANSWERED, answer=answer, matches=matches)

    async def index_payload(
        self, source: str, file_format: FileFormat, payload: bytes
    ) -> IndexResult:
        """
        Extract, embed and store the text of a document.

        :param source: filename or URL stored with the record
        :param file_format: classified document format
        :param payload: raw document bytes
        :return: index result
        """
        if file_format == FileFormat.UNKNOWN:
            return IndexResult(
                status=IndexStatus.UNSUPPORTED, source=source, file_format=file_format
            )

        text = decode_document(file_format, payload)
        if text is None:
            logger.info(f"No text to vectorize in {source}")
            return IndexResult(
                status=IndexStatus.NO_TEXT, source=source, file_format=file_format
            )

        vector = await self.embedder.embed(text)
        record_id = await self.vector_store.upsert(
            vector,
            {"source": source, "format": file_format.value, "text": text},
        )
        logger.info(f"Indexed {source} as record {record_id} ({len(text)} chars)")
        return IndexResult(
            status=IndexStatus.INDEXED,
            source=source,
            file_format=file_format,
            record_id=record_id,
            text=text,
        )

    async def index_document(self, filename: str, payload: bytes) -> IndexResult:
        """
        Index a document identified by its filename.

        :param filename: filename used for classification and as record source
        :param payload: raw document bytes
        :return: index result
        """
        return await self.index_payload(filename, classify_file(filename), payload)

    async def index_url(self, url: str) -> IndexResult:
        """
        Download and index a document referenced by URL.

        Unsupported URLs are rejected before any download.

        :param url: absolute http(s) URL
        :return: index result
        """
        file_format = classify_url(url)
        if file_format == FileFormat.UNKNOWN:
            return IndexResult(
                status=IndexStatus.UNSUPPORTED, source=url, file_format=file_format
            )
        payload = await fetch_url(url)
        return await self.index_payload(url, file_format, payload)

    async def index_path(self, path: Path) -> IndexResult:
        """
        Index a local file.

        :param path: file path
        :return: index result
        """
        file_format = classify_file(path.name)
        if file_format == FileFormat.UNKNOWN:
            return IndexResult(
                status=IndexStatus.UNSUPPORTED, source=path.name, file_format=file_format
            )
        return await self.index_payload(path.name, file_format, path.read_bytes())
