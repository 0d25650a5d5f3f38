"""Qdrant vector database client implementation."""

import asyncio
import uuid
from typing import Any, Dict, List, Optional

from loguru import logger
from qdrant_client import QdrantClient as QdrantBaseClient
from qdrant_client.http import models as qdrant_models

from aibot.errors import VectorStoreError
from aibot.services.vector_db.types import SearchMatch, VectorRecord
from aibot.settings import settings


def _vector_values(vector: Any) -> List[float]:
    """Normalize the vector field of a scored point into a flat list."""
    if vector is None:
        return []
    if isinstance(vector, dict):
        # Named vectors: take the unnamed/default one if present
        vector = vector.get("", next(iter(vector.values()), []))
    return [float(v) for v in vector]


class VectorStoreClient:
    """
    Client for the document collection in Qdrant.

    One instance holds one long-lived connection handle and is shared by
    every chat event.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        collection_name: Optional[str] = None,
        timeout: Optional[int] = None,
        top_k: Optional[int] = None,
        client: Optional[QdrantBaseClient] = None,
    ):
        """
        Initialize Qdrant client.

        :param url: Qdrant cluster URL
        :param api_key: API key for authentication
        :param collection_name: Collection that stores document vectors
        :param timeout: Request timeout in seconds
        :param top_k: Number of matches returned by search
        :param client: Pre-built SDK client, mainly for tests
        """
        self.url = url or settings.qdrant_url
        self.collection_name = collection_name or settings.qdrant_collection_name
        self.top_k = top_k or settings.search_top_k
        self.client = client or QdrantBaseClient(
            url=self.url,
            api_key=api_key or settings.qdrant_api_key,
            timeout=timeout or settings.qdrant_timeout,
            check_compatibility=False,
        )
        logger.info(
            f"Initialized Qdrant client: {self.url}, collection: {self.collection_name}"
        )

    async def _run(self, func):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    async def collection_exists(self) -> bool:
        """
        Check if the document collection exists.

        :returns: True if the collection exists
        :raises VectorStoreError: if Qdrant cannot be queried
        """
        try:
            return await self._run(
                lambda: self.client.collection_exists(self.collection_name)
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to check collection {self.collection_name}: {e}"
            ) from e

    async def ensure_collection_exists(
        self,
        vector_size: int,
        distance: qdrant_models.Distance = qdrant_models.Distance.COSINE,
    ) -> bool:
        """
        Ensure the document collection exists, creating it if necessary.

        :param vector_size: Dimension of vectors to store
        :param distance: Distance function to use
        :returns: True if the collection was created, False if it already existed
        :raises VectorStoreError: if the collection cannot be created
        """
        if await self.collection_exists():
            logger.info(f"Collection {self.collection_name} already exists")
            return False

        logger.info(f"Creating collection {self.collection_name}")
        try:
            await self._run(
                lambda: self.client.create_collection(
                    collection_name=self.collection_name,
                    vectors_config=qdrant_models.VectorParams(
                        size=vector_size,
                        distance=distance,
                    ),
                )
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to create collection {self.collection_name}: {e}"
            ) from e

        logger.info(
            f"Created collection: {self.collection_name}, vector_size: {vector_size}"
        )
        return True

    async def upsert(self, vector: List[float], metadata: Dict[str, Any]) -> str:
        """
        Store one vector with its metadata.

        :param vector: Embedding vector
        :param metadata: JSON-compatible metadata stored as the point payload
        :returns: Identifier of the new record
        :raises VectorStoreError: if the write fails
        """
        record = VectorRecord(id=str(uuid.uuid4()), vector=vector, metadata=metadata)
        point = qdrant_models.PointStruct(
            id=record.id,
            vector=record.vector,
            payload={**record.metadata, "created_at": record.created_at.isoformat()},
        )

        logger.debug(
            f"[VECTOR_DB] Upserting record {record.id} to {self.collection_name}"
        )
        try:
            await self._run(
                lambda: self.client.upsert(
                    collection_name=self.collection_name,
                    points=[point],
                    wait=True,
                )
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to upsert vector to {self.collection_name}: {e}"
            ) from e

        logger.info(f"Upserted record {record.id} to {self.collection_name}")
        return record.id

    async def search(self, vector: List[float]) -> List[SearchMatch]:
        """
        Search for the nearest records.

        :param vector: Query vector
        :returns: Matches sorted by similarity, possibly empty
        :raises VectorStoreError: if the query fails
        """
        logger.debug(
            f"[VECTOR_DB] Starting vector search: collection={self.collection_name}, limit={self.top_k}"
        )
        try:
            response = await self._run(
                lambda: self.client.query_points(
                    collection_name=self.collection_name,
                    query=vector,
                    limit=self.top_k,
                    with_payload=True,
                    with_vectors=True,
                )
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to search vectors in {self.collection_name}: {e}"
            ) from e

        matches = [
            SearchMatch(
                id=str(point.id),
                score=point.score,
                vector=_vector_values(point.vector),
                metadata=point.payload or {},
            )
            for point in response.points
        ]
        logger.debug(f"[VECTOR_DB] Search completed, found {len(matches)} results")
        return matches

