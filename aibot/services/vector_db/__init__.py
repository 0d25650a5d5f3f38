"""Vector database services module."""

from aibot.services.vector_db.types import SearchMatch, VectorRecord

from aibot.services.vector_db.qdrant_client import VectorStoreClient

__all__ = ["VectorStoreClient", "SearchMatch", "VectorRecord"]
