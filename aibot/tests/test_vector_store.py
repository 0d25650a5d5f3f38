"""Tests for the Qdrant-backed vector store client."""

import uuid
from types import SimpleNamespace

import pytest

from aibot.errors import VectorStoreError
from aibot.services.vector_db.qdrant_client import VectorStoreClient

from .conftest import make_scored_point


@pytest.mark.asyncio
async def test_upsert_stores_point_with_metadata(vector_store, qdrant):
    record_id = await vector_store.upsert(
        [0.1, 0.2, 0.3], {"source": "data.json", "text": "hello"}
    )

    assert str(uuid.UUID(record_id)) == record_id
    qdrant.upsert.assert_called_once()
    kwargs = qdrant.upsert.call_args.kwargs
    assert kwargs["collection_name"] == "test-documents"
    assert kwargs["wait"] is True
    (point,) = kwargs["points"]
    assert str(point.id) == record_id
    assert point.vector == [0.1, 0.2, 0.3]
    assert point.payload["source"] == "data.json"
    assert point.payload["text"] == "hello"
    assert "created_at" in point.payload


@pytest.mark.asyncio
async def test_upsert_generates_distinct_ids(vector_store):
    first = await vector_store.upsert([0.1], {"text": "a"})
    second = await vector_store.upsert([0.1], {"text": "a"})

    assert first != second


@pytest.mark.asyncio
async def test_upsert_failure(vector_store, qdrant):
    qdrant.upsert.side_effect = RuntimeError("connection refused")

    with pytest.raises(VectorStoreError) as exc_info:
        await vector_store.upsert([0.1], {"text": "a"})
    assert exc_info.value.user_message == "Failed to access the vector database."


@pytest.mark.asyncio
async def test_search_maps_scored_points(vector_store, qdrant):
    qdrant.query_points.return_value = SimpleNamespace(
        points=[
            make_scored_point("a", 0.9, {"text": "first"}, vector=[1.0, 0.0]),
            make_scored_point("b", 0.5, None, vector={"": [0.0, 1.0]}),
        ]
    )

    matches = await vector_store.search([0.3, 0.4])

    assert [m.id for m in matches] == ["a", "b"]
    assert matches[0].score == 0.9
    assert matches[0].metadata == {"text": "first"}
    assert matches[0].vector == [1.0, 0.0]
    assert matches[1].metadata == {}
    assert matches[1].vector == [0.0, 1.0]

    kwargs = qdrant.query_points.call_args.kwargs
    assert kwargs["collection_name"] == "test-documents"
    assert kwargs["query"] == [0.3, 0.4]
    assert kwargs["limit"] == 5
    assert kwargs["with_payload"] is True
    assert kwargs["with_vectors"] is True


@pytest.mark.asyncio
async def test_search_without_vectors(vector_store, qdrant):
    point = make_scored_point("a", 0.9, {"text": "first"})
    point.vector = None
    qdrant.query_points.return_value = SimpleNamespace(points=[point])

    matches = await vector_store.search([0.1])

    assert matches[0].vector == []


@pytest.mark.asyncio
async def test_search_empty(vector_store, qdrant):
    qdrant.query_points.return_value = SimpleNamespace(points=[])

    assert await vector_store.search([0.1]) == []


@pytest.mark.asyncio
async def test_search_failure(vector_store, qdrant):
    qdrant.query_points.side_effect = RuntimeError("timeout")

    with pytest.raises(VectorStoreError):
        await vector_store.search([0.1])


@pytest.mark.asyncio
async def test_ensure_collection_exists_keeps_existing(vector_store, qdrant):
    qdrant.collection_exists.return_value = True

    created = await vector_store.ensure_collection_exists(1536)

    assert created is False
    qdrant.create_collection.assert_not_called()


@pytest.mark.asyncio
async def test_ensure_collection_exists_creates_missing(vector_store, qdrant):
    qdrant.collection_exists.return_value = False

    created = await vector_store.ensure_collection_exists(1536)

    assert created is True
    kwargs = qdrant.create_collection.call_args.kwargs
    assert kwargs["collection_name"] == "test-documents"
    assert kwargs["vectors_config"].size == 1536


@pytest.mark.asyncio
async def test_collection_check_failure(qdrant):
    qdrant.collection_exists.side_effect = RuntimeError("unauthorized")
    store = VectorStoreClient(
        url="http://localhost:6333", collection_name="docs", client=qdrant
    )

    with pytest.raises(VectorStoreError):
        await store.ensure_collection_exists(8)
