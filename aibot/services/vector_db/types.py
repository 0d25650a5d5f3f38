"""Shared types for vector database module."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class VectorRecord(BaseModel):
    """Vector record with metadata."""

    id: str
    vector: List[float]
    metadata: Dict[str, Any]
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SearchMatch(BaseModel):
    """Record returned by a similarity query, ranked by score."""

    id: str
    score: float
    vector: List[float] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
