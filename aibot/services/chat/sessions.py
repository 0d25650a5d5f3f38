"""Per-user chat sessions kept for the lifetime of the process."""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatSession(BaseModel):
    """State tracked for one chat user."""

    user_id: int
    # Never transitioned: no upload-confirmation flow exists
    awaiting_document: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    last_seen_at: datetime = Field(default_factory=_utcnow)


class SessionStore:
    """Concurrency-safe map of user id to session."""

    def __init__(self) -> None:
        self._sessions: Dict[int, ChatSession] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: int) -> Optional[ChatSession]:
        """Return the session for a user, if one exists."""
        async with self._lock:
            return self._sessions.get(user_id)

    async def get_or_create(self, user_id: int) -> ChatSession:
        """
        Return the user's session, creating it on first interaction.

        Also refreshes ``last_seen_at``.

        :param user_id: chat user id
        :return: the session
        """
        async with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = ChatSession(user_id=user_id)
                self._sessions[user_id] = session
            else:
                session.last_seen_at = _utcnow()
            return session

    def __len__(self) -> int:
        return len(self._sessions)
