"""Chat message routing and per-user sessions."""

from aibot.services.chat.router import MessageKind, MessageRouter, classify_message
from aibot.services.chat.sessions import ChatSession, SessionStore

__all__ = [
    "MessageKind",
    "MessageRouter",
    "classify_message",
    "ChatSession",
    "SessionStore",
]
