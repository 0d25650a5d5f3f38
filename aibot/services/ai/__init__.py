"""
AI Services Module for aibot

Embedding generation and answer composition on top of the OpenAI API.
"""

from .composer import AnswerComposer
from .embedding import EmbeddingClient

__all__ = ["AnswerComposer", "EmbeddingClient"]
