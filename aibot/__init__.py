"""AI bot: chat assistant backed by embeddings, a vector database and an LLM."""

__version__ = "0.1.0"
