"""vecbridge/embedder/__init__.py: public API of the embedder package."""

from vecbridge.embedder.base import Embedder
from vecbridge.embedder.ollama_embedder import OllamaEmbedder

__all__ = [
    "Embedder",
    "OllamaEmbedder",
]
