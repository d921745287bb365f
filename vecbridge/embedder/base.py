"""
vecbridge/embedder/base.py

Abstract interface for the embedding layer.

The indexer depends only on this interface, never on a concrete backend,
so any model server (or a test double) can be plugged in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class Embedder(ABC):
    """Contract every embedding backend must fulfil."""

    @abstractmethod
    def embed_strings(self, texts: List[str]) -> List[List[float]]:
        """
        Encode a batch of texts into embedding vectors.

        Args:
            texts: Strings to embed. May be empty; implementations must
                   handle that case by returning an empty list.

        Returns:
            A list of float vectors, one per input text, in the same order.

        Raises:
            EmbeddingError: If the backend fails to produce embeddings.
        """

    def close(self) -> None:
        """Release any connection the backend holds. No-op by default."""
