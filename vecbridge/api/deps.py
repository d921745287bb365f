"""
vecbridge/api/deps.py

Shared FastAPI dependencies.

The embedder and indexer are built lazily on the first request that needs
them and then reused. Tests replace them via ``app.dependency_overrides``.
"""

from functools import lru_cache

from vecbridge.core.config import settings
from vecbridge.embedder.base import Embedder
from vecbridge.embedder.ollama_embedder import OllamaEmbedder
from vecbridge.services.indexer import Indexer, IndexerConfig
from vecbridge.vector_store.milvus_client import MilvusVectorDBClient


@lru_cache(maxsize=1)
def get_embedder() -> Embedder:
    """Provide the process-wide Ollama embedder."""
    return OllamaEmbedder()


@lru_cache(maxsize=1)
def get_indexer() -> Indexer:
    """Provide the process-wide indexer (connects and runs the readiness check)."""
    return Indexer(
        IndexerConfig(
            client=MilvusVectorDBClient(),
            dim=settings.milvus_dim,
            collection=settings.milvus_collection,
            partition=settings.milvus_partition,
            embedder=get_embedder(),
        )
    )
