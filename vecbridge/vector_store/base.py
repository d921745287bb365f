"""
vecbridge/vector_store/base.py

Abstract interface for the vector-database client.

Design goals:
  - The readiness check and the indexer depend only on this interface,
    never on pymilvus directly.
  - Document and LoadState are the shared vocabulary across all layers.
  - Every method is a single blocking remote call; ``timeout`` is the
    number of seconds the call may take (None = SDK default).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from vecbridge.vector_store.schema import CollectionDescriptor, FieldSpec


# ── Shared data-transfer objects ──────────────────────────────────────────────

@dataclass
class Document:
    """
    A piece of text to embed and store.

    Attributes:
        id       : Caller-assigned identifier, stored as the primary key.
        content  : Text that is embedded and stored.
        metadata : Arbitrary JSON-serialisable attributes.
    """

    id: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class LoadState(Enum):
    """Whether a collection is resident in the database's serving memory."""

    NOT_EXIST = "NotExist"
    NOT_LOADED = "NotLoad"
    LOADING = "Loading"
    LOADED = "Loaded"


# ── Abstract base ──────────────────────────────────────────────────────────────

class VectorDBClient(ABC):
    """
    Capability set the indexer needs from a vector database.

    Concrete implementations (e.g. MilvusVectorDBClient) wrap a specific SDK
    and translate its API to this interface. SDK exceptions propagate
    unchanged; callers wrap them with the phase that issued the call.
    """

    # ── Collections ────────────────────────────────────────────────────────────

    @abstractmethod
    def has_collection(self, name: str, timeout: Optional[float] = None) -> bool:
        """Return True when the collection exists."""

    @abstractmethod
    def describe_collection(self, name: str, timeout: Optional[float] = None) -> List[FieldSpec]:
        """Return the collection's fields in schema order."""

    @abstractmethod
    def create_collection(
        self, descriptor: CollectionDescriptor, timeout: Optional[float] = None
    ) -> None:
        """Create a collection from the descriptor (no index, not loaded)."""

    # ── Indexes ────────────────────────────────────────────────────────────────

    @abstractmethod
    def list_indexes(self, name: str, timeout: Optional[float] = None) -> List[str]:
        """Return the names of the indexes defined on the collection."""

    @abstractmethod
    def create_index(
        self,
        name: str,
        field_name: str,
        index_type: str,
        metric_type: str,
        timeout: Optional[float] = None,
    ) -> None:
        """Create an index on ``field_name``."""

    # ── Loading ────────────────────────────────────────────────────────────────

    @abstractmethod
    def load_collection(self, name: str, timeout: Optional[float] = None) -> None:
        """Load the collection and return once the server acknowledges it."""

    @abstractmethod
    def get_load_state(self, name: str, timeout: Optional[float] = None) -> LoadState:
        """Return the collection's current load state."""

    @abstractmethod
    def get_loading_progress(self, name: str, timeout: Optional[float] = None) -> int:
        """
        Return the loading progress as a percentage (0-100).

        Raises:
            RaceError: The collection was dropped or released while loading.
        """

    # ── Partitions ─────────────────────────────────────────────────────────────

    @abstractmethod
    def has_partition(self, name: str, partition: str, timeout: Optional[float] = None) -> bool:
        """Return True when the partition exists in the collection."""

    @abstractmethod
    def create_partition(self, name: str, partition: str, timeout: Optional[float] = None) -> None:
        """Create a partition in the collection."""

    @abstractmethod
    def load_partitions(
        self, name: str, partitions: List[str], timeout: Optional[float] = None
    ) -> None:
        """Load the given partitions of the collection."""

    # ── Writes ─────────────────────────────────────────────────────────────────

    @abstractmethod
    def insert(
        self,
        name: str,
        rows: List[Dict[str, Any]],
        partition: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Append rows; return the number of rows written."""

    @abstractmethod
    def upsert(
        self,
        name: str,
        rows: List[Dict[str, Any]],
        partition: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Insert-or-replace rows by primary key; return the number of rows written."""
