"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

Fixtures defined here are auto-discovered by pytest, no import needed.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from vecbridge.main import app
from vecbridge.vector_store.base import Document, LoadState, VectorDBClient
from vecbridge.vector_store.schema import CollectionDescriptor, FieldSpec


# ── In-memory vector database ──────────────────────────────────────────────────

class FakeVectorDBClient(VectorDBClient):
    """
    Scriptable stand-in for a vector database.

    Every call is appended to ``calls`` by operation name. Set ``failures[op]``
    to make that operation raise. ``load_states`` / ``progress`` are consumed
    one value per call; the last value repeats.
    """

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.timeouts: List[Optional[float]] = []
        self.failures: Dict[str, Exception] = {}

        self.exists = False
        self.remote_fields: List[FieldSpec] = []
        self.load_states: List[LoadState] = [LoadState.NOT_LOADED]
        self.progress: List[int] = [100]
        self.indexes: List[str] = []
        self.partitions: set = set()

        self.created: List[CollectionDescriptor] = []
        self.index_args: Optional[tuple] = None
        self.written: List[tuple] = []

    def _record(self, operation: str, timeout: Optional[float]) -> None:
        self.calls.append(operation)
        self.timeouts.append(timeout)
        if operation in self.failures:
            raise self.failures[operation]

    @staticmethod
    def _next(values: list) -> Any:
        return values.pop(0) if len(values) > 1 else values[0]

    def has_collection(self, name, timeout=None):
        self._record("has_collection", timeout)
        return self.exists

    def describe_collection(self, name, timeout=None):
        self._record("describe_collection", timeout)
        return list(self.remote_fields)

    def create_collection(self, descriptor, timeout=None):
        self._record("create_collection", timeout)
        self.created.append(descriptor)
        self.exists = True

    def list_indexes(self, name, timeout=None):
        self._record("list_indexes", timeout)
        return list(self.indexes)

    def create_index(self, name, field_name, index_type, metric_type, timeout=None):
        self._record("create_index", timeout)
        self.index_args = (field_name, index_type, metric_type)
        self.indexes.append(field_name)

    def load_collection(self, name, timeout=None):
        self._record("load_collection", timeout)

    def get_load_state(self, name, timeout=None):
        self._record("get_load_state", timeout)
        return self._next(self.load_states)

    def get_loading_progress(self, name, timeout=None):
        self._record("get_loading_progress", timeout)
        return self._next(self.progress)

    def has_partition(self, name, partition, timeout=None):
        self._record("has_partition", timeout)
        return partition in self.partitions

    def create_partition(self, name, partition, timeout=None):
        self._record("create_partition", timeout)
        self.partitions.add(partition)

    def load_partitions(self, name, partitions, timeout=None):
        self._record("load_partitions", timeout)

    def insert(self, name, rows, partition=None, timeout=None):
        self._record("insert", timeout)
        self.written.append(("insert", rows, partition))
        return len(rows)

    def upsert(self, name, rows, partition=None, timeout=None):
        self._record("upsert", timeout)
        self.written.append(("upsert", rows, partition))
        return len(rows)


@pytest.fixture
def fake_client() -> FakeVectorDBClient:
    """A fresh in-memory vector database; the collection does not exist yet."""
    return FakeVectorDBClient()


# ── Sample data ────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_docs() -> List[Document]:
    return [
        Document(id="doc1", content="This is a test document", metadata={"key": "value"}),
        Document(id="doc2", content="This is another test document", metadata={"key2": "value2"}),
    ]


# ── Core client fixture ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    A synchronous TestClient wrapping the FastAPI app.

    session-scoped so the app is instantiated once per test run. Tests that
    hit the embedder or indexer install ``app.dependency_overrides``.
    """
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def overrides():
    """Dependency-override dict of the app, cleared after each test."""
    yield app.dependency_overrides
    app.dependency_overrides.clear()
