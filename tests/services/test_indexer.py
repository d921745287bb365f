"""
tests/services/test_indexer.py

Unit tests for Indexer and IndexerConfig.

The vector database is the in-memory FakeVectorDBClient; embedders are
MagicMocks so no model or server is needed.
"""

import time
from unittest.mock import MagicMock

import pytest

from vecbridge.core.constants import ConsistencyLevel
from vecbridge.core.exceptions import (
    ConfigurationError,
    ConversionError,
    CountMismatchError,
    EmbeddingError,
    OperationTimeoutError,
    RemoteCallError,
)
from vecbridge.services.indexer import Indexer, IndexerConfig, StoreOptions
from vecbridge.vector_store.base import LoadState


# ── Helpers ────────────────────────────────────────────────────────────────────

DIM = 4


def _embedder(n_vectors=None):
    """Mock embedder returning one DIM-sized vector per text (or ``n_vectors``)."""
    embedder = MagicMock()

    def embed(texts):
        count = len(texts) if n_vectors is None else n_vectors
        return [[0.1] * DIM for _ in range(count)]

    embedder.embed_strings.side_effect = embed
    return embedder


def _slow_load(fake_client, monkeypatch, seconds: float) -> list:
    """Freeze the clock at 1000s and advance it by ``seconds`` during load_collection."""
    clock = [1000.0]
    monkeypatch.setattr(time, "monotonic", lambda: clock[0])
    load = fake_client.load_collection

    def slow_load(name, timeout=None):
        load(name, timeout=timeout)
        clock[0] += seconds

    fake_client.load_collection = slow_load
    return clock


def _indexer(fake_client, **overrides) -> Indexer:
    params = {"client": fake_client, "dim": DIM, "embedder": _embedder(), "load_poll_interval": 0}
    params.update(overrides)
    return Indexer(IndexerConfig(**params))


# ── Configuration ──────────────────────────────────────────────────────────────

class TestIndexerConfig:

    def test_missing_client(self) -> None:
        with pytest.raises(ConfigurationError, match="milvus client not provided"):
            IndexerConfig(dim=DIM).check()

    def test_non_positive_dim(self, fake_client) -> None:
        with pytest.raises(ConfigurationError, match="greater than 0"):
            IndexerConfig(client=fake_client, dim=0).check()

    def test_partition_with_partition_key_mode(self, fake_client) -> None:
        conf = IndexerConfig(client=fake_client, dim=DIM, partition="p1", partition_num=4)

        with pytest.raises(ConfigurationError, match="partition key mode"):
            conf.check()

    def test_defaults_are_applied(self, fake_client) -> None:
        conf = IndexerConfig(client=fake_client, dim=DIM, consistency_level=9, shard_num=-1, partition_num=1)
        conf.check()

        assert conf.collection == "vecbridge_collection"
        assert conf.description == "the collection for vecbridge"
        assert conf.metric_type == "COSINE"
        assert conf.consistency_level == ConsistencyLevel.BOUNDED
        assert conf.shard_num == 1
        assert conf.partition_num == 0
        assert [f.name for f in conf.fields] == ["id", "content", "vector", "metadata"]
        assert conf.document_converter is not None

    def test_explicit_values_are_kept(self, fake_client) -> None:
        conf = IndexerConfig(
            client=fake_client,
            dim=DIM,
            collection="docs",
            metric_type="L2",
            consistency_level=1,
            shard_num=3,
            partition_num=8,
        )
        conf.check()

        assert conf.collection == "docs"
        assert conf.metric_type == "L2"
        assert conf.consistency_level == ConsistencyLevel.STRONG
        assert conf.shard_num == 3
        assert conf.partition_num == 8


# ── Construction ───────────────────────────────────────────────────────────────

class TestIndexerInit:

    def test_construction_prepares_the_collection(self, fake_client) -> None:
        indexer = _indexer(fake_client, collection="docs")

        assert fake_client.calls[:2] == ["has_collection", "create_collection"]
        assert fake_client.calls[-1] == "load_collection"
        assert fake_client.created[0].name == "docs"
        assert indexer.config.collection == "docs"

    def test_construction_ensures_the_partition(self, fake_client) -> None:
        _indexer(fake_client, partition="p1")

        assert fake_client.calls[-3:] == ["has_partition", "create_partition", "load_partitions"]

    def test_construction_fails_on_readiness_error(self, fake_client) -> None:
        fake_client.failures["has_collection"] = RuntimeError("unavailable")

        with pytest.raises(RemoteCallError, match="has_collection failed"):
            _indexer(fake_client)

    def test_partition_check_gets_the_remaining_deadline(self, fake_client, monkeypatch) -> None:
        clock = _slow_load(fake_client, monkeypatch, seconds=20)

        _indexer(fake_client, partition="p1", readiness_timeout=30)

        calls = zip(fake_client.calls, fake_client.timeouts)
        partition_timeouts = [t for op, t in calls if "partition" in op]
        assert partition_timeouts == [10, 10, 10]
        assert clock[0] == 1020.0

    def test_partition_check_skipped_once_deadline_passed(self, fake_client, monkeypatch) -> None:
        _slow_load(fake_client, monkeypatch, seconds=40)

        with pytest.raises(OperationTimeoutError, match="deadline exceeded"):
            _indexer(fake_client, partition="p1", readiness_timeout=30)

        assert "has_partition" not in fake_client.calls

    def test_embedder_is_optional_at_construction(self, fake_client) -> None:
        indexer = _indexer(fake_client, embedder=None)

        assert indexer.config.embedder is None


# ── Store ──────────────────────────────────────────────────────────────────────

class TestIndexerStore:

    def test_insert_returns_ids(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client)

        ids = indexer.store(sample_docs)

        assert ids == ["doc1", "doc2"]
        operation, rows, partition = fake_client.written[0]
        assert operation == "insert"
        assert partition is None
        assert [row["id"] for row in rows] == ["doc1", "doc2"]

    def test_embeds_contents_in_one_batch(self, fake_client, sample_docs) -> None:
        embedder = _embedder()
        indexer = _indexer(fake_client, embedder=embedder)

        indexer.store(sample_docs)

        embedder.embed_strings.assert_called_once_with(
            ["This is a test document", "This is another test document"]
        )

    def test_upsert_option(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client)

        indexer.store(sample_docs, StoreOptions(upsert=True))

        assert fake_client.written[0][0] == "upsert"
        assert "insert" not in fake_client.calls

    def test_partition_option_overrides_config(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client, partition="p1")

        indexer.store(sample_docs, StoreOptions(partition="p2"))

        assert fake_client.written[0][2] == "p2"

    def test_configured_partition_is_the_default(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client, partition="p1")

        indexer.store(sample_docs)

        assert fake_client.written[0][2] == "p1"

    def test_per_call_embedder(self, fake_client, sample_docs) -> None:
        configured, per_call = _embedder(), _embedder()
        indexer = _indexer(fake_client, embedder=configured)

        indexer.store(sample_docs, StoreOptions(embedder=per_call))

        per_call.embed_strings.assert_called_once()
        configured.embed_strings.assert_not_called()

    def test_no_embedder(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client, embedder=None)

        with pytest.raises(ConfigurationError, match="embedding not provided"):
            indexer.store(sample_docs)

        assert fake_client.written == []

    def test_empty_docs(self, fake_client) -> None:
        embedder = _embedder()
        indexer = _indexer(fake_client, embedder=embedder)

        assert indexer.store([]) == []
        embedder.embed_strings.assert_not_called()
        assert fake_client.written == []

    def test_embed_failure(self, fake_client, sample_docs) -> None:
        embedder = MagicMock()
        embedder.embed_strings.side_effect = RuntimeError("ollama down")
        indexer = _indexer(fake_client, embedder=embedder)

        with pytest.raises(EmbeddingError, match="ollama down"):
            indexer.store(sample_docs)

        assert fake_client.written == []

    def test_vector_count_mismatch(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client, embedder=_embedder(n_vectors=1))

        with pytest.raises(CountMismatchError, match="expected 2"):
            indexer.store(sample_docs)

        assert "insert" not in fake_client.calls

    def test_converter_failure(self, fake_client, sample_docs) -> None:
        def broken(docs, dim, vectors):
            raise ValueError("bad row")

        indexer = _indexer(fake_client, document_converter=broken)

        with pytest.raises(ConversionError, match="failed to convert documents: bad row"):
            indexer.store(sample_docs)

        assert fake_client.written == []

    def test_insert_failure(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client)
        fake_client.failures["insert"] = RuntimeError("insert error")

        with pytest.raises(RemoteCallError, match="insert failed: insert error") as info:
            indexer.store(sample_docs)

        assert info.value.operation == "insert"

    def test_upsert_failure(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client)
        fake_client.failures["upsert"] = RuntimeError("upsert error")

        with pytest.raises(RemoteCallError, match="upsert failed: upsert error") as info:
            indexer.store(sample_docs, StoreOptions(upsert=True))

        assert info.value.operation == "upsert"
        assert info.value.phase == "Indexer.store"

    def test_store_does_not_rerun_readiness(self, fake_client, sample_docs) -> None:
        indexer = _indexer(fake_client)
        fake_client.load_states = [LoadState.NOT_EXIST]
        calls_before = fake_client.calls.count("has_collection")

        indexer.store(sample_docs)

        assert fake_client.calls.count("has_collection") == calls_before
