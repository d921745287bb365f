"""
vecbridge/services/indexer.py

Stores documents in a Milvus collection:

    docs
      └─ Embedder.embed_strings()        → [[float]]   (one batch call)
           └─ DocumentConverter()        → [row]
                └─ VectorDBClient.insert() / .upsert()

Construction validates the configuration, fills in defaults once and runs
the collection readiness check, so a constructed Indexer always points at
an existing, indexed, loaded collection.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from vecbridge.core.config import settings
from vecbridge.core.constants import (
    DEFAULT_COLLECTION,
    DEFAULT_CONSISTENCY_LEVEL,
    DEFAULT_DESCRIPTION,
    DEFAULT_METRIC_TYPE,
    DEFAULT_SHARD_NUM,
    ConsistencyLevel,
)
from vecbridge.core.exceptions import (
    ConfigurationError,
    ConversionError,
    CountMismatchError,
    EmbeddingError,
    OperationTimeoutError,
    RemoteCallError,
)
from vecbridge.core.logger import get_logger
from vecbridge.embedder.base import Embedder
from vecbridge.vector_store.base import Document, VectorDBClient
from vecbridge.vector_store.converter import DocumentConverter, default_document_converter
from vecbridge.vector_store.readiness import ensure_collection, ensure_partition
from vecbridge.vector_store.schema import CollectionDescriptor, FieldSpec, default_fields

logger = get_logger(__name__)


@dataclass
class IndexerConfig:
    """
    Configuration for an Indexer.

    Required: ``client`` and ``dim``. Everything else is optional and is
    filled in by ``check()``.

    Attributes:
        client                 : Vector database client.
        dim                    : Dimension of the stored vectors (> 0).
        collection             : Collection name. Default DEFAULT_COLLECTION.
        partition              : Partition written to by default ("" = none).
        fields                 : Collection schema. Default ``default_fields(dim)``.
        description            : Collection description.
        metric_type            : Metric of the default index. Default COSINE.
        consistency_level      : 1-5; anything else becomes BOUNDED.
        shard_num              : Shards for a new collection; <= 0 becomes 1.
        partition_num          : Partition-key mode partitions; <= 1 disables it.
        enable_dynamic_schema  : Allow fields outside the schema.
        document_converter     : Rows builder. Default ``default_document_converter``.
        embedder               : Default embedder; can be overridden per store call.
        load_poll_interval     : Seconds between loading-progress checks.
        load_poll_max_attempts : Cap on loading-progress checks (None = no cap).
        readiness_timeout      : Deadline in seconds for the readiness check.
    """

    client: Optional[VectorDBClient] = None
    dim: int = 0
    collection: str = ""
    partition: str = ""
    fields: List[FieldSpec] = field(default_factory=list)
    description: str = ""
    metric_type: str = ""
    consistency_level: int = 0
    shard_num: int = 0
    partition_num: int = 0
    enable_dynamic_schema: bool = False
    document_converter: Optional[DocumentConverter] = None
    embedder: Optional[Embedder] = None
    load_poll_interval: Optional[float] = None
    load_poll_max_attempts: Optional[int] = None
    readiness_timeout: Optional[float] = None

    def check(self) -> None:
        """
        Validate required settings and apply defaults in place.

        Raises:
            ConfigurationError: Missing client, non-positive dimension, or a
                                partition name combined with partition-key mode.
        """
        if self.client is None:
            raise ConfigurationError("[Indexer.check] milvus client not provided")
        if self.dim <= 0:
            raise ConfigurationError(
                "[Indexer.check] the dimension of the vector must be greater than 0"
            )
        if self.partition_num <= 1:
            self.partition_num = 0
        elif self.partition:
            raise ConfigurationError(
                "[Indexer.check] not support manually specifying the partition names "
                "if partition key mode is used"
            )

        if not self.collection:
            self.collection = DEFAULT_COLLECTION
        if not self.description:
            self.description = DEFAULT_DESCRIPTION
        if not self.fields:
            self.fields = default_fields(self.dim)
        if not self.metric_type:
            self.metric_type = DEFAULT_METRIC_TYPE.value
        if self.consistency_level not in {level.value for level in ConsistencyLevel}:
            self.consistency_level = DEFAULT_CONSISTENCY_LEVEL
        self.consistency_level = ConsistencyLevel(self.consistency_level)
        if self.shard_num <= 0:
            self.shard_num = DEFAULT_SHARD_NUM
        if self.document_converter is None:
            self.document_converter = default_document_converter
        if self.load_poll_interval is None:
            self.load_poll_interval = settings.load_poll_interval
        if self.load_poll_max_attempts is None:
            self.load_poll_max_attempts = settings.load_poll_max_attempts
        if self.readiness_timeout is None:
            self.readiness_timeout = settings.readiness_timeout

    def descriptor(self) -> CollectionDescriptor:
        """The collection this configuration describes."""
        return CollectionDescriptor(
            name=self.collection,
            dim=self.dim,
            fields=list(self.fields),
            description=self.description,
            metric_type=self.metric_type,
            consistency_level=ConsistencyLevel(self.consistency_level),
            shard_num=self.shard_num,
            partition_num=self.partition_num,
            enable_dynamic_schema=self.enable_dynamic_schema,
        )


@dataclass
class StoreOptions:
    """
    Per-call options for ``Indexer.store``.

    Attributes:
        upsert    : Replace rows with the same id instead of appending.
        partition : Target partition; defaults to the configured one.
        embedder  : Embedder for this call; defaults to the configured one.
    """

    upsert: bool = False
    partition: Optional[str] = None
    embedder: Optional[Embedder] = None


class Indexer:
    """
    Embeds documents and writes them to a Milvus collection.

    The Indexer keeps no state between ``store`` calls beyond its checked
    configuration, so one instance can be shared across threads.
    """

    def __init__(self, config: IndexerConfig) -> None:
        config.check()
        self._conf = config

        logger.info(
            "Initialising Indexer: collection=%s  dim=%d  metric=%s",
            config.collection,
            config.dim,
            config.metric_type,
        )
        # one deadline covers both the collection and the partition check
        deadline = (
            time.monotonic() + config.readiness_timeout
            if config.readiness_timeout is not None
            else None
        )
        ensure_collection(
            config.client,
            config.descriptor(),
            poll_interval=config.load_poll_interval,
            max_poll_attempts=config.load_poll_max_attempts,
            timeout=config.readiness_timeout,
        )
        if config.partition:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise OperationTimeoutError(
                        "[Indexer.ensure_partition] deadline exceeded before the partition check"
                    )
            ensure_partition(
                config.client,
                config.collection,
                config.partition,
                timeout=remaining,
            )
        logger.info("Indexer ready, collection '%s'.", config.collection)

    @property
    def config(self) -> IndexerConfig:
        return self._conf

    # ── Public API ─────────────────────────────────────────────────────────────

    def store(
        self,
        docs: Sequence[Document],
        options: StoreOptions | None = None,
    ) -> List[str]:
        """
        Embed and persist documents.

        The batch is all-or-nothing at this layer: any failure aborts before
        (or instead of) the single insert/upsert call.

        Args:
            docs    : Documents to store. Their ids become the primary keys.
            options : Per-call options. Defaults to ``StoreOptions()``.

        Returns:
            The ids of the stored documents, in input order.

        Raises:
            ConfigurationError : No embedder configured or supplied.
            EmbeddingError     : The embedder failed.
            CountMismatchError : The embedder returned the wrong number of vectors.
            ConversionError    : The document converter failed.
            RemoteCallError    : The insert / upsert call failed.
        """
        opts = options or StoreOptions()
        embedder = opts.embedder or self._conf.embedder
        if embedder is None:
            raise ConfigurationError("[Indexer.store] embedding not provided")

        if not docs:
            logger.debug("store() called with no documents, nothing to do.")
            return []

        # 1. embed all contents in one batch call
        texts = [doc.content for doc in docs]
        try:
            vectors = embedder.embed_strings(texts)
        except Exception as exc:
            raise EmbeddingError(f"[Indexer.store] failed to embed documents: {exc}") from exc

        if len(vectors) != len(docs):
            raise CountMismatchError(
                f"[Indexer.store] embedder returned {len(vectors)} vector(s), "
                f"expected {len(docs)}"
            )

        # 2. convert to rows
        try:
            rows = self._conf.document_converter(docs, self._conf.dim, vectors)
        except Exception as exc:
            raise ConversionError(f"[Indexer.store] failed to convert documents: {exc}") from exc

        # 3. insert or upsert
        partition = opts.partition or self._conf.partition or None
        operation = "upsert" if opts.upsert else "insert"
        write = self._conf.client.upsert if opts.upsert else self._conf.client.insert
        try:
            written = write(self._conf.collection, rows, partition=partition)
        except Exception as exc:
            raise RemoteCallError("Indexer.store", operation, exc) from exc

        logger.info(
            "Stored %d document(s) in '%s' via %s (%s row(s) written).",
            len(docs),
            self._conf.collection,
            operation,
            written,
        )
        return [doc.id for doc in docs]
