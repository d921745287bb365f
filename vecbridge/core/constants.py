"""
vecbridge/core/constants.py

Application-wide fixed constants.

These are defaults owned by the indexer's configuration step. They are
applied once when an IndexerConfig is checked and are NOT configurable via
environment variables.
"""

from enum import Enum, IntEnum


# ── Collection defaults ────────────────────────────────────────────────────────

#: Collection used when the caller does not name one.
DEFAULT_COLLECTION: str = "vecbridge_collection"

#: Description attached to collections created by the indexer.
DEFAULT_DESCRIPTION: str = "the collection for vecbridge"

#: Number of shards for newly created collections.
DEFAULT_SHARD_NUM: int = 1


# ── Default row layout ─────────────────────────────────────────────────────────

FIELD_ID: str = "id"
FIELD_CONTENT: str = "content"
FIELD_VECTOR: str = "vector"
FIELD_METADATA: str = "metadata"

#: Max VARCHAR lengths of the default schema.
ID_MAX_LENGTH: int = 255
CONTENT_MAX_LENGTH: int = 8192


# ── Index ──────────────────────────────────────────────────────────────────────

#: Index type used when a collection has no index yet.
DEFAULT_INDEX_TYPE: str = "AUTOINDEX"


class MetricType(str, Enum):
    """Similarity metrics accepted for the default index."""

    L2 = "L2"
    IP = "IP"
    COSINE = "COSINE"
    HAMMING = "HAMMING"
    JACCARD = "JACCARD"


DEFAULT_METRIC_TYPE: MetricType = MetricType.COSINE


class ConsistencyLevel(IntEnum):
    """Milvus consistency levels, numbered from 1 so 0 means "unset"."""

    STRONG = 1
    SESSION = 2
    BOUNDED = 3
    EVENTUALLY = 4
    CUSTOMIZED = 5

    @property
    def milvus_name(self) -> str:
        return self.name.capitalize()


DEFAULT_CONSISTENCY_LEVEL: ConsistencyLevel = ConsistencyLevel.BOUNDED


# ── Loading ────────────────────────────────────────────────────────────────────

#: Loading progress value reported once a collection is fully loaded.
LOAD_COMPLETE_PROGRESS: int = 100
