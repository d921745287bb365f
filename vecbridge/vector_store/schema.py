"""
vecbridge/vector_store/schema.py

Collection schema vocabulary and the schema comparator.

FieldSpec and CollectionDescriptor describe the collection the indexer wants;
``fields_match`` decides whether an existing remote collection is structurally
compatible with it. Only field names and data types take part in that
comparison, position by position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from pymilvus import DataType

from vecbridge.core.constants import (
    CONTENT_MAX_LENGTH,
    DEFAULT_CONSISTENCY_LEVEL,
    DEFAULT_DESCRIPTION,
    DEFAULT_METRIC_TYPE,
    DEFAULT_SHARD_NUM,
    FIELD_CONTENT,
    FIELD_ID,
    FIELD_METADATA,
    FIELD_VECTOR,
    ID_MAX_LENGTH,
    ConsistencyLevel,
)

#: Data types that can carry the index created by the readiness check.
VECTOR_TYPES = frozenset(
    {
        DataType.FLOAT_VECTOR,
        DataType.BINARY_VECTOR,
        DataType.FLOAT16_VECTOR,
        DataType.BFLOAT16_VECTOR,
        DataType.SPARSE_FLOAT_VECTOR,
    }
)


@dataclass(frozen=True)
class FieldSpec:
    """
    One column of a collection schema.

    Attributes:
        name             : Field name.
        data_type        : Milvus data type.
        is_primary       : Whether this is the primary key.
        max_length       : VARCHAR length limit (VARCHAR only).
        dim              : Vector dimension (dense vector types only).
        is_partition_key : Whether Milvus partitions rows by this field.
        description      : Free-form field description.
    """

    name: str
    data_type: DataType
    is_primary: bool = False
    max_length: Optional[int] = None
    dim: Optional[int] = None
    is_partition_key: bool = False
    description: str = ""

    @property
    def is_vector(self) -> bool:
        return self.data_type in VECTOR_TYPES


@dataclass
class CollectionDescriptor:
    """
    Everything needed to create, index and load one collection.

    ``fields`` may be empty, in which case ``default_fields(dim)`` is used when
    the collection has to be created.
    """

    name: str
    dim: int
    fields: List[FieldSpec] = field(default_factory=list)
    description: str = DEFAULT_DESCRIPTION
    metric_type: str = DEFAULT_METRIC_TYPE.value
    consistency_level: ConsistencyLevel = DEFAULT_CONSISTENCY_LEVEL
    shard_num: int = DEFAULT_SHARD_NUM
    partition_num: int = 0
    enable_dynamic_schema: bool = False

    def effective_fields(self) -> List[FieldSpec]:
        """Configured fields, or the default single-vector layout."""
        return list(self.fields) if self.fields else default_fields(self.dim)

    def vector_field_name(self) -> str:
        """Name of the first vector-typed field (``"vector"`` if there is none)."""
        for spec in self.effective_fields():
            if spec.is_vector:
                return spec.name
        return FIELD_VECTOR


def default_fields(dim: int) -> List[FieldSpec]:
    """
    The four-column layout written by the default document converter:

        id (VARCHAR, primary) | content (VARCHAR) | vector (FLOAT_VECTOR) | metadata (JSON)
    """
    return [
        FieldSpec(FIELD_ID, DataType.VARCHAR, is_primary=True, max_length=ID_MAX_LENGTH),
        FieldSpec(FIELD_CONTENT, DataType.VARCHAR, max_length=CONTENT_MAX_LENGTH),
        FieldSpec(FIELD_VECTOR, DataType.FLOAT_VECTOR, dim=dim),
        FieldSpec(FIELD_METADATA, DataType.JSON),
    ]


def fields_match(remote: Sequence[FieldSpec], desired: Sequence[FieldSpec]) -> bool:
    """
    Return True when two field lists are structurally identical.

    Lists match iff they have the same length and every position carries the
    same name and data type. Two empty lists match.
    """
    if len(remote) != len(desired):
        return False
    for have, want in zip(remote, desired):
        if have.name != want.name or have.data_type != want.data_type:
            return False
    return True
