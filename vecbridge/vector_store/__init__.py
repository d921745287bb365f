"""vecbridge/vector_store/__init__.py: public API of the vector_store package."""

from vecbridge.vector_store.base import Document, LoadState, VectorDBClient
from vecbridge.vector_store.converter import DocumentConverter, default_document_converter
from vecbridge.vector_store.milvus_client import MilvusVectorDBClient
from vecbridge.vector_store.readiness import (
    create_default_index,
    ensure_collection,
    ensure_loaded,
    ensure_partition,
)
from vecbridge.vector_store.schema import (
    CollectionDescriptor,
    FieldSpec,
    default_fields,
    fields_match,
)

__all__ = [
    "VectorDBClient",
    "MilvusVectorDBClient",
    "Document",
    "LoadState",
    "FieldSpec",
    "CollectionDescriptor",
    "default_fields",
    "fields_match",
    "DocumentConverter",
    "default_document_converter",
    "ensure_collection",
    "ensure_loaded",
    "ensure_partition",
    "create_default_index",
]
