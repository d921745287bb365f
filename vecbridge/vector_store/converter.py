"""
vecbridge/vector_store/converter.py

Turns documents and their vectors into rows for the vector database.

A converter is any callable ``(docs, dim, vectors) -> rows``; the indexer
uses ``default_document_converter`` unless the caller supplies another one.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Sequence

from vecbridge.core.constants import FIELD_CONTENT, FIELD_ID, FIELD_METADATA, FIELD_VECTOR
from vecbridge.core.exceptions import ConversionError
from vecbridge.vector_store.base import Document

DocumentConverter = Callable[
    [Sequence[Document], int, Sequence[Sequence[float]]],
    List[Dict[str, Any]],
]


def default_document_converter(
    docs: Sequence[Document],
    dim: int,
    vectors: Sequence[Sequence[float]],
) -> List[Dict[str, Any]]:
    """
    Build one row per (document, vector) pair with the default layout:

        id       : str   (Document.id)
        content  : str   (Document.content)
        vector   : float vector of length ``dim``
        metadata : Document.metadata serialised as JSON text

    Rows are only produced for pairs, so no vectors means no rows.

    Raises:
        ConversionError: Metadata is not JSON-serialisable, or a vector's
                         length differs from ``dim``.
    """
    errors: List[str] = []
    rows: List[Dict[str, Any]] = []

    for doc, vector in zip(docs, vectors or []):
        try:
            metadata = json.dumps(doc.metadata or {}, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            errors.append(f"{doc.id}: {exc}")
            continue

        if len(vector) != dim:
            raise ConversionError(
                f"[Indexer.DocumentConverter] vector for '{doc.id}' has "
                f"{len(vector)} dimensions, expected {dim}"
            )

        rows.append(
            {
                FIELD_ID: doc.id,
                FIELD_CONTENT: doc.content,
                FIELD_VECTOR: [float(x) for x in vector],
                FIELD_METADATA: metadata,
            }
        )

    if errors:
        raise ConversionError(f"[Indexer.DocumentConverter] failed to marshal metadata: {errors}")
    return rows
