"""
vecbridge/models/document_models.py

Pydantic DTOs for the indexing flow: request body and response.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class DocumentIn(BaseModel):
    """
    One document to index.

        { "id": "doc1", "content": "Vector embeddings ...", "metadata": {"lang": "en"} }
    """

    id: str = Field(min_length=1)
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class IndexRequest(BaseModel):
    """
    JSON body for POST /documents/.

        { "documents": [ <DocumentIn>, ... ] }
        { "documents": [ ... ], "upsert": true, "partition": "2024" }
    """

    documents: List[DocumentIn]
    upsert: bool = False
    partition: Optional[str] = None

    @field_validator("documents")
    @classmethod
    def documents_must_not_be_empty(cls, v: List[DocumentIn]) -> List[DocumentIn]:
        if not v:
            raise ValueError("At least one document is required.")
        return v


class IndexResponse(BaseModel):
    """
    Successful response for POST /documents/.

        { "ids": ["doc1", "doc2"] }
    """

    ids: List[str]
