"""
vecbridge/models/embedding_models.py

Pydantic DTOs for the embedding flow.
"""

from typing import List

from pydantic import BaseModel, field_validator


class EmbedRequest(BaseModel):
    """
    JSON body for POST /embed/.

        { "texts": ["hello world", "semantic search"] }
    """

    texts: List[str]

    @field_validator("texts")
    @classmethod
    def texts_must_not_be_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("At least one text is required.")
        return v


class EmbedResponse(BaseModel):
    """
    Successful response for POST /embed/.

        { "model": "mxbai-embed-large", "embeddings": [[0.1, ...], [0.3, ...]] }
    """

    model: str
    embeddings: List[List[float]]
