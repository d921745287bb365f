"""
vecbridge/api/document_controller.py

Handles incoming requests to POST /documents/.

This layer is responsible only for HTTP concerns:
  - Mapping request DTOs onto Document objects and StoreOptions.
  - Delegating the actual work to the Indexer.
  - Translating indexer errors into HTTP responses.

Responses:
  200  All documents were stored. Body lists their ids in request order.
  400  The documents could not be converted into rows.
  422  The body was malformed or contained no documents.
  500  The indexer is misconfigured (e.g. no embedder).
  502  The embedder or the vector database failed, or the embedder
       returned the wrong number of vectors.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from vecbridge.api.deps import get_indexer
from vecbridge.core.exceptions import (
    ConfigurationError,
    ConversionError,
    CountMismatchError,
    EmbeddingError,
    RemoteCallError,
)
from vecbridge.core.logger import get_logger
from vecbridge.models.document_models import IndexRequest, IndexResponse
from vecbridge.services.indexer import Indexer, StoreOptions
from vecbridge.vector_store.base import Document

logger = get_logger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


def _err(message: str, status: int) -> JSONResponse:
    """Return a JSON error response: { "error": "..." }."""
    return JSONResponse(status_code=status, content={"error": message})


@router.post("/", response_model=IndexResponse, summary="Embed and store documents")
def index_documents(body: IndexRequest, indexer: Indexer = Depends(get_indexer)) -> JSONResponse:
    docs = [Document(id=d.id, content=d.content, metadata=d.metadata) for d in body.documents]
    options = StoreOptions(upsert=body.upsert, partition=body.partition)

    logger.info(
        "Index request received: %d document(s), upsert=%s", len(docs), body.upsert
    )

    try:
        ids = indexer.store(docs, options)
    except ConversionError as exc:
        logger.warning("Documents rejected: %s", exc)
        return _err(str(exc), 400)
    except ConfigurationError as exc:
        logger.error("Indexer misconfigured: %s", exc)
        return _err(str(exc), 500)
    except (EmbeddingError, CountMismatchError, RemoteCallError) as exc:
        logger.exception("Indexing failed: %s", exc)
        return _err(str(exc), 502)

    return JSONResponse(status_code=200, content=IndexResponse(ids=ids).model_dump())
