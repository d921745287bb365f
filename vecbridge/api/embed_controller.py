"""
vecbridge/api/embed_controller.py

Handles incoming requests to POST /embed/.

Responses:
  200  Body contains one vector per input text, in input order.
  422  The body was malformed or the text list was empty.
  502  The Ollama daemon failed or returned an unusable payload.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from vecbridge.api.deps import get_embedder
from vecbridge.core.exceptions import EmbeddingError
from vecbridge.core.logger import get_logger
from vecbridge.embedder.base import Embedder
from vecbridge.models.embedding_models import EmbedRequest, EmbedResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/embed", tags=["Embed"])


@router.post("/", response_model=EmbedResponse, summary="Embed a batch of texts")
def embed(body: EmbedRequest, embedder: Embedder = Depends(get_embedder)) -> JSONResponse:
    logger.info("Embed request received: %d text(s)", len(body.texts))

    try:
        vectors = embedder.embed_strings(body.texts)
    except EmbeddingError as exc:
        logger.warning("Embedding failed: %s", exc)
        return JSONResponse(status_code=502, content={"error": str(exc)})

    result = EmbedResponse(model=getattr(embedder, "model", ""), embeddings=vectors)
    return JSONResponse(status_code=200, content=result.model_dump())
