"""
vecbridge/main.py

FastAPI application entry point.

    GET  /health       liveness probe, touches neither Ollama nor Milvus
    POST /embed/       texts     → vectors
    POST /documents/   documents → ids (embedded and written to Milvus)

The embedder and the indexer are built on first use by ``vecbridge.api.deps``.
Any VecBridgeError a controller does not translate itself, typically a
failed readiness check while the indexer is first built, becomes a 500.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vecbridge.api.deps import get_embedder
from vecbridge.api.document_controller import router as document_router
from vecbridge.api.embed_controller import router as embed_router
from vecbridge.core.config import settings
from vecbridge.core.exceptions import VecBridgeError
from vecbridge.core.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s %s starting (milvus=%s, ollama=%s)",
                settings.app_name, settings.app_version,
                settings.milvus_uri, settings.ollama_base_url)
    yield
    # Only close the embedder if a request actually built it.
    if get_embedder.cache_info().currsize:
        get_embedder().close()
        logger.info("Ollama HTTP client closed.")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Ollama embeddings and a Milvus indexer behind one HTTP API.",
    lifespan=lifespan,
)

app.include_router(embed_router)
app.include_router(document_router)


@app.exception_handler(VecBridgeError)
async def vecbridge_exception_handler(request: Request, exc: VecBridgeError) -> JSONResponse:
    """Fallback for errors no controller mapped: { "error": "..." } with 500."""
    logger.exception("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/health", tags=["Health"], summary="Liveness probe")
async def health() -> dict:
    return {"status": "ok", "version": settings.app_version}
