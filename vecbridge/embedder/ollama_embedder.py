"""
vecbridge/embedder/ollama_embedder.py

Ollama implementation of the Embedder interface.

Sends the whole batch to the daemon's ``POST /api/embed`` endpoint in one
request. The HTTP client is created lazily on first use so constructing an
embedder never touches the network.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from vecbridge.core.config import settings
from vecbridge.core.exceptions import ConfigurationError, EmbeddingError
from vecbridge.core.logger import get_logger
from vecbridge.embedder.base import Embedder

logger = get_logger(__name__)

# Timing / usage fields Ollama returns next to the vectors.
TOTAL_DURATION = "total_duration"
LOAD_DURATION = "load_duration"
PROMPT_EVAL_COUNT = "prompt_eval_count"


class OllamaEmbedder(Embedder):
    """
    Embedder backed by a local Ollama daemon.

    Every argument falls back to the matching ``OLLAMA_*`` setting:

      - base_url   : ``http://localhost:11434``
      - model      : ``mxbai-embed-large`` (required, must not be blank)
      - timeout    : no timeout (ignored when ``http_client`` is given)
      - truncate   : daemon default
      - keep_alive : ``5m``, how long the model stays loaded after a request
    """

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        truncate: bool | None = None,
        keep_alive: str | None = None,
        options: Dict[str, Any] | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url: str = (base_url or settings.ollama_base_url).rstrip("/")
        self._model: str = model if model is not None else settings.ollama_model
        self._timeout: Optional[float] = timeout if timeout is not None else settings.ollama_timeout
        self._truncate: Optional[bool] = truncate if truncate is not None else settings.ollama_truncate
        self._keep_alive: Optional[str] = (
            keep_alive if keep_alive is not None else settings.ollama_keep_alive
        )
        self._options: Dict[str, Any] = dict(options or {})
        self._client: Optional[httpx.Client] = http_client  # created on first use

        if not self._model.strip():
            raise ConfigurationError("[OllamaEmbedder] model must not be empty")

        try:
            url = httpx.URL(self._base_url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise ConfigurationError(f"[OllamaEmbedder] invalid base URL '{self._base_url}': {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(f"[OllamaEmbedder] invalid base URL '{self._base_url}'")

    @property
    def model(self) -> str:
        return self._model

    # ── Lazy client ────────────────────────────────────────────────────────────

    def _get_client(self) -> httpx.Client:
        """Return the HTTP client, creating it on first call."""
        if self._client is None:
            logger.debug("Creating Ollama HTTP client for %s", self._base_url)
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def _build_payload(self, texts: List[str]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self._model, "input": texts}
        if self._truncate is not None:
            payload["truncate"] = self._truncate
        if self._options:
            payload["options"] = self._options
        if self._keep_alive is not None:
            payload["keep_alive"] = self._keep_alive
        return payload

    # ── Embedder interface ─────────────────────────────────────────────────────

    def embed_strings(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts in one request. Returns [] for empty input."""
        if not texts:
            return []

        try:
            response = self._get_client().post(
                f"{self._base_url}/api/embed",
                json=self._build_payload(list(texts)),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise EmbeddingError(
                f"[OllamaEmbedder.embed_strings] HTTP {exc.response.status_code}: "
                f"{exc.response.text}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise EmbeddingError(f"[OllamaEmbedder.embed_strings] request failed: {exc}") from exc

        raw = data.get("embeddings") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raise EmbeddingError(
                "[OllamaEmbedder.embed_strings] response has no 'embeddings' list"
            )

        try:
            vectors = [[float(x) for x in vec] for vec in raw]
        except (TypeError, ValueError) as exc:
            raise EmbeddingError(f"[OllamaEmbedder.embed_strings] malformed embeddings: {exc}") from exc

        logger.debug(
            "Embedded %d text(s) with '%s': %s=%s %s=%s %s=%s",
            len(vectors),
            self._model,
            TOTAL_DURATION,
            data.get(TOTAL_DURATION),
            LOAD_DURATION,
            data.get(LOAD_DURATION),
            PROMPT_EVAL_COUNT,
            data.get(PROMPT_EVAL_COUNT),
        )
        return vectors

    def close(self) -> None:
        """Close the underlying HTTP client, if one was created."""
        if self._client is not None:
            self._client.close()
            self._client = None
