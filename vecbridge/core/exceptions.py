"""
vecbridge/core/exceptions.py

Custom exception hierarchy for the package.

Every message starts with a ``[Component.operation]`` prefix naming the phase
that failed. The underlying SDK / transport exception, when there is one, is
chained as ``__cause__`` so callers can inspect it.
"""


class VecBridgeError(Exception):
    """Root exception, catch-all for any vecbridge error."""


# ── Configuration ──────────────────────────────────────────────────────────────

class ConfigurationError(VecBridgeError):
    """Raised when required settings are missing or mutually incompatible."""


# ── Collection readiness ───────────────────────────────────────────────────────

class SchemaMismatchError(VecBridgeError):
    """Raised when an existing collection's fields differ from the desired ones."""


class RaceError(VecBridgeError):
    """Raised when a collection disappears between two readiness checks."""


class RemoteCallError(VecBridgeError):
    """Raised when a call to the vector database fails.

    Attributes:
        phase     : Component / operation that issued the call.
        operation : Name of the failed remote operation (e.g. ``"upsert"``).
    """

    def __init__(self, phase: str, operation: str, cause: BaseException) -> None:
        self.phase = phase
        self.operation = operation
        super().__init__(f"[{phase}] {operation} failed: {cause}")


class OperationTimeoutError(VecBridgeError):
    """Raised when a deadline or the poll attempt cap is reached."""


class OperationCancelledError(VecBridgeError):
    """Raised when the caller's cancel event fires mid-operation."""


# ── Indexing ───────────────────────────────────────────────────────────────────

class EmbeddingError(VecBridgeError):
    """Raised when the embedding backend fails to produce vectors."""


class CountMismatchError(VecBridgeError):
    """Raised when the embedder returns a different number of vectors than documents."""


class ConversionError(VecBridgeError):
    """Raised when documents cannot be converted into storage rows."""
