"""
vecbridge/vector_store/readiness.py

Brings a named collection from "unknown" to "loaded and indexed".

    has_collection?
      ├─ no  → create_collection ────────────────┐
      └─ yes → describe_collection → fields_match?│
                 └─ no → SchemaMismatchError      │
                                                  ▼
    get_load_state
      ├─ NOT_EXIST  → RaceError
      ├─ NOT_LOADED → list_indexes → (create_index) → load_collection
      ├─ LOADING    → poll get_loading_progress until 100
      └─ LOADED     → done

Nothing is cached between calls: every ensure re-derives the state from the
server, so concurrent external changes are always observed. Any remote
failure aborts the whole sequence; the only retries are the SDK's own.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional, TypeVar

from vecbridge.core.config import settings
from vecbridge.core.constants import DEFAULT_INDEX_TYPE, LOAD_COMPLETE_PROGRESS, MetricType
from vecbridge.core.exceptions import (
    ConfigurationError,
    OperationCancelledError,
    OperationTimeoutError,
    RaceError,
    RemoteCallError,
    SchemaMismatchError,
    VecBridgeError,
)
from vecbridge.core.logger import get_logger
from vecbridge.vector_store.base import LoadState, VectorDBClient
from vecbridge.vector_store.schema import CollectionDescriptor, fields_match

logger = get_logger(__name__)

_PHASE = "Indexer.ensure_collection"

T = TypeVar("T")


class _CallBudget:
    """
    Caller-supplied deadline and cancel event shared by one ensure call.

    ``remaining()`` is forwarded as the per-call SDK timeout so a deadline
    also aborts an in-flight remote call.
    """

    def __init__(self, timeout: Optional[float], cancel: Optional[threading.Event]) -> None:
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancel = cancel

    def remaining(self) -> Optional[float]:
        if self._cancel is not None and self._cancel.is_set():
            raise OperationCancelledError(f"[{_PHASE}] cancelled by caller")
        if self._deadline is None:
            return None
        left = self._deadline - time.monotonic()
        if left <= 0:
            raise OperationTimeoutError(f"[{_PHASE}] deadline exceeded")
        return left

    def sleep(self, seconds: float) -> None:
        left = self.remaining()
        if left is not None:
            seconds = min(seconds, left)
        if self._cancel is not None:
            if self._cancel.wait(seconds):
                raise OperationCancelledError(f"[{_PHASE}] cancelled by caller")
        elif seconds > 0:
            time.sleep(seconds)


def _remote(operation: str, call: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run one SDK call, wrapping any failure as RemoteCallError."""
    try:
        return call(*args, **kwargs)
    except VecBridgeError:
        raise
    except Exception as exc:
        raise RemoteCallError(_PHASE, operation, exc) from exc


# ── Public API ─────────────────────────────────────────────────────────────────

def ensure_collection(
    client: VectorDBClient,
    descriptor: CollectionDescriptor,
    *,
    poll_interval: Optional[float] = None,
    max_poll_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> None:
    """
    Make sure the collection exists, matches the descriptor, has an index and
    is loaded, issuing as few remote calls as possible.

    Args:
        client            : Vector database client.
        descriptor        : Desired collection.
        poll_interval     : Seconds between loading-progress checks.
                            Defaults to ``settings.load_poll_interval``.
        max_poll_attempts : Give up after this many incomplete progress
                            checks. None polls until the load completes.
        timeout           : Overall deadline in seconds. None = no deadline.
        cancel            : Event that aborts the operation when set.

    Raises:
        ConfigurationError      : dim <= 0, or an unsupported metric type.
        SchemaMismatchError     : The existing collection has different fields.
        RaceError               : The collection vanished between checks.
        RemoteCallError         : Any SDK call failed.
        OperationTimeoutError   : Deadline or poll attempt cap reached.
        OperationCancelledError : ``cancel`` was set.
    """
    if descriptor.dim <= 0:
        raise ConfigurationError(
            f"[{_PHASE}] the dimension of the vector must be greater than 0"
        )

    budget = _CallBudget(timeout, cancel)
    name = descriptor.name

    exists = _remote("has_collection", client.has_collection, name, timeout=budget.remaining())
    if not exists:
        logger.info("Collection '%s' not found, creating it (dim=%d).", name, descriptor.dim)
        _remote(
            "create_collection",
            client.create_collection,
            descriptor,
            timeout=budget.remaining(),
        )
    else:
        remote_fields = _remote(
            "describe_collection", client.describe_collection, name, timeout=budget.remaining()
        )
        desired = descriptor.effective_fields()
        if not fields_match(remote_fields, desired):
            raise SchemaMismatchError(
                f"[{_PHASE}] collection '{name}' schema does not match: "
                f"have {[(f.name, f.data_type.name) for f in remote_fields]}, "
                f"want {[(f.name, f.data_type.name) for f in desired]}"
            )

    _ensure_loaded(client, descriptor, budget, poll_interval, max_poll_attempts)


def ensure_loaded(
    client: VectorDBClient,
    descriptor: CollectionDescriptor,
    *,
    poll_interval: Optional[float] = None,
    max_poll_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> None:
    """Run only the load-state half of ``ensure_collection``."""
    _ensure_loaded(
        client, descriptor, _CallBudget(timeout, cancel), poll_interval, max_poll_attempts
    )


def create_default_index(
    client: VectorDBClient,
    descriptor: CollectionDescriptor,
    *,
    timeout: Optional[float] = None,
) -> None:
    """
    Create an AUTOINDEX on the descriptor's vector field.

    Raises:
        ConfigurationError : The metric type is not supported; no remote
                             call is made in that case.
        RemoteCallError    : The create-index call failed.
    """
    try:
        metric = MetricType(descriptor.metric_type)
    except ValueError as exc:
        raise ConfigurationError(
            f"[{_PHASE}] failed to create index: "
            f"unsupported metric type '{descriptor.metric_type}'"
        ) from exc

    field_name = descriptor.vector_field_name()
    logger.info(
        "Creating %s index on '%s.%s' (metric=%s).",
        DEFAULT_INDEX_TYPE,
        descriptor.name,
        field_name,
        metric.value,
    )
    _remote(
        "create_index",
        client.create_index,
        descriptor.name,
        field_name,
        DEFAULT_INDEX_TYPE,
        metric.value,
        timeout=timeout,
    )


def ensure_partition(
    client: VectorDBClient,
    collection: str,
    partition: str,
    *,
    timeout: Optional[float] = None,
) -> None:
    """Create and load ``partition`` if the collection does not have it yet."""
    if _remote("has_partition", client.has_partition, collection, partition, timeout=timeout):
        return

    logger.info("Partition '%s' not found in '%s', creating it.", partition, collection)
    _remote("create_partition", client.create_partition, collection, partition, timeout=timeout)
    _remote("load_partitions", client.load_partitions, collection, [partition], timeout=timeout)


# ── Internals ──────────────────────────────────────────────────────────────────

def _ensure_loaded(
    client: VectorDBClient,
    descriptor: CollectionDescriptor,
    budget: _CallBudget,
    poll_interval: Optional[float],
    max_poll_attempts: Optional[int],
) -> None:
    name = descriptor.name
    state = _remote("get_load_state", client.get_load_state, name, timeout=budget.remaining())
    logger.debug("Collection '%s' load state: %s", name, state.name)

    if state is LoadState.LOADED:
        return

    if state is LoadState.NOT_EXIST:
        raise RaceError(f"[{_PHASE}] collection '{name}' vanished before it could be loaded")

    if state is LoadState.NOT_LOADED:
        indexes = _remote("list_indexes", client.list_indexes, name, timeout=budget.remaining())
        if not indexes:
            create_default_index(client, descriptor, timeout=budget.remaining())
        logger.info("Loading collection '%s'.", name)
        _remote("load_collection", client.load_collection, name, timeout=budget.remaining())
        return

    _wait_for_load(client, name, budget, poll_interval, max_poll_attempts)


def _wait_for_load(
    client: VectorDBClient,
    name: str,
    budget: _CallBudget,
    poll_interval: Optional[float],
    max_poll_attempts: Optional[int],
) -> None:
    interval = settings.load_poll_interval if poll_interval is None else poll_interval
    attempts = 0
    while True:
        progress = _remote(
            "get_loading_progress", client.get_loading_progress, name, timeout=budget.remaining()
        )
        if progress >= LOAD_COMPLETE_PROGRESS:
            logger.info("Collection '%s' loaded.", name)
            return

        attempts += 1
        if max_poll_attempts is not None and attempts >= max_poll_attempts:
            raise OperationTimeoutError(
                f"[{_PHASE}] collection '{name}' still loading ({progress}%) "
                f"after {attempts} check(s)"
            )
        logger.debug("Collection '%s' loading: %d%%", name, progress)
        budget.sleep(interval)
