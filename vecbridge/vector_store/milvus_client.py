"""
vecbridge/vector_store/milvus_client.py

pymilvus implementation of the VectorDBClient interface.

All SDK-specific details (schema building, index params, load-state
dictionaries) are fully contained here; the rest of the package never
imports ``MilvusClient`` directly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pymilvus import DataType, MilvusClient

from vecbridge.core.config import settings
from vecbridge.core.constants import LOAD_COMPLETE_PROGRESS
from vecbridge.core.exceptions import RaceError, RemoteCallError
from vecbridge.core.logger import get_logger
from vecbridge.vector_store.base import LoadState, VectorDBClient
from vecbridge.vector_store.schema import CollectionDescriptor, FieldSpec

logger = get_logger(__name__)


class MilvusVectorDBClient(VectorDBClient):
    """
    VectorDBClient backed by ``pymilvus.MilvusClient``.

    Either pass a ready ``MilvusClient`` (shared connection, tests) or let the
    wrapper connect using ``uri`` / ``token`` / ``db_name``, which default to
    the ``MILVUS_*`` settings.
    """

    def __init__(
        self,
        uri: str | None = None,
        token: str | None = None,
        db_name: str | None = None,
        client: MilvusClient | None = None,
    ) -> None:
        if client is not None:
            self._client = client
            return

        self._uri = uri or settings.milvus_uri
        logger.info("Connecting to Milvus at %s", self._uri)
        try:
            self._client = MilvusClient(
                uri=self._uri,
                token=token if token is not None else settings.milvus_token,
                db_name=db_name if db_name is not None else settings.milvus_db_name,
            )
        except Exception as exc:
            raise RemoteCallError("MilvusVectorDBClient", "connect", exc) from exc

    # ── Collections ────────────────────────────────────────────────────────────

    def has_collection(self, name: str, timeout: Optional[float] = None) -> bool:
        return bool(self._client.has_collection(collection_name=name, timeout=timeout))

    def describe_collection(self, name: str, timeout: Optional[float] = None) -> List[FieldSpec]:
        info = self._client.describe_collection(collection_name=name, timeout=timeout)
        # the hidden $meta column of a dynamic schema is not part of the layout
        return [
            _field_from_description(raw)
            for raw in info.get("fields", [])
            if not raw.get("is_dynamic", False)
        ]

    def create_collection(
        self, descriptor: CollectionDescriptor, timeout: Optional[float] = None
    ) -> None:
        schema = MilvusClient.create_schema(
            auto_id=False,
            enable_dynamic_field=descriptor.enable_dynamic_schema,
            description=descriptor.description,
        )
        for spec in descriptor.effective_fields():
            params: Dict[str, Any] = {}
            if spec.max_length is not None:
                params["max_length"] = spec.max_length
            if spec.dim is not None:
                params["dim"] = spec.dim
            if spec.is_partition_key:
                params["is_partition_key"] = True
            schema.add_field(
                field_name=spec.name,
                datatype=spec.data_type,
                is_primary=spec.is_primary,
                description=spec.description,
                **params,
            )

        extra: Dict[str, Any] = {}
        if descriptor.partition_num > 1:
            extra["num_partitions"] = descriptor.partition_num

        self._client.create_collection(
            collection_name=descriptor.name,
            schema=schema,
            consistency_level=descriptor.consistency_level.milvus_name,
            num_shards=descriptor.shard_num,
            timeout=timeout,
            **extra,
        )

    # ── Indexes ────────────────────────────────────────────────────────────────

    def list_indexes(self, name: str, timeout: Optional[float] = None) -> List[str]:
        return list(self._client.list_indexes(collection_name=name, timeout=timeout))

    def create_index(
        self,
        name: str,
        field_name: str,
        index_type: str,
        metric_type: str,
        timeout: Optional[float] = None,
    ) -> None:
        index_params = self._client.prepare_index_params()
        index_params.add_index(
            field_name=field_name,
            index_type=index_type,
            metric_type=metric_type,
        )
        self._client.create_index(collection_name=name, index_params=index_params, timeout=timeout)

    # ── Loading ────────────────────────────────────────────────────────────────

    def load_collection(self, name: str, timeout: Optional[float] = None) -> None:
        self._client.load_collection(collection_name=name, timeout=timeout)

    def get_load_state(self, name: str, timeout: Optional[float] = None) -> LoadState:
        result = self._client.get_load_state(collection_name=name, timeout=timeout)
        return LoadState(result["state"].name)

    def get_loading_progress(self, name: str, timeout: Optional[float] = None) -> int:
        # MilvusClient reports progress alongside the state while loading.
        result = self._client.get_load_state(collection_name=name, timeout=timeout)
        state = LoadState(result["state"].name)
        if state is LoadState.LOADED:
            return LOAD_COMPLETE_PROGRESS
        if state is LoadState.NOT_EXIST:
            raise RaceError(f"[MilvusVectorDBClient] collection '{name}' vanished while loading")
        if state is LoadState.NOT_LOADED:
            raise RaceError(f"[MilvusVectorDBClient] collection '{name}' was released while loading")
        progress = result.get("progress", 0)
        if isinstance(progress, str):
            progress = progress.rstrip("%") or 0
        return int(progress)

    # ── Partitions ─────────────────────────────────────────────────────────────

    def has_partition(self, name: str, partition: str, timeout: Optional[float] = None) -> bool:
        return bool(
            self._client.has_partition(
                collection_name=name, partition_name=partition, timeout=timeout
            )
        )

    def create_partition(self, name: str, partition: str, timeout: Optional[float] = None) -> None:
        self._client.create_partition(
            collection_name=name, partition_name=partition, timeout=timeout
        )

    def load_partitions(
        self, name: str, partitions: List[str], timeout: Optional[float] = None
    ) -> None:
        self._client.load_partitions(
            collection_name=name, partition_names=partitions, timeout=timeout
        )

    # ── Writes ─────────────────────────────────────────────────────────────────

    def insert(
        self,
        name: str,
        rows: List[Dict[str, Any]],
        partition: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> int:
        result = self._client.insert(
            collection_name=name,
            data=rows,
            partition_name=partition or "",
            timeout=timeout,
        )
        return int(result.get("insert_count", len(rows)))

    def upsert(
        self,
        name: str,
        rows: List[Dict[str, Any]],
        partition: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> int:
        result = self._client.upsert(
            collection_name=name,
            data=rows,
            partition_name=partition or "",
            timeout=timeout,
        )
        return int(result.get("upsert_count", len(rows)))


def _field_from_description(raw: Dict[str, Any]) -> FieldSpec:
    """Map one entry of ``describe_collection()["fields"]`` to a FieldSpec."""
    params = raw.get("params") or {}
    max_length = params.get("max_length")
    dim = params.get("dim")
    return FieldSpec(
        name=raw["name"],
        data_type=DataType(raw["type"]),
        is_primary=bool(raw.get("is_primary", False)),
        max_length=int(max_length) if max_length is not None else None,
        dim=int(dim) if dim is not None else None,
        is_partition_key=bool(raw.get("is_partition_key", False)),
        description=raw.get("description", ""),
    )
