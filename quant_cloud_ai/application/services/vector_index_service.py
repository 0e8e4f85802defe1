"""Vector index service — the host-facing vector database provider.

Wraps the Quant Cloud VectorDB client with what a search index needs:
collection lookup by name, batched inserts tagged with host ids,
deletes by host id and a local long-id → document-id lookup table.

Remote document metadata (``drupal_long_id``) is the source of truth for
document identity: deletes are issued against it. The local table only
serves reverse lookups (``get_vdb_ids``) and is kept in step with
uploads, deletes and purges.
"""

import asyncio
import logging
import re
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from quant_cloud_ai.application.interfaces.state_store import StateStore
from quant_cloud_ai.config import Settings
from quant_cloud_ai.domain.entities import (
    IndexedItem,
    IndexSearchResult,
    VectorDocument,
    VectorSearchMatch,
)
from quant_cloud_ai.domain.exceptions import CollectionNotFoundError, QuantCloudError
from quant_cloud_ai.infrastructure.quant_cloud.vector_db_client import QuantCloudVectorDbClient

logger = logging.getLogger(__name__)

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Metadata fields copied from an IndexedItem onto the uploaded document.
LONG_ID_FIELD = "drupal_long_id"
ENTITY_ID_FIELD = "drupal_entity_id"

DEFAULT_EMBEDDING_MODEL = "amazon.titan-embed-text-v2:0"
DEFAULT_SEARCH_LIMIT = 10


class MappingLocks:
    """Per-key asyncio locks serialising read-modify-write of mapping tables.

    Locks are kept per running event loop, since an asyncio.Lock binds to
    the loop that first waits on it. A key's entry is dropped as soon as
    no task holds or waits on it.
    """

    def __init__(self):
        self._loops: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, dict[str, list[Any]]
        ] = weakref.WeakKeyDictionary()

    def __len__(self) -> int:
        return sum(len(locks) for locks in self._loops.values())

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        locks = self._loops.setdefault(asyncio.get_running_loop(), {})
        entry = locks.get(key)
        if entry is None:
            entry = locks[key] = [asyncio.Lock(), 0]
        lock: asyncio.Lock = entry[0]
        entry[1] += 1
        try:
            async with lock:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0 and locks.get(key) is entry:
                del locks[key]


class VectorIndexService:
    """Application service — vector collections addressed by name.

    Pass the process-wide ``locks`` so concurrent requests on one
    collection serialise their mapping updates.
    """

    def __init__(
        self,
        vdb_client: QuantCloudVectorDbClient,
        state_store: StateStore,
        settings: Settings,
        locks: MappingLocks | None = None,
    ):
        self._client = vdb_client
        self._state = state_store
        self._settings = settings
        self._locks = locks if locks is not None else MappingLocks()

    # ── Status ─────────────────────────────────────────────────────

    async def ping(self) -> bool:
        """True when the collection list can be fetched."""
        try:
            await self._client.list_collections()
        except QuantCloudError as exc:
            logger.debug("VectorDB ping failed: %s", exc)
            return False
        return True

    def is_setup(self) -> bool:
        return bool(self._settings.access_token_key and self._settings.organization_id)

    # ── Collections ────────────────────────────────────────────────

    async def get_collections(self) -> list[str]:
        """Return collection names (the id when a collection has no name)."""
        try:
            collections = await self._client.list_collections()
        except QuantCloudError as exc:
            logger.error("Failed to list collections: %s", exc)
            return []
        return [c.name or c.id for c in collections]

    async def create_collection(self, name: str, dimension: int, metric: str = "cosine_similarity") -> None:
        """Create a collection; the server derives the dimension from the embedding model."""
        try:
            await self._client.create_collection(
                name,
                description=f"Drupal AI Search collection - metric: {metric}",
                embedding_model=DEFAULT_EMBEDDING_MODEL,
            )
        except QuantCloudError as exc:
            logger.error("Failed to create collection: %s", exc)
            raise

        logger.info("Created collection %s (requested dimension %d)", name, dimension)

    async def drop_collection(self, name: str) -> None:
        try:
            collection_id = await self.resolve_collection_id(name)
            await self._client.delete_collection(collection_id)
        except QuantCloudError as exc:
            logger.error("Failed to delete collection: %s", exc)
            raise

        logger.info("Deleted collection %s", name)

    async def resolve_collection_id(self, name: str) -> str:
        """Map a collection name to its id.

        A UUID is returned as-is without a network call. Otherwise the
        collection list is fetched once and matched by exact name.

        Raises:
            CollectionNotFoundError: No collection has that name.
        """
        if _UUID_PATTERN.match(name):
            return name

        try:
            collections = await self._client.list_collections()
        except QuantCloudError as exc:
            logger.warning("Could not list collections while resolving %s: %s", name, exc)
            raise CollectionNotFoundError(name) from exc

        for collection in collections:
            if collection.name == name:
                return collection.id

        raise CollectionNotFoundError(name)

    # ── Documents ──────────────────────────────────────────────────

    @staticmethod
    def _to_document(item: IndexedItem) -> VectorDocument:
        metadata: dict[str, Any] = dict(item.extra_metadata)
        if item.long_id:
            metadata[LONG_ID_FIELD] = item.long_id
        if item.entity_id:
            metadata[ENTITY_ID_FIELD] = item.entity_id

        return VectorDocument(
            content=item.content or item.long_id or "indexed_content",
            metadata=metadata,
            vector=item.vector or None,
        )

    async def insert_into_collection(self, name: str, items: list[IndexedItem]) -> list[str]:
        """Upload items in one batch and record their document ids.

        The batch succeeds or fails as a whole; the mapping table is only
        updated after a successful upload.
        """
        if not items:
            return []

        collection_id = await self.resolve_collection_id(name)
        documents = [self._to_document(item) for item in items]

        try:
            document_ids = await self._client.upload_documents(collection_id, documents)
        except QuantCloudError as exc:
            logger.error("Failed to insert documents: %s", exc)
            raise

        pairs = {
            item.long_id: document_id
            for item, document_id in zip(items, document_ids)
            if item.long_id and document_id
        }
        if pairs:
            async with self._lock_for(name):
                mapping = await self._load_mapping(name)
                mapping.update(pairs)
                await self._state.set(self._mapping_key(name), mapping)

        logger.debug("Inserted %d document(s) into collection %s", len(documents), name)
        return document_ids

    async def delete_from_collection(self, name: str, long_ids: list[str]) -> None:
        """Delete the documents uploaded under the given host ids.

        Remote failures are logged, not raised, and leave the mapping table
        untouched; the ids are dropped from it only after a successful delete.
        """
        if not long_ids:
            return

        try:
            collection_id = await self.resolve_collection_id(name)
            deleted = await self._client.delete_documents_by_metadata(
                collection_id, LONG_ID_FIELD, list(long_ids)
            )
        except QuantCloudError as exc:
            logger.error(
                "Failed to delete documents from %s (%s): %s",
                name,
                ", ".join(long_ids),
                exc,
            )
            return

        logger.info("Deleted %d document(s) from collection %s", deleted, name)
        async with self._lock_for(name):
            mapping = await self._load_mapping(name)
            for long_id in long_ids:
                mapping.pop(long_id, None)
            await self._state.set(self._mapping_key(name), mapping)

    async def purge(self, name: str) -> int:
        """Delete every document in the collection and clear its mapping table."""
        collection_id = await self.resolve_collection_id(name)
        deleted = await self._client.purge_documents(collection_id)

        async with self._lock_for(name):
            await self._state.delete(self._mapping_key(name))

        logger.info("Purged %d document(s) from collection %s", deleted, name)
        return deleted

    # ── Search ─────────────────────────────────────────────────────

    @staticmethod
    def _to_result(match: VectorSearchMatch) -> IndexSearchResult:
        return IndexSearchResult(
            id=match.metadata.get(LONG_ID_FIELD) or match.document_id,
            entity_id=match.metadata.get(ENTITY_ID_FIELD),
            score=match.score,
        )

    async def vector_search(
        self,
        name: str,
        vector: list[float],
        limit: int = DEFAULT_SEARCH_LIMIT,
        threshold: float = 0.0,
    ) -> list[IndexSearchResult]:
        """Similarity search with a precomputed vector; errors yield no results."""
        collection_id = await self.resolve_collection_id(name)
        if not vector:
            return []

        try:
            matches = await self._client.query_by_vector(
                collection_id, vector, limit=limit, threshold=threshold
            )
        except QuantCloudError as exc:
            logger.error("Vector search failed: %s", exc)
            return []
        return [self._to_result(m) for m in matches]

    async def text_search(
        self,
        name: str,
        query: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
        threshold: float = 0.7,
    ) -> list[IndexSearchResult]:
        """Semantic search; the server embeds the query text."""
        collection_id = await self.resolve_collection_id(name)
        if not query.strip():
            return []

        try:
            matches = await self._client.query_by_text(
                collection_id, query, limit=limit, threshold=threshold
            )
        except QuantCloudError as exc:
            logger.error("Text search failed: %s", exc)
            return []
        return [self._to_result(m) for m in matches]

    # ── Id mapping ─────────────────────────────────────────────────

    async def get_vdb_ids(self, name: str, long_ids: list[str]) -> list[str]:
        """Translate host ids to document ids; unknown ids are skipped."""
        mapping = await self._load_mapping(name)
        return [mapping[long_id] for long_id in long_ids if long_id in mapping]

    def _mapping_key(self, name: str) -> str:
        return f"{self._settings.state_namespace}.vdb_mapping.{name}"

    def _lock_for(self, name: str):
        return self._locks.hold(self._mapping_key(name))

    async def _load_mapping(self, name: str) -> dict[str, str]:
        mapping = await self._state.get(self._mapping_key(name), {})
        return dict(mapping or {})
