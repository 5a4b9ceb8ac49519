import asyncio
from datetime import datetime
from typing import Dict, Final, List, Optional, Protocol, Sequence, Tuple
from uuid import uuid4
from redis.asyncio import Redis
from config.cache import get_redis
from config.settings import settings
from model.batch import Batch, BatchItem
from repository.namespaces import BATCHES, OWNER_BATCHES
from util.timing import Clock, SystemClock
import logging

KEY_PREFIX: Final[str] = BATCHES

logger = logging.getLogger(__name__)


def new_batch(
    owner_id: str,
    texts: Sequence[str],
    filenames: Optional[Sequence[str]] = None,
    *,
    now: datetime,
    max_chars: int = settings.MAX_BATCH_ITEM_CHARS,
) -> Batch:
    batch_id = uuid4().hex
    names = list(filenames or [])
    items = [
        BatchItem(
            id=f"{batch_id}-{i}",
            text=text[:max_chars],
            filename=(names[i] if i < len(names) and names[i] else f"Document {i + 1}"),
        )
        for i, text in enumerate(texts)
    ]
    return Batch(
        id=batch_id,
        ownerId=str(owner_id),
        status="pending",
        createdAt=now,
        totalItems=len(items),
        items=items,
    )


class BatchRepository(Protocol):
    """
    Snapshot store for batches. `put` replaces the whole record, so readers only
    ever observe states that were written in full.
    """

    async def put(self, batch: Batch) -> None: ...

    async def get(self, batch_id: str) -> Optional[Batch]: ...

    async def list_for_owner(self, owner_id: str) -> List[Batch]: ...

    async def delete(self, batch_id: str) -> bool: ...


class RedisBatchRepository:
    """
    Flow:
    - One JSON snapshot per batch (SET with TTL).
    - Owner index as a Redis set; stale ids are pruned on listing.
    - TTL refreshed on every write.
    """

    def __init__(self, ttl_seconds: int = settings.PERSISTENCE_TTL_SECONDS) -> None:
        self._ttl = int(ttl_seconds)

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(batch_id: str) -> str:
        return f"{KEY_PREFIX}:{batch_id}"

    @staticmethod
    def _owner_key(owner_id: str) -> str:
        return f"{OWNER_BATCHES}:{owner_id}"

    async def put(self, batch: Batch) -> None:
        r = await self._client()
        payload = batch.model_dump_json()
        async with r.pipeline(transaction=True) as pipe:
            pipe.set(self._key(batch.id), payload, ex=self._ttl)
            pipe.sadd(self._owner_key(batch.ownerId), batch.id)
            pipe.expire(self._owner_key(batch.ownerId), self._ttl)
            await pipe.execute()

    async def get(self, batch_id: str) -> Optional[Batch]:
        if not batch_id:
            return None
        r = await self._client()
        raw = await r.get(self._key(batch_id))
        if raw is None:
            return None
        try:
            return Batch.model_validate_json(raw)
        except ValueError:
            logger.error("batch.decode.error batch=%s", batch_id)
            return None

    async def list_for_owner(self, owner_id: str) -> List[Batch]:
        r = await self._client()
        ids = await r.smembers(self._owner_key(owner_id))
        out: List[Batch] = []
        stale: List[str] = []
        for batch_id in ids or []:
            b = await self.get(batch_id)
            if b is None:
                stale.append(batch_id)
            else:
                out.append(b)
        if stale:
            await r.srem(self._owner_key(owner_id), *stale)
        return sorted(out, key=lambda b: b.createdAt, reverse=True)

    async def delete(self, batch_id: str) -> bool:
        b = await self.get(batch_id)
        if b is None:
            return False
        r = await self._client()
        await r.srem(self._owner_key(b.ownerId), batch_id)
        return bool(await r.delete(self._key(batch_id)))


class InMemoryBatchRepository:
    """
    Process-local store with TTL eviction. Snapshots are deep-copied on the way
    in and out, so callers never share mutable state with the store.
    """

    def __init__(
        self,
        ttl_seconds: int = settings.PERSISTENCE_TTL_SECONDS,
        clock: Optional[Clock] = None,
    ) -> None:
        self._ttl = float(ttl_seconds)
        self._clock = clock or SystemClock()
        self._data: Dict[str, Tuple[float, Batch]] = {}
        self._lock = asyncio.Lock()

    def _evict_expired(self) -> None:
        now = self._clock.monotonic()
        expired = [k for k, (exp, _) in self._data.items() if exp <= now]
        for k in expired:
            del self._data[k]
        if expired:
            logger.info("batch.evict count=%d", len(expired))

    async def put(self, batch: Batch) -> None:
        async with self._lock:
            self._evict_expired()
            expires = self._clock.monotonic() + self._ttl
            self._data[batch.id] = (expires, batch.model_copy(deep=True))

    async def get(self, batch_id: str) -> Optional[Batch]:
        async with self._lock:
            self._evict_expired()
            entry = self._data.get(batch_id)
            return entry[1].model_copy(deep=True) if entry else None

    async def list_for_owner(self, owner_id: str) -> List[Batch]:
        async with self._lock:
            self._evict_expired()
            out = [b.model_copy(deep=True) for _, b in self._data.values() if b.ownerId == owner_id]
        return sorted(out, key=lambda b: b.createdAt, reverse=True)

    async def delete(self, batch_id: str) -> bool:
        async with self._lock:
            return self._data.pop(batch_id, None) is not None

    def __len__(self) -> int:
        return len(self._data)
