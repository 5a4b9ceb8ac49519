from typing import Final
from redis.asyncio import Redis
from config.cache import get_redis
from model.usage import UsageRecord
from repository.namespaces import USAGE
import logging

KEY_PREFIX: Final[str] = USAGE

logger = logging.getLogger(__name__)


class UsageRepository:
    """
    Redis-backed per-user usage and gamification counters.
    Unknown users start as a fresh free-tier record.
    """

    def __init__(self, ttl_seconds: int | None = None) -> None:
        # Usage counters outlive batches; no TTL unless one is given.
        self._ttl = int(ttl_seconds) if ttl_seconds else None

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(user_id: str) -> str:
        return f"{KEY_PREFIX}:{user_id}"

    async def get(self, user_id: str) -> UsageRecord:
        r = await self._client()
        raw = await r.get(self._key(user_id))
        if raw is None:
            return UsageRecord(userId=user_id)
        try:
            return UsageRecord.model_validate_json(raw)
        except ValueError:
            logger.error("usage.decode.error user=%s", user_id)
            return UsageRecord(userId=user_id)

    async def put(self, record: UsageRecord) -> None:
        r = await self._client()
        await r.set(self._key(record.userId), record.model_dump_json(), ex=self._ttl)


class InMemoryUsageRepository:
    """Process-local variant used with BATCH_STORE=memory and in tests."""

    def __init__(self) -> None:
        self._data: dict[str, UsageRecord] = {}

    async def get(self, user_id: str) -> UsageRecord:
        rec = self._data.get(user_id)
        return rec.model_copy(deep=True) if rec else UsageRecord(userId=user_id)

    async def put(self, record: UsageRecord) -> None:
        self._data[record.userId] = record.model_copy(deep=True)
