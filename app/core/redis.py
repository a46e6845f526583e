import json
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings
from app.schemas.slot import Slot

logger = logging.getLogger("careschedule.cache")


class SlotCache:
    """
    Slot listings cached per (clinician, date, duration).

    The cache is best-effort: a Redis failure is logged and treated as a miss
    so slot queries keep working when Redis is unavailable.
    """

    def __init__(self, url: Optional[str] = None):
        self.redis = redis.from_url(url or settings.REDIS_URL, encoding="utf-8", decode_responses=True)

    @staticmethod
    def key(clinician_id: UUID, on_date: date, duration_minutes: int) -> str:
        return f"slots:{clinician_id}:{on_date.isoformat()}:{duration_minutes}"

    async def get_slots(self, clinician_id: UUID, on_date: date, duration_minutes: int) -> Optional[List[Slot]]:
        try:
            raw = await self.redis.get(self.key(clinician_id, on_date, duration_minutes))
        except RedisError as exc:
            logger.warning(f"Slot cache read failed: {exc}")
            return None
        if raw is None:
            return None
        return [Slot.model_validate(item) for item in json.loads(raw)]

    async def set_slots(
        self,
        clinician_id: UUID,
        on_date: date,
        duration_minutes: int,
        slots: List[Slot],
        ttl_seconds: int,
    ):
        payload = json.dumps([slot.model_dump() for slot in slots])
        try:
            await self.redis.set(self.key(clinician_id, on_date, duration_minutes), payload, ex=ttl_seconds)
        except RedisError as exc:
            logger.warning(f"Slot cache write failed: {exc}")

    async def invalidate(self, clinician_id: UUID):
        try:
            async for key in self.redis.scan_iter(match=f"slots:{clinician_id}:*"):
                await self.redis.delete(key)
        except RedisError as exc:
            logger.warning(f"Slot cache invalidation failed for {clinician_id}: {exc}")

    async def close(self):
        await self.redis.close()


slot_cache = SlotCache()


def get_slot_cache() -> Optional[SlotCache]:
    if not settings.SLOT_CACHE_ENABLED:
        return None
    return slot_cache
