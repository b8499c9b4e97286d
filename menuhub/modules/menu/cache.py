"""Per-user visible menu cache backed by Redis."""

import json
import logging
import uuid
from collections.abc import Awaitable, Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from menuhub.config import settings
from menuhub.modules.menu.constants import MENU_CACHE_PREFIX
from menuhub.modules.menu.schemas import CatalogItem

logger = logging.getLogger(__name__)


class MenuCache:
    """Redis cache of the live menu each customer sees.

    Keys are ``menu:user:{user_id}``. Entries are dropped wholesale after
    every publish, since any live change can alter any customer's menu.
    Redis outages degrade to uncached reads.
    """

    def __init__(self, redis_client: redis.Redis | None = None, ttl: int | None = None) -> None:
        self._redis = redis_client
        self._ttl = ttl if ttl is not None else settings.menu_cache_ttl

    async def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(settings.redis_url, decode_responses=True)
        return self._redis

    def _make_key(self, user_id: uuid.UUID) -> str:
        return f"{MENU_CACHE_PREFIX}:{user_id}"

    async def get_menu(self, user_id: uuid.UUID) -> list[CatalogItem] | None:
        client = await self._get_redis()
        raw = await client.get(self._make_key(user_id))
        if raw is None:
            return None
        return [CatalogItem.model_validate(entry) for entry in json.loads(raw)]

    async def set_menu(self, user_id: uuid.UUID, items: list[CatalogItem]) -> None:
        client = await self._get_redis()
        payload = json.dumps([item.model_dump(mode="json") for item in items])
        await client.set(self._make_key(user_id), payload, ex=self._ttl)

    async def get_or_set(
        self,
        user_id: uuid.UUID,
        factory: Callable[[], Awaitable[list[CatalogItem]]],
    ) -> list[CatalogItem]:
        """Return the cached menu for *user_id*, computing it via *factory* on a miss."""
        try:
            cached = await self.get_menu(user_id)
        except RedisError as exc:
            logger.warning("Menu cache read failed for user %s: %s", user_id, exc)
            return await factory()
        if cached is not None:
            return cached

        items = await factory()
        try:
            await self.set_menu(user_id, items)
        except RedisError as exc:
            logger.warning("Menu cache write failed for user %s: %s", user_id, exc)
        return items

    async def invalidate_all(self) -> int:
        """Delete every cached user menu. Returns the number of keys deleted."""
        try:
            client = await self._get_redis()
            keys = [key async for key in client.scan_iter(match=f"{MENU_CACHE_PREFIX}:*", count=100)]
            deleted = await client.delete(*keys) if keys else 0
        except RedisError as exc:
            logger.warning("Menu cache invalidation failed: %s", exc)
            return 0
        logger.info("Invalidated %d cached user menus", deleted)
        return deleted
