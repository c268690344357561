from __future__ import annotations

import json
from typing import Any

from redis.exceptions import RedisError

from landed_cost.core.logging import get_logger
from landed_cost.core.redis import redis_client

logger = get_logger(__name__)


async def redis_get_json(key: str) -> dict[str, Any] | None:
    try:
        value = await redis_client.client.get(key)
    except RedisError as exc:
        logger.warning("redis_get_failed", key=key, error=str(exc))
        return None
    if not value:
        return None
    return json.loads(value)


async def redis_set_json(key: str, payload: dict[str, Any], ttl_seconds: int | None = None) -> None:
    try:
        await redis_client.client.set(key, json.dumps(payload), ex=ttl_seconds)
    except RedisError as exc:
        logger.warning("redis_set_failed", key=key, error=str(exc))
