from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import redis

from ..core.context import Context

logger = logging.getLogger(__name__)

PROVIDER_NAME = "redis"
DEFAULT_URL = "redis://localhost:6379/0"


class RedisKeyValueProvider:
    """Load every string key under a prefix from a Redis database.

    The source path is appended to the configured prefix, so ``redis:app:``
    reads ``app:*`` and strips ``app:`` from the returned keys.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        prefix: str = "",
        client: Optional["redis.Redis"] = None,
        socket_timeout: Optional[float] = 10.0,
    ):
        self.name = PROVIDER_NAME
        self.url = url
        self.prefix = prefix
        self.client = client or redis.Redis.from_url(
            url, decode_responses=True, socket_timeout=socket_timeout
        )

    def _prefix_for(self, source: str) -> str:
        return f"{self.prefix}{source}"

    def validate(self, source: str) -> None:
        if any(ch in source for ch in "*?[]"):
            raise ValueError(f"source must be a plain key prefix, got pattern: {source}")

    def load(self, ctx: Context, source: str) -> Dict[str, str]:
        prefix = self._prefix_for(source)
        keys = self.client.keys(f"{prefix}*")
        ctx.raise_if_done()
        kv: Dict[str, str] = {}
        if keys:
            values = self.client.mget(keys)
            for k, v in zip(keys, values):
                # keys can expire between KEYS and MGET
                if v is None:
                    continue
                kv[k[len(prefix):]] = v
        logger.debug("read %d keys under %r from %s", len(kv), prefix, self.url)
        return kv


def create_redis_provider(config: Dict[str, Any]) -> RedisKeyValueProvider:
    url = config.get("url") or DEFAULT_URL
    prefix = config.get("prefix") or ""
    return RedisKeyValueProvider(url=str(url), prefix=str(prefix))
