"""
Local key-value storage for cached identity/store provider artifacts.

Plays the role a browser's local storage plays for the provider SDKs: the
identity adapter persists its session record here, and the connection
resetter clears every provider key when it escalates.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

import orjson
from redis.exceptions import RedisError

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_SUBSTRINGS = ("firebase", "firestore")


class RedisArtifactStore:
    """orjson-encoded values in Redis, with substring-based bulk clearing."""

    def __init__(self, redis_client: "Redis", *, key_substrings: Iterable[str] = DEFAULT_ARTIFACT_SUBSTRINGS):
        self.redis_client = redis_client
        self.key_substrings = tuple(key_substrings)

    @classmethod
    def from_url(cls, redis_url: str, *, key_substrings: Iterable[str] = DEFAULT_ARTIFACT_SUBSTRINGS) -> "RedisArtifactStore":
        from redis.asyncio import Redis

        return cls(Redis.from_url(redis_url, decode_responses=True), key_substrings=key_substrings)

    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.redis_client.get(key)
        if raw is None:
            return None
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning("Discarding undecodable artifact %s", key)
            await self.redis_client.delete(key)
            return None

    async def set_json(self, key: str, value: Any) -> None:
        await self.redis_client.set(key, orjson.dumps(value).decode())

    async def delete(self, key: str) -> int:
        return int(await self.redis_client.delete(key))

    async def clear_matching(self, substrings: Optional[Iterable[str]] = None) -> int:
        """Delete every key containing one of ``substrings``; returns the number deleted."""
        patterns = tuple(substrings) if substrings is not None else self.key_substrings
        keys: set[str] = set()
        for substring in patterns:
            async for key in self.redis_client.scan_iter(match=f"*{substring}*"):
                keys.add(key.decode() if isinstance(key, bytes) else key)

        if not keys:
            logger.debug("No cached provider artifacts to clear")
            return 0

        deleted = int(await self.redis_client.delete(*sorted(keys)))
        logger.info("Cleared %s cached provider artifact(s)", deleted)
        return deleted

    async def close(self) -> None:
        try:
            await self.redis_client.aclose()
        except (RedisError, OSError) as exc:
            logger.warning("Error closing artifact store: %s", exc)


__all__ = ["DEFAULT_ARTIFACT_SUBSTRINGS", "RedisArtifactStore"]
