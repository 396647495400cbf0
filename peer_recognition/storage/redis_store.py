"""
Redis Document Store (Production Mode)

One Redis key holds the serialized document. With FEATURE_DOCUMENT_CAS on,
writes run inside WATCH/MULTI so a concurrent writer aborts the transaction.
"""
import json
import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError, WatchError

from peer_recognition.config.feature_flags import FeatureFlags
from peer_recognition.errors import ConflictError, StorageError
from peer_recognition.models.document import Document
from peer_recognition.storage.base import DocumentStore

logger = logging.getLogger(__name__)


class RedisDocumentStore(DocumentStore):

    name = "redis"

    def __init__(self, redis_url: str = "redis://localhost:6379/0", key: str = "peer-recognition-db"):
        self.redis_url = redis_url
        self.key = key
        self._redis: Optional[aioredis.Redis] = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self._redis is not None:
            return
        self._redis = aioredis.from_url(
            self.redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
            retry_on_timeout=True
        )

    async def close(self) -> None:
        """Close Redis connections."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    @staticmethod
    def _stored_version(raw: Optional[str]) -> int:
        if not raw:
            return 0
        try:
            return int(json.loads(raw).get("version", 0))
        except (ValueError, AttributeError):
            return 0

    async def read(self) -> Document:
        await self.connect()
        try:
            raw = await self._redis.get(self.key)
        except RedisError as e:
            logger.error(f"Failed to read from Redis: {e}")
            raise StorageError("Failed to read stored data") from e
        return self._decode(raw, f"redis key {self.key}")

    async def write(self, document: Document) -> None:
        await self.connect()
        next_version = document.version + 1
        payload = document.model_copy(update={"version": next_version}).to_json()
        try:
            if FeatureFlags.FEATURE_DOCUMENT_CAS:
                async with self._redis.pipeline(transaction=True) as pipe:
                    await pipe.watch(self.key)
                    self._check_version(self._stored_version(await pipe.get(self.key)), document)
                    pipe.multi()
                    pipe.set(self.key, payload)
                    await pipe.execute()
            else:
                await self._redis.set(self.key, payload)
        except WatchError as e:
            logger.warning(f"Concurrent write detected on redis key {self.key}")
            raise ConflictError("The data changed while your request was being processed. Please retry.") from e
        except RedisError as e:
            logger.error(f"Failed to write to Redis: {e}")
            raise StorageError("Failed to write stored data") from e
        document.version = next_version
