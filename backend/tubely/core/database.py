"""
Motor client for the videos collection, with startup retry and a process-wide
singleton managed by the application lifespan.
"""

import asyncio
import logging

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from tubely.config import Settings


logger = logging.getLogger(__name__)

VIDEOS_COLLECTION = "videos"

# Sleep after each failed attempt; the last attempt is not followed by a sleep
CONNECT_BACKOFF_SECONDS: tuple[float, ...] = (1.0, 2.0, 0.0)


class DatabaseClient:
    """
    Owns the Motor client.

    Example usage:
        ```python
        db_client = DatabaseClient(settings)
        await db_client.connect()
        video = await db_client.get_videos_collection().find_one({"_id": video_id})
        await db_client.close()
        ```
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._db_name = settings.mongodb_db_name
        self._client: AsyncIOMotorClient | None = None
        self._database: AsyncIOMotorDatabase | None = None

    async def connect(self) -> bool:
        """
        Open the Motor client and confirm the server answers a ping.

        Attempts are spaced by CONNECT_BACKOFF_SECONDS. Returns False once
        every attempt has failed; the caller decides whether that is fatal.
        """
        for attempt, backoff in enumerate(CONNECT_BACKOFF_SECONDS, start=1):
            logger.info(
                "Connecting to MongoDB database %s (attempt %d/%d)",
                self._db_name,
                attempt,
                len(CONNECT_BACKOFF_SECONDS),
            )
            self._client = AsyncIOMotorClient(
                self._settings.mongodb_uri,
                minPoolSize=self._settings.mongodb_min_pool_size,
                maxPoolSize=self._settings.mongodb_max_pool_size,
                serverSelectionTimeoutMS=5000,
                uuidRepresentation="standard",
            )
            self._database = self._client[self._db_name]
            try:
                await self._client.admin.command("ping")
            except (ServerSelectionTimeoutError, ConnectionFailure):
                logger.exception("MongoDB did not answer ping (attempt %d)", attempt)
                await self.close()
                if backoff:
                    await asyncio.sleep(backoff)
                continue

            logger.info("Connected to MongoDB database %s", self._db_name)
            return True

        logger.error("Giving up on MongoDB after %d attempts", len(CONNECT_BACKOFF_SECONDS))
        return False

    async def close(self) -> None:
        """Close the Motor client; a no-op when not connected."""
        client, self._client, self._database = self._client, None, None
        if client is not None:
            client.close()
            logger.info("Closed MongoDB client for %s", self._db_name)

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except ConnectionFailure:
            logger.warning("MongoDB ping failed for %s", self._db_name)
            return False
        return True

    def get_videos_collection(self) -> AsyncIOMotorCollection:
        """Raises RuntimeError until ``connect`` has succeeded."""
        if self._database is None:
            raise RuntimeError(f"No MongoDB connection for database '{self._db_name}'")
        return self._database[VIDEOS_COLLECTION]

    async def create_indexes(self) -> None:
        """Owner indexes used by video listings."""
        videos = self.get_videos_collection()
        await videos.create_index("user_id")
        await videos.create_index([("user_id", 1), ("created_at", -1)])
        logger.info("Ensured owner indexes on %s", VIDEOS_COLLECTION)


class _DatabaseClientContainer:
    """Holds the lifespan-managed client."""

    client: DatabaseClient | None = None


_container = _DatabaseClientContainer()


async def init_db(settings: Settings) -> DatabaseClient:
    """
    Connect, ensure indexes and register the process-wide client.

    Raises:
        RuntimeError: MongoDB stayed unreachable through every retry.
    """
    if _container.client is not None:
        return _container.client

    client = DatabaseClient(settings)
    if not await client.connect():
        raise RuntimeError(f"MongoDB unreachable at startup (database '{settings.mongodb_db_name}')")

    await client.create_indexes()
    _container.client = client
    return client


async def close_db() -> None:
    client, _container.client = _container.client, None
    if client is not None:
        await client.close()


def get_db_client() -> DatabaseClient:
    """Return the client registered by ``init_db``; RuntimeError before startup."""
    if _container.client is None:
        raise RuntimeError("init_db() has not run; the application lifespan owns the database client")
    return _container.client
