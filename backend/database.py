from __future__ import annotations
import logging
from typing import Any, Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "furniture_store"
    DATABASE_TIMEOUT_MS: int = 5000
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000


settings = Settings()

# Collection names
PRODUCTS = "products"
CARTS = "carts"


class Database:
    """Handle on the Mongo connection shared by every request.

    The client is created lazily and pooled by Motor. Pass ``client`` to reuse
    an existing one (tests hand in an in-memory client).
    """

    def __init__(self, url: Optional[str] = None, name: Optional[str] = None,
                 timeout_ms: Optional[int] = None, client: Any = None):
        self.url = url or settings.DATABASE_URL
        self.name = name or settings.DATABASE_NAME
        self.timeout_ms = timeout_ms or settings.DATABASE_TIMEOUT_MS
        self._client = client
        self._db: Optional[AsyncIOMotorDatabase] = None

    @property
    def client(self) -> AsyncIOMotorClient:
        if self._client is None:
            logger.info("Connecting to MongoDB database %s", self.name)
            self._client = AsyncIOMotorClient(self.url, serverSelectionTimeoutMS=self.timeout_ms)
        return self._client

    @property
    def db(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            self._db = self.client[self.name]
        return self._db

    def collection(self, name: str):
        return self.db[name]

    async def is_ready(self) -> bool:
        """Single readiness check: can the server answer a ping?"""
        try:
            await self.db.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", e)
            return False
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None
