"""
MongoDB connection management for the library API.
Opens the async client once at startup and closes it on shutdown.
"""

from typing import Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure

logger = structlog.get_logger(__name__)


class MongoDBManager:
    """
    Async MongoDB connection manager.
    Owns the process-wide client shared by every request.
    """

    def __init__(
        self,
        connection_url: str,
        database_name: str,
        server_selection_timeout_ms: int = 5000,
    ):
        """
        Initialize MongoDB manager.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            server_selection_timeout_ms: How long the driver waits for a reachable server
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """
        Establish connection to MongoDB.

        The client and database handles are set before the ping, so a failed
        ping leaves a usable (lazily reconnecting) handle behind.
        """
        self.client = AsyncIOMotorClient(
            self.connection_url,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms,
        )
        self.database = self.client[self.database_name]

        try:
            await self.client.admin.command("ping")
            logger.info("Connected to MongoDB", database=self.database_name)
        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", database=self.database_name, error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")
