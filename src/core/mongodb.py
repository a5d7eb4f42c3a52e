"""MongoDB connection management.

``MongoConnection`` owns the pymongo client and a thread-safe connectivity
flag. The flag follows the driver's server heartbeats, so a dropped or restored
connection is visible to ``is_connected()`` without restarting the process.
"""

import logging
import threading
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from pymongo.monitoring import (
    ServerHeartbeatFailedEvent,
    ServerHeartbeatListener,
    ServerHeartbeatStartedEvent,
    ServerHeartbeatSucceededEvent,
)

from config import MONGODB_DATABASE, MONGODB_TIMEOUT_MS, MONGODB_URI

logger = logging.getLogger(__name__)


class _HeartbeatListener(ServerHeartbeatListener):
    """Mirrors server heartbeat results onto a connectivity flag."""

    def __init__(self, connected: threading.Event):
        self._connected = connected

    def started(self, event: ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: ServerHeartbeatSucceededEvent) -> None:
        if not self._connected.is_set():
            logger.info("MongoDB reachable at %s:%s", *event.connection_id)
        self._connected.set()

    def failed(self, event: ServerHeartbeatFailedEvent) -> None:
        if self._connected.is_set():
            logger.warning("MongoDB heartbeat failed: %s", event.reply)
        self._connected.clear()


class MongoConnection:
    """Client wrapper with an explicit, thread-safe connectivity flag."""

    def __init__(
        self,
        uri: str = MONGODB_URI,
        database_name: str = MONGODB_DATABASE,
        timeout_ms: int = MONGODB_TIMEOUT_MS,
        client: Optional[MongoClient] = None,
    ):
        """Initialize MongoConnection.

        Args:
            uri: MongoDB connection string.
            database_name: Database holding one collection per entity kind.
            timeout_ms: Server selection timeout.
            client: Pre-built client to use instead of creating one; its
                heartbeats must be fed to ``listener`` by the caller.
        """
        self.uri = uri
        self.database_name = database_name
        self.timeout_ms = timeout_ms
        self._connected = threading.Event()
        self.listener = _HeartbeatListener(self._connected)
        self._client: Optional[MongoClient] = client

    def connect(self) -> bool:
        """Connect and ping the server.

        A failure is logged and leaves the connection marked unavailable so
        callers can fall back; it never raises. The client keeps monitoring the
        server, and a later heartbeat success flips the flag back on.

        Returns:
            True if the initial ping succeeded.
        """
        if self._client is None:
            self._client = MongoClient(
                self.uri,
                serverSelectionTimeoutMS=self.timeout_ms,
                socketTimeoutMS=45000,
                maxPoolSize=10,
                event_listeners=[self.listener],
            )
        try:
            logger.info("Connecting to MongoDB...")
            self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning(
                "Could not connect to MongoDB, falling back to memory storage: %s", e
            )
            self._connected.clear()
            return False
        self._connected.set()
        logger.info("Successfully connected to MongoDB")
        return True

    def disconnect(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        self._connected.clear()
        logger.info("Disconnected from MongoDB")

    def is_connected(self) -> bool:
        return self._client is not None and self._connected.is_set()

    @property
    def database(self) -> Database:
        if self._client is None:
            raise RuntimeError("MongoConnection.connect() has not been called")
        return self._client[self.database_name]
