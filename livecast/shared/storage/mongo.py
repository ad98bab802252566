"""
MongoDB client registry keyed by connection label.

Connection strings come from `MONGO_URL_<LABEL>` keys in the centralized
configuration; `default` falls back to `MONGO_URL_DEFAULT`, then `MONGO_URL`,
then a local server.
"""

import atexit
import threading

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient

from ..config import config


def hide_password(connection_string: str) -> str:
    """Mask the password part of a MongoDB URL for logging."""
    if "://" not in connection_string or "@" not in connection_string:
        return connection_string

    scheme, rest = connection_string.split("://", 1)
    at_index = rest.rfind("@")
    auth_part, host_part = rest[:at_index], rest[at_index + 1 :]
    if ":" not in auth_part:
        return connection_string

    username, password = auth_part.split(":", 1)
    if not username or not password:
        return connection_string
    return f"{scheme}://{username}:***@{host_part}"


class MongoManager:
    """
    Thread-safe singleton that creates and tracks one motor client per label.

    All clients are closed on process exit.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return

        self._clients: dict[str, AsyncIOMotorClient] = {}
        self._connection_strings: dict[str, str] = {}
        self._lock = threading.Lock()

        self._max_pool_size = config.get_mongo_max_pool_size()
        self._server_selection_timeout = config.get_mongo_server_selection_timeout()
        self._connect_timeout = config.get_mongo_connect_timeout()
        self._socket_timeout = config.get_mongo_socket_timeout()
        logger.info(
            "Loaded MongoDB parameters: pool={} server_selection={}ms connect={}ms socket={}ms",
            self._max_pool_size,
            self._server_selection_timeout,
            self._connect_timeout,
            self._socket_timeout,
        )

        self._load_connection_strings()
        atexit.register(self.close_all)

        self._initialized = True

    def _load_connection_strings(self):
        for key, value in config.items():
            if not key.startswith("MONGO_URL_") or not value:
                continue
            label = key[len("MONGO_URL_") :].lower()
            self._connection_strings[label] = value
            logger.info("Loaded MongoDB connection string for label '{}': {}", label, hide_password(value))

        if "default" not in self._connection_strings:
            self._connection_strings["default"] = config.get_mongo_url("default")

        logger.info(
            "Loaded {} MongoDB connection strings: {}",
            len(self._connection_strings),
            list(self._connection_strings.keys()),
        )

    def get_client(self, label: str | None = None) -> AsyncIOMotorClient:
        """
        Get MongoDB client by label, creating it on first use.

        Raises:
            ValueError: If no connection string is configured for the label
        """
        label = label or "default"

        with self._lock:
            if label not in self._clients:
                if label not in self._connection_strings:
                    raise ValueError(f"No MongoDB connection string found for label '{label}'")

                logger.info("Open MongoDB client for label '{}'", label)
                self._clients[label] = AsyncIOMotorClient(
                    self._connection_strings[label],
                    serverSelectionTimeoutMS=self._server_selection_timeout,
                    connectTimeoutMS=self._connect_timeout,
                    socketTimeoutMS=self._socket_timeout,
                    maxPoolSize=self._max_pool_size,
                    tz_aware=True,
                )

            return self._clients[label]

    def close_client(self, label: str):
        with self._lock:
            client = self._clients.pop(label, None)
        if client is not None:
            client.close()
            logger.info("Closed MongoDB client for label '{}'", label)

    def close_all(self):
        with self._lock:
            client_labels = list(self._clients.keys())

        for label in client_labels:
            self.close_client(label)


_mongo_manager = None


def get_mongo_manager() -> MongoManager:
    """Get the global MongoDB manager instance."""
    global _mongo_manager
    if _mongo_manager is None:
        _mongo_manager = MongoManager()
    return _mongo_manager


def get_mongo_client(label: str | None = None) -> AsyncIOMotorClient:
    """Get MongoDB client by label."""
    return get_mongo_manager().get_client(label)
