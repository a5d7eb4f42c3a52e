"""Dependency injection module for FastAPI.

The entity store is built once at startup by ``build_entity_store`` and kept
on ``app.state``; routes receive it through ``Depends`` rather than a module
level singleton.
"""

import logging
from typing import Annotated, Optional, Tuple

from fastapi import Depends, Request

from config import STORAGE_BACKEND, SUPPORTED_STORAGE_BACKENDS
from core.database import create_db_engine, create_session_factory, init_db
from core.exceptions import ConfigurationError
from core.mongodb import MongoConnection
from storage.base import EntityStore
from storage.hybrid_store import HybridEntityStore
from storage.memory_store import MemoryEntityStore
from storage.mongo_store import MongoEntityStore
from storage.sql_store import SqlEntityStore
from utils.metrics import MetricsAggregator

logger = logging.getLogger(__name__)


def _connect_mongo() -> Tuple[MongoConnection, MongoEntityStore]:
    connection = MongoConnection()
    connection.connect()
    # Indexes are created by the store on its first successful operation
    return connection, MongoEntityStore(connection.database)


def build_entity_store(
    backend: str = STORAGE_BACKEND,
) -> Tuple[EntityStore, Optional[MongoConnection]]:
    """Create the entity store selected by configuration.

    Args:
        backend: One of "hybrid", "memory", "sql" or "mongo".

    Returns:
        The store and, for MongoDB-backed stores, the connection to close on
        shutdown.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    if backend not in SUPPORTED_STORAGE_BACKENDS:
        raise ConfigurationError(
            f"Unknown STORAGE_BACKEND '{backend}'. "
            f"Expected one of: {', '.join(SUPPORTED_STORAGE_BACKENDS)}"
        )
    logger.info("Using %s entity store", backend)

    if backend == "memory":
        return MemoryEntityStore(), None

    if backend == "sql":
        engine = create_db_engine()
        init_db(engine)
        return SqlEntityStore(create_session_factory(engine)), None

    connection, mongo_store = _connect_mongo()
    if backend == "mongo":
        return mongo_store, connection

    hybrid = HybridEntityStore(
        primary=mongo_store,
        fallback=MemoryEntityStore(),
        is_available=connection.is_connected,
    )
    return hybrid, connection


def get_entity_store(request: Request) -> EntityStore:
    """Get the application's entity store."""
    return request.app.state.entity_store


def get_metrics_aggregator(
    store: EntityStore = Depends(get_entity_store),
) -> MetricsAggregator:
    """Get a MetricsAggregator over the application's entity store."""
    return MetricsAggregator(store)


# Type aliases for dependency injection
EntityStoreDep = Annotated[EntityStore, Depends(get_entity_store)]
MetricsAggregatorDep = Annotated[MetricsAggregator, Depends(get_metrics_aggregator)]
