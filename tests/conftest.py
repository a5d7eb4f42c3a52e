"""Shared fixtures.

Environment overrides are applied before any project module is imported so
that ``config`` picks them up.
"""

import os
import sys
import tempfile
from pathlib import Path

_TEST_DATA_DIR = tempfile.mkdtemp(prefix="safetyhub-tests-")
os.environ["DATA_DIR"] = _TEST_DATA_DIR
os.environ["UPLOAD_DIR"] = str(Path(_TEST_DATA_DIR) / "uploads")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

import mongomock  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.database import create_session_factory, init_db  # noqa: E402
from storage.memory_store import MemoryEntityStore  # noqa: E402
from storage.mongo_store import MongoEntityStore  # noqa: E402
from storage.sql_store import SqlEntityStore  # noqa: E402

STORE_KINDS = ["memory", "sql", "mongo"]


def make_store(kind: str):
    if kind == "memory":
        return MemoryEntityStore()
    if kind == "sql":
        # One shared connection: executor threads all see the same in-memory db
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        init_db(engine)
        return SqlEntityStore(create_session_factory(engine))
    if kind == "mongo":
        store = MongoEntityStore(mongomock.MongoClient().db)
        store.ensure_indexes()
        return store
    raise ValueError(kind)


@pytest.fixture(params=STORE_KINDS)
def store(request):
    """An empty entity store, once per backing."""
    return make_store(request.param)


@pytest.fixture
def memory_store():
    return MemoryEntityStore()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"
