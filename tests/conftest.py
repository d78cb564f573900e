import os
import tempfile

# Point the global settings at a throwaway SQLite file before anything
# imports src.config.
_TEST_DIR = tempfile.mkdtemp(prefix="threadline-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/app.db"
os.environ["APP_CREATE_TABLES"] = "true"
os.environ["APP_GRAPHIQL"] = "true"

import pytest

from api.graphql import build_context
from src.db.session import Database


@pytest.fixture
async def database(tmp_path):
    """A fresh SQLite database with all tables, per test."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'threadline.db'}")
    await database.initialize()
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture
async def session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def context(session):
    """GraphQL context bound to the test session."""
    return build_context(session)
