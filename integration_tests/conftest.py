"""Pytest configuration for integration tests.

Integration tests run the Mongo record store against a real MongoDB and are
skipped unless MONGO_URL_LIVECAST_PRIMARY is set.
"""

import os
import warnings
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

# Ignore warnings from beanie internals
warnings.filterwarnings("ignore", category=DeprecationWarning, module="beanie.*")

from livecast.schemas import ContentDocument, RecordingDocument, SessionDocument, init_beanie_odm  # noqa: E402
from livecast.services.record_store.mongo_store import MongoRecordStore  # noqa: E402


@pytest.fixture(scope="session")
def mongo_url() -> str:
    url = os.environ.get("MONGO_URL_LIVECAST_PRIMARY")
    if not url:
        pytest.skip("MONGO_URL_LIVECAST_PRIMARY environment variable not set")
    return url


@pytest.fixture(scope="session")
def test_db_name() -> str:
    return "livecast_test_db"


@pytest_asyncio.fixture(scope="function")
async def beanie_db(mongo_url: str, test_db_name: str) -> AsyncGenerator[AsyncIOMotorDatabase]:
    """Initialize Beanie against a scratch database; collections are emptied per test."""
    client: AsyncIOMotorClient = AsyncIOMotorClient(mongo_url, tz_aware=True)
    db = client[test_db_name]
    await init_beanie_odm(db)

    for document in (SessionDocument, RecordingDocument, ContentDocument):
        await document.get_motor_collection().delete_many({})

    yield db

    client.close()


@pytest.fixture
def mongo_store(beanie_db) -> MongoRecordStore:
    return MongoRecordStore()
