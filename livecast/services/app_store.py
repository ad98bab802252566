"""Record store selection for application services."""

from loguru import logger

from livecast.app_config import get_app_environ_config
from livecast.services.record_store.base import RecordStore
from livecast.services.record_store.memory_store import MemoryRecordStore
from livecast.services.record_store.mongo_store import MongoRecordStore

_record_store: RecordStore | None = None


def get_record_store() -> RecordStore:
    """Get the process-wide record store.

    RECORD_STORE_BACKEND=memory keeps everything in process (demo and tests);
    anything else uses MongoDB through Beanie, which must be initialized at startup.
    """
    global _record_store
    if _record_store is None:
        backend = get_app_environ_config().RECORD_STORE_BACKEND
        if backend == "memory":
            logger.warning("Using in-memory record store; data is not persisted")
            _record_store = MemoryRecordStore()
        else:
            _record_store = MongoRecordStore()
    return _record_store


def uses_mongo_store() -> bool:
    return isinstance(get_record_store(), MongoRecordStore)
