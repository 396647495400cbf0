"""
Document store factory

The storage backend is chosen once at startup from settings and injected
into services; data-access code never branches on the environment.
"""
import logging

from peer_recognition.config.settings import Settings
from peer_recognition.storage.base import DocumentStore
from peer_recognition.storage.file_store import JsonFileDocumentStore
from peer_recognition.storage.memory_store import InMemoryDocumentStore
from peer_recognition.storage.redis_store import RedisDocumentStore
from peer_recognition.storage.sql_store import SqlDocumentStore

logger = logging.getLogger(__name__)


def create_document_store(settings: Settings) -> DocumentStore:
    """
    Create the configured document store.

    Args:
        settings: Loaded settings (storage_backend selects the adapter)
    Returns:
        Unconnected DocumentStore; call connect() before use
    """
    backend = settings.storage_backend
    if backend == "file":
        store = JsonFileDocumentStore(settings.data_file)
    elif backend == "redis":
        store = RedisDocumentStore(settings.redis_url, settings.document_key)
    elif backend == "sql":
        store = SqlDocumentStore(settings.database_url, settings.document_key)
    elif backend == "memory":
        store = InMemoryDocumentStore()
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info(f"✓ Using {store.name} document store")
    return store
