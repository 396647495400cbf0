"""
In-Memory Document Store (Development Mode)

Process-local storage. Documents are deep-copied on the way in and out so
callers can never mutate the stored state without calling write().
"""
import asyncio
from typing import Optional

from peer_recognition.models.document import Document
from peer_recognition.storage.base import DocumentStore


class InMemoryDocumentStore(DocumentStore):

    name = "memory"

    def __init__(self, initial: Optional[Document] = None):
        self._document: Optional[Document] = initial.model_copy(deep=True) if initial else None
        self._lock = asyncio.Lock()

    async def read(self) -> Document:
        if self._document is None:
            return Document()
        return self._document.model_copy(deep=True)

    async def write(self, document: Document) -> None:
        async with self._lock:
            stored_version = self._document.version if self._document else 0
            self._check_version(stored_version, document)
            document.version += 1
            self._document = document.model_copy(deep=True)
