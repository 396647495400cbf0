"""
Document Store Interface

Abstract base class for persistence adapters.
Whole-document replace semantics: read() returns a private copy, write()
replaces the stored document atomically. No partial writes.
"""
import abc
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from peer_recognition.config.feature_flags import FeatureFlags
from peer_recognition.errors import ConflictError, StorageError
from peer_recognition.models.document import Document

logger = logging.getLogger(__name__)


class DocumentStore(abc.ABC):
    """
    Abstract base class for document stores.

    Guarantees:
    - read() never hands out a reference to shared state
    - write() bumps document.version by one
    - with FEATURE_DOCUMENT_CAS on, write() fails with ConflictError when the
      stored version moved since the document was read
    - driver failures surface as StorageError
    """

    name: str = "abstract"

    async def connect(self) -> None:
        """Open connections. No-op for local stores."""

    async def close(self) -> None:
        """Release connections. No-op for local stores."""

    @abc.abstractmethod
    async def read(self) -> Document:
        """Load the whole document (empty document if nothing is stored yet)."""
        raise NotImplementedError

    @abc.abstractmethod
    async def write(self, document: Document) -> None:
        """Replace the whole stored document."""
        raise NotImplementedError

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Document]:
        """
        Read-modify-write block.

        The document is written back only when the block exits normally and
        its contents changed. An exception raised inside, or a block that only
        looked, leaves the stored document and its version untouched.
        """
        document = await self.read()
        before = document.model_dump(exclude={"version"})
        yield document
        if document.model_dump(exclude={"version"}) != before:
            await self.write(document)

    def _check_version(self, stored_version: Optional[int], document: Document) -> None:
        """Compare-and-swap guard, active only behind FEATURE_DOCUMENT_CAS."""
        if not FeatureFlags.FEATURE_DOCUMENT_CAS:
            return
        current = stored_version or 0
        if current != document.version:
            logger.warning(
                f"Version conflict on {self.name} store: read v{document.version}, stored v{current}"
            )
            raise ConflictError(
                "The data changed while your request was being processed. Please retry.",
                {"expected_version": document.version, "stored_version": current},
            )

    @staticmethod
    def _decode(raw, source: str) -> Document:
        """Parse a serialized document or raise StorageError."""
        if raw is None or raw == "" or raw == b"":
            return Document()
        try:
            return Document.from_json(raw)
        except ValueError as e:
            logger.error(f"Corrupt document in {source}: {e}")
            raise StorageError(f"Stored document in {source} could not be parsed") from e
