"""
SQL Document Store

Keeps the serialized document in a single row of the `documents` table.
Any SQLAlchemy async URL works; SQLite via aiosqlite is the default.
"""
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from peer_recognition.config.feature_flags import FeatureFlags
from peer_recognition.database import create_engine_for, create_session_factory, init_db, close_db
from peer_recognition.errors import ConflictError, StorageError
from peer_recognition.models.document import Document
from peer_recognition.orm.document_record import DocumentRecord
from peer_recognition.storage.base import DocumentStore

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):

    name = "sql"

    def __init__(self, database_url: str, document_name: str = "peer-recognition-db"):
        self.database_url = database_url
        self.document_name = document_name
        self._engine: Optional[AsyncEngine] = None
        self._session_factory = None

    async def connect(self) -> None:
        if self._engine is not None:
            return
        try:
            self._engine = create_engine_for(self.database_url)
            self._session_factory = create_session_factory(self._engine)
            await init_db(self._engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect SQL store: {e}")
            raise StorageError("Failed to connect to the database") from e

    async def close(self) -> None:
        if self._engine is not None:
            await close_db(self._engine)
            self._engine = None
            self._session_factory = None

    async def read(self) -> Document:
        await self.connect()
        try:
            async with self._session_factory() as session:
                record = await session.get(DocumentRecord, self.document_name)
                raw = record.payload if record else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read document '{self.document_name}': {e}")
            raise StorageError("Failed to read stored data") from e
        return self._decode(raw, f"table documents ({self.document_name})")

    async def write(self, document: Document) -> None:
        await self.connect()
        next_version = document.version + 1
        payload = document.model_copy(update={"version": next_version}).to_json()
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    record = await session.get(DocumentRecord, self.document_name)
                    stored_version = record.version if record else 0
                    self._check_version(stored_version, document)

                    if record is None:
                        session.add(DocumentRecord(
                            name=self.document_name,
                            payload=payload,
                            version=next_version,
                        ))
                    else:
                        stmt = update(DocumentRecord).where(DocumentRecord.name == self.document_name)
                        if FeatureFlags.FEATURE_DOCUMENT_CAS:
                            stmt = stmt.where(DocumentRecord.version == stored_version)
                        result = await session.execute(
                            stmt.values(payload=payload, version=next_version)
                        )
                        if result.rowcount == 0:
                            raise ConflictError(
                                "The data changed while your request was being processed. Please retry.",
                                {"expected_version": document.version},
                            )
        except IntegrityError as e:
            logger.warning(f"Concurrent first write on document '{self.document_name}': {e}")
            raise ConflictError("The data changed while your request was being processed. Please retry.") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to write document '{self.document_name}': {e}")
            raise StorageError("Failed to write stored data") from e
        document.version = next_version
