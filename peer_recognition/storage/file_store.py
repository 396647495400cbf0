"""
JSON File Document Store

Pretty-printed JSON on local disk. Missing file reads as an empty document.
Writes go to a sibling temp file first and are swapped in with os.replace.
"""
import asyncio
import logging
import os
from pathlib import Path
from typing import Union

from peer_recognition.config.feature_flags import FeatureFlags
from peer_recognition.errors import StorageError
from peer_recognition.models.document import Document
from peer_recognition.storage.base import DocumentStore

logger = logging.getLogger(__name__)


class JsonFileDocumentStore(DocumentStore):

    name = "file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_raw(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def _write_raw(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def read(self) -> Document:
        try:
            raw = await asyncio.to_thread(self._read_raw)
        except OSError as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise StorageError("Failed to read stored data") from e
        return self._decode(raw, str(self.path))

    async def write(self, document: Document) -> None:
        async with self._lock:
            try:
                if FeatureFlags.FEATURE_DOCUMENT_CAS:
                    current = self._decode(await asyncio.to_thread(self._read_raw), str(self.path))
                    self._check_version(current.version, document)
                next_version = document.version + 1
                payload = document.model_copy(update={"version": next_version}).to_json(indent=2)
                await asyncio.to_thread(self._write_raw, payload)
            except OSError as e:
                logger.error(f"Failed to write {self.path}: {e}")
                raise StorageError("Failed to write stored data") from e
            document.version = next_version
