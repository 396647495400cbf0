"""
peer_recognition/orm/document_record.py
One row per named aggregate document
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime

from peer_recognition.orm.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentRecord(Base):
    """
    DocumentRecord - the serialized aggregate document.

    The payload column holds the exact JSON produced by Document.to_json();
    version mirrors Document.version so writes can compare-and-swap.
    """

    __tablename__ = "documents"

    name = Column(
        String(100),
        primary_key=True,
        comment="Document key"
    )

    payload = Column(
        Text,
        nullable=False,
        comment="Serialized document JSON"
    )

    version = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Incremented on every write"
    )

    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
        comment="Timestamp of the last write"
    )

    def __repr__(self):
        return f"<DocumentRecord(name='{self.name}', version={self.version})>"
