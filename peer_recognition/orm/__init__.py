from .base import Base

from .document_record import DocumentRecord
