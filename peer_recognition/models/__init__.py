"""
peer_recognition/models/__init__.py
Export the aggregate document and its entities for easy imports
"""

from peer_recognition.models.base import CamelModel, new_id
from peer_recognition.models.chapter import Chapter, ChapterStatus, PHASE_STATUSES
from peer_recognition.models.entities import Participant, Contribution, Comment, Distribution
from peer_recognition.models.document import Document, POINT_BUDGET

__all__ = [
    "CamelModel",
    "new_id",
    "Chapter",
    "ChapterStatus",
    "PHASE_STATUSES",
    "Participant",
    "Contribution",
    "Comment",
    "Distribution",
    "Document",
    "POINT_BUDGET",
]
