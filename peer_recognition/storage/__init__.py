"""
peer_recognition/storage
Whole-document persistence adapters
"""
from peer_recognition.storage.base import DocumentStore
from peer_recognition.storage.factory import create_document_store

__all__ = ["DocumentStore", "create_document_store"]
