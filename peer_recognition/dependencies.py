"""
peer_recognition/dependencies.py
FastAPI dependencies: the document store and the services built on it
"""
from fastapi import Depends, Request

from peer_recognition.services.chapter_service import ChapterService
from peer_recognition.services.contribution_service import ContributionService
from peer_recognition.services.distribution_service import DistributionLedger
from peer_recognition.services.export_service import ExportService
from peer_recognition.services.results_service import ResultsService
from peer_recognition.services.skills_service import SkillsService
from peer_recognition.storage.base import DocumentStore


def get_store(request: Request) -> DocumentStore:
    """The store created in the application lifespan."""
    return request.app.state.store


def get_chapter_service(store: DocumentStore = Depends(get_store)) -> ChapterService:
    return ChapterService(store)


def get_contribution_service(store: DocumentStore = Depends(get_store)) -> ContributionService:
    return ContributionService(store)


def get_ledger(store: DocumentStore = Depends(get_store)) -> DistributionLedger:
    return DistributionLedger(store)


def get_results_service(store: DocumentStore = Depends(get_store)) -> ResultsService:
    return ResultsService(store)


def get_export_service(store: DocumentStore = Depends(get_store)) -> ExportService:
    return ExportService(store)


def get_skills_service(store: DocumentStore = Depends(get_store)) -> SkillsService:
    return SkillsService(store)
