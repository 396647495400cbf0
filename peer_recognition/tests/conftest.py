"""
Shared fixtures: an in-memory store, the services on top of it, an HTTP
client over ASGITransport, and a seeded three-person chapter.
"""
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from peer_recognition.config.settings import Settings
from peer_recognition.main import create_app
from peer_recognition.rate_limit import limiter
from peer_recognition.services.chapter_service import ChapterService
from peer_recognition.services.contribution_service import ContributionService
from peer_recognition.services.distribution_service import DistributionLedger
from peer_recognition.services.results_service import ResultsService
from peer_recognition.storage.memory_store import InMemoryDocumentStore

T0 = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    """Fixed clock for deterministic timing assertions."""
    return T0


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def chapters(store):
    return ChapterService(store)


@pytest.fixture
def contributions(store):
    return ContributionService(store)


@pytest.fixture
def ledger(store):
    return DistributionLedger(store)


@pytest.fixture
def results(store):
    return ResultsService(store)


@pytest_asyncio.fixture
async def sprint(chapters, t0):
    """
    "Sprint 1" with Alice, Bob and Carol, deadlines one and two hours out.

    Returns a dict with the chapter and a name -> participant id map.
    """
    chapter = await chapters.create(
        "Sprint 1",
        ["Alice", "Bob", "Carol"],
        contribution_deadline=t0 + timedelta(hours=1),
        distribution_deadline=t0 + timedelta(hours=2),
        now=t0,
    )
    people = {p.name: p.id for p in await chapters.list_participants(chapter.id)}
    return {"chapter": chapter, "ids": people}


@pytest_asyncio.fixture
async def client(store):
    limiter.enabled = False
    app = create_app(Settings(), store=store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def raw_client(store):
    """Client that turns unhandled server errors into 500 responses instead of raising."""
    limiter.enabled = False
    app = create_app(Settings(), store=store)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
