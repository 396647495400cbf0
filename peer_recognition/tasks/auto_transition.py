"""
peer_recognition/tasks/auto_transition.py
Periodic auto-transition sweep over every chapter
"""
import asyncio
import logging
from typing import Optional

from peer_recognition.errors import APIError
from peer_recognition.services.chapter_service import ChapterService, AutoTransitionReport
from peer_recognition.storage.base import DocumentStore

logger = logging.getLogger(__name__)


async def run_sweep_once(store: DocumentStore) -> Optional[AutoTransitionReport]:
    """Run a single sweep. Store failures are logged and reported as None."""
    try:
        report = await ChapterService(store).auto_transition()
    except APIError as e:
        logger.error(f"Auto-transition sweep failed: {e.code} - {e.message}")
        return None

    if report.updated:
        logger.info(f"Sweep completed: {len(report.moves)} phase change(s)")
    return report


async def auto_transition_loop(store: DocumentStore, interval_seconds: int = 60):
    """
    Background sweep loop.
    Runs every interval_seconds until cancelled.
    """
    logger.info(f"Starting auto-transition loop with interval {interval_seconds}s")

    while True:
        try:
            await run_sweep_once(store)
        except Exception as e:
            logger.exception(f"Auto-transition loop error: {e}")

        await asyncio.sleep(interval_seconds)


def start_auto_transition_task(store: DocumentStore, interval_seconds: int = 60) -> asyncio.Task:
    """Start the sweep loop as a background task."""
    return asyncio.create_task(auto_transition_loop(store, interval_seconds))
