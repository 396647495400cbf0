"""
Chapter Lifecycle State Machine

Features:
- Manual transitions between any two phases (admin override, including regressions)
- Deadline-first phase end times with legacy duration fallback
- Deadline-driven auto-transition, applied until the chapter settles

State Flow: setup → contribution → distribution → finished
"""
import math
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Any, Tuple

from peer_recognition.models.chapter import Chapter, ChapterStatus
from peer_recognition.utils.clock import hours_from

logger = logging.getLogger(__name__)


# Auto-transition rules: from_state -> to_state once the phase end time passes
AUTO_TRANSITIONS = {
    ChapterStatus.CONTRIBUTION: ChapterStatus.DISTRIBUTION,
    ChapterStatus.DISTRIBUTION: ChapterStatus.FINISHED,
}


class ChapterStateMachine:
    """
    Applies phase transitions to a single Chapter in place.

    The machine never persists anything; callers own the read-modify-write
    of the surrounding document.
    """

    def __init__(self, chapter: Chapter):
        self.chapter = chapter

    @property
    def state(self) -> ChapterStatus:
        return self.chapter.status

    def transition_to(self, new_state: ChapterStatus, now: datetime) -> Tuple[ChapterStatus, ChapterStatus]:
        """
        Move the chapter to new_state and restamp the dependent timing fields.

        Args:
            new_state: Target phase
            now: Clock value used for every stamp

        Returns:
            (previous_state, new_state)
        """
        chapter = self.chapter
        previous = chapter.status
        chapter.status = new_state

        if new_state == ChapterStatus.SETUP:
            # Full reset, regardless of origin
            chapter.start_time = None
            chapter.end_time = None
            chapter.contribution_end_time = None
            chapter.distribution_end_time = None

        elif new_state == ChapterStatus.CONTRIBUTION:
            if previous == ChapterStatus.SETUP or chapter.start_time is None:
                chapter.start_time = now
            if previous in (ChapterStatus.DISTRIBUTION, ChapterStatus.FINISHED):
                chapter.end_time = None
                chapter.distribution_end_time = None
            chapter.contribution_end_time = self._scheduled_end(
                chapter.contribution_deadline, chapter.contribution_hours, now
            )

        elif new_state == ChapterStatus.DISTRIBUTION:
            if chapter.start_time is None:
                chapter.start_time = now
            if previous == ChapterStatus.FINISHED:
                chapter.end_time = None
            chapter.distribution_end_time = self._scheduled_end(
                chapter.distribution_deadline, chapter.distribution_hours, now
            )

        elif new_state == ChapterStatus.FINISHED:
            chapter.end_time = now

        logger.info(f"Chapter {chapter.id} transition: {previous.value} → {new_state.value}")
        return previous, new_state

    @staticmethod
    def _scheduled_end(deadline: Optional[datetime], hours: float, now: datetime) -> datetime:
        """A set deadline always wins; the duration is the legacy fallback."""
        if deadline is not None:
            return deadline
        return hours_from(now, hours)

    def phase_end_time(self) -> Optional[datetime]:
        """
        Effective end of the current phase: deadline first, else the stamped end time.

        None outside the contribution and distribution phases.
        """
        chapter = self.chapter
        if chapter.status == ChapterStatus.CONTRIBUTION:
            return chapter.contribution_deadline or chapter.contribution_end_time
        if chapter.status == ChapterStatus.DISTRIBUTION:
            return chapter.distribution_deadline or chapter.distribution_end_time
        return None

    def is_expired(self, now: datetime) -> bool:
        end_time = self.phase_end_time()
        return end_time is not None and now >= end_time

    def advance_if_expired(self, now: datetime) -> List[Tuple[ChapterStatus, ChapterStatus]]:
        """
        Apply auto-transitions until the chapter no longer qualifies.

        A chapter whose contribution and distribution deadlines have both
        passed goes straight to finished, so a repeated sweep at the same
        instant changes nothing.
        """
        moves = []
        while self.state in AUTO_TRANSITIONS and self.is_expired(now):
            moves.append(self.transition_to(AUTO_TRANSITIONS[self.state], now))
        return moves


def duration_label(chapter: Chapter, now: datetime) -> str:
    """Display string: whole hours from now until the distribution deadline, rounded up."""
    if chapter.contribution_deadline and chapter.distribution_deadline:
        hours = math.ceil((chapter.distribution_deadline - now) / timedelta(hours=1))
        return f"{hours}h"
    return "1h"


def remaining_time(end_time: datetime, now: datetime) -> Dict[str, Any]:
    """Countdown breakdown for a phase end time."""
    total_ms = int((end_time - now) / timedelta(milliseconds=1))
    if total_ms <= 0:
        return {"total": 0, "hours": 0, "minutes": 0, "seconds": 0, "is_expired": True}

    return {
        "total": total_ms,
        "hours": total_ms // (1000 * 60 * 60),
        "minutes": (total_ms % (1000 * 60 * 60)) // (1000 * 60),
        "seconds": (total_ms % (1000 * 60)) // 1000,
        "is_expired": False,
    }


def format_remaining(remaining: Dict[str, Any]) -> str:
    if remaining["is_expired"]:
        return "Time expired"
    if remaining["hours"] > 0:
        return f"{remaining['hours']}h {remaining['minutes']}m {remaining['seconds']}s"
    if remaining["minutes"] > 0:
        return f"{remaining['minutes']}m {remaining['seconds']}s"
    return f"{remaining['seconds']}s"
