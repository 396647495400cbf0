"""
peer_recognition/services/skills_service.py
Keyword-based skills summary for a participant's contributions

Each keyword matches as a word-prefix (\\b<keyword>, case-insensitive), so
"lead" also catches "leader" and "leadership".
"""
import re
import logging
from typing import Iterable, List, Tuple

from peer_recognition.errors import NotFoundError, require_text
from peer_recognition.storage.base import DocumentStore

logger = logging.getLogger(__name__)

MAX_SKILLS = 6
NO_SKILLS_MESSAGE = "No specific skills clearly identified from the contributions."

# (skill, keywords) in reporting order
SKILL_TABLE: List[Tuple[str, Tuple[str, ...]]] = [
    # Conventional skills
    ("leadership", ("lead", "leading", "manage", "managing", "guide", "guiding", "direct", "organize")),
    ("collaboration", ("collaborate", "team", "work with", "together", "coordinate", "help", "support")),
    ("communication", ("communicate", "present", "explain", "discuss", "talk", "meeting", "speaking")),
    ("problem-solving", ("solve", "fix", "debug", "troubleshoot", "resolve", "issue", "problem")),
    ("research", ("research", "investigate", "analyze", "study", "explore", "user research")),
    ("planning", ("plan", "schedule", "organize", "strategy", "roadmap", "timeline")),
    ("mentoring", ("mentor", "teach", "guide", "help", "train", "coach", "support")),
    ("documentation", ("document", "write", "docs", "readme", "guide", "record")),
    ("testing", ("test", "qa", "quality", "bug", "validate", "verify", "check")),
    ("design", ("design", "ui", "ux", "interface", "visual", "layout", "aesthetic")),
    ("project management", ("project", "deadline", "deliver", "milestone", "scope", "timeline")),
    ("data analysis", ("data", "metrics", "analytics", "insights", "report", "dashboard")),
    ("client relations", ("client", "customer", "stakeholder", "requirements", "business")),
    ("code review", ("review", "code review", "feedback", "quality", "standards")),
    # Less conventional ones
    ("space beautifying", ("beauty", "beautiful", "aesthetic", "well-dressed", "appearance", "visual appeal")),
    ("orderliness", ("clean", "organize", "tidy", "order", "orderly", "neat", "structure")),
    ("daily rituals", ("daily", "check-in", "routine", "ritual", "regular", "consistent")),
    ("trip guiding", ("trip", "guide", "journey", "experience", "lead through")),
    ("shamanic work", ("shaman", "shamanic", "psychedelic", "spiritual", "healing", "ceremony")),
    ("moderating", ("moderate", "facilitate", "host", "run meetings", "discussion")),
    ("atmosphere creation", ("atmosphere", "vibe", "energy", "mood", "environment", "space")),
    ("wellness facilitation", ("wellness", "wellbeing", "health", "care", "healing")),
    ("community building", ("community", "bring together", "connect", "network", "social")),
    ("creative thinking", ("creative", "innovative", "original", "unique", "artistic")),
    ("intuitive guidance", ("intuitive", "instinct", "feeling", "sense", "guidance")),
]

_PATTERNS = [
    (skill, [re.compile(r"\b" + re.escape(keyword), re.IGNORECASE) for keyword in keywords])
    for skill, keywords in SKILL_TABLE
]


def detect_skills(text: str) -> List[str]:
    """Distinct skills whose keywords occur in text, in table order."""
    text = text.lower()
    found = []
    for skill, patterns in _PATTERNS:
        if skill not in found and any(p.search(text) for p in patterns):
            found.append(skill)
    return found


def summarize_skills(person_name: str, descriptions: Iterable[str]) -> str:
    """
    Comma-separated list of up to MAX_SKILLS skills, or NO_SKILLS_MESSAGE.

    person_name is accepted for the caller's benefit; it does not affect
    detection.
    """
    skills = detect_skills(" ".join(d for d in descriptions if d))
    if not skills:
        return NO_SKILLS_MESSAGE
    return ", ".join(skills[:MAX_SKILLS])


class SkillsService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def for_participant(self, chapter_id: str, participant_id: str) -> dict:
        """Summary over every contribution written about one participant."""
        document = await self.store.read()
        if document.find_chapter(chapter_id) is None:
            raise NotFoundError("Chapter", chapter_id)
        participant = document.find_participant(participant_id)
        if participant is None or participant.chapter_id != chapter_id:
            raise NotFoundError("Participant", participant_id)

        descriptions = [
            c.description for c in document.contributions_of(chapter_id)
            if c.participant_id == participant_id
        ]
        return {
            "participant_id": participant_id,
            "name": participant.name,
            "summary": summarize_skills(participant.name, descriptions),
        }

    @staticmethod
    def for_descriptions(person_name: str, descriptions: List[str]) -> dict:
        person_name = require_text(person_name, "personName")
        return {"summary": summarize_skills(person_name, descriptions)}
