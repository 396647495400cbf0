"""
Chapter lifecycle manager tests: creation, lookups, phase changes,
deadline edits, the auto-transition sweep, deletes and participants.
"""
from datetime import timedelta

import pytest

from peer_recognition.errors import ConflictError, NotFoundError, ValidationError
from peer_recognition.models import ChapterStatus


# =============================================================================
# Creation & lookup
# =============================================================================

class TestCreate:

    async def test_sprint_scenario(self, chapters, sprint):
        chapter = sprint["chapter"]

        assert chapter.status == ChapterStatus.SETUP
        assert chapter.duration == "2h"
        assert chapter.start_time is None
        assert chapter.end_time is None
        assert await chapters.participant_names(chapter.id) == ["Alice", "Bob", "Carol"]

    async def test_duration_defaults_to_one_hour_without_deadlines(self, chapters, t0):
        chapter = await chapters.create("Open", ["Alice"], now=t0)
        assert chapter.duration == "1h"

    async def test_blank_names_are_dropped(self, chapters, t0):
        chapter = await chapters.create("Trim", [" Alice ", "", "   ", "Bob"], now=t0)
        assert await chapters.participant_names(chapter.id) == ["Alice", "Bob"]

    async def test_blank_title_rejected(self, chapters):
        with pytest.raises(ValidationError):
            await chapters.create("   ", ["Alice"])

    async def test_empty_participant_list_rejected(self, chapters):
        with pytest.raises(ValidationError):
            await chapters.create("Empty", ["", "  "])

    async def test_duplicate_names_case_insensitive(self, chapters, store):
        with pytest.raises(ConflictError):
            await chapters.create("Dupes", ["Alice", "alice "])

        document = await store.read()
        assert document.chapters == []
        assert document.participants == []

    async def test_non_positive_duration_rejected(self, chapters):
        with pytest.raises(ValidationError):
            await chapters.create("Zero", ["Alice"], contribution_duration=0)


class TestLookup:

    async def test_get_unknown_chapter(self, chapters):
        with pytest.raises(NotFoundError):
            await chapters.get("missing")

    async def test_active_skips_finished_and_keeps_insertion_order(self, chapters, t0):
        first = await chapters.create("First", ["Alice"], now=t0)
        second = await chapters.create("Second", ["Alice"], now=t0 + timedelta(minutes=1))
        third = await chapters.create("Third", ["Alice"], now=t0 + timedelta(minutes=2))

        await chapters.set_status(first.id, "finished", now=t0)

        active = await chapters.get_active()
        assert active.id == second.id
        assert (await chapters.get_latest()).id == third.id

    async def test_active_none_when_everything_finished(self, chapters, t0):
        chapter = await chapters.create("Done", ["Alice"], now=t0)
        await chapters.set_status(chapter.id, "finished", now=t0)

        assert await chapters.get_active() is None
        assert (await chapters.get_latest()).id == chapter.id

    async def test_empty_store(self, chapters):
        assert await chapters.get_active() is None
        assert await chapters.get_latest() is None
        assert await chapters.list_all() == []

    async def test_list_all_newest_first(self, chapters, t0):
        old = await chapters.create("Old", ["Alice"], now=t0)
        new = await chapters.create("New", ["Alice"], now=t0 + timedelta(days=1))

        assert [c.id for c in await chapters.list_all()] == [new.id, old.id]


# =============================================================================
# Phase changes
# =============================================================================

class TestSetStatus:

    async def test_start_contribution_uses_deadline(self, chapters, sprint, t0):
        chapter = await chapters.set_status(sprint["chapter"].id, "contribution", now=t0)

        assert chapter.status == ChapterStatus.CONTRIBUTION
        assert chapter.start_time == t0
        assert chapter.contribution_end_time == t0 + timedelta(hours=1)

    async def test_status_persisted(self, chapters, sprint, t0):
        await chapters.set_status(sprint["chapter"].id, ChapterStatus.DISTRIBUTION, now=t0)
        stored = await chapters.get(sprint["chapter"].id)

        assert stored.status == ChapterStatus.DISTRIBUTION
        assert stored.distribution_end_time == t0 + timedelta(hours=2)

    async def test_invalid_status(self, chapters, sprint):
        with pytest.raises(ValidationError) as exc:
            await chapters.set_status(sprint["chapter"].id, "paused")
        assert exc.value.details["allowed"] == ["setup", "contribution", "distribution", "finished"]

    async def test_unknown_chapter(self, chapters):
        with pytest.raises(NotFoundError):
            await chapters.set_status("missing", "contribution")

    async def test_regression_keeps_recorded_data(self, chapters, contributions, ledger, sprint, t0):
        from peer_recognition.services.distribution_service import AllocationEntry

        chapter_id = sprint["chapter"].id
        ids = sprint["ids"]
        note = await contributions.add_contribution(ids["Bob"], ids["Alice"], chapter_id, "Great demo")
        await ledger.submit(ids["Alice"], chapter_id, [AllocationEntry(contribution_id=note.id, points=10)])

        await chapters.set_status(chapter_id, "finished", now=t0)
        await chapters.set_status(chapter_id, "setup", now=t0)

        assert len(await contributions.list_by_chapter(chapter_id)) == 1
        assert await ledger.total_for(ids["Alice"], chapter_id) == 10


class TestUpdateDeadlines:

    async def test_requires_at_least_one(self, chapters, sprint):
        with pytest.raises(ValidationError):
            await chapters.update_deadlines(sprint["chapter"].id)

    async def test_unknown_chapter(self, chapters, t0):
        with pytest.raises(NotFoundError):
            await chapters.update_deadlines("missing", contribution_deadline=t0)

    async def test_moves_end_time_in_matching_phase(self, chapters, sprint, t0):
        chapter_id = sprint["chapter"].id
        await chapters.set_status(chapter_id, "contribution", now=t0)

        new_deadline = t0 + timedelta(hours=4)
        chapter = await chapters.update_deadlines(chapter_id, contribution_deadline=new_deadline, now=t0)

        assert chapter.contribution_deadline == new_deadline
        assert chapter.contribution_end_time == new_deadline

    async def test_other_phase_end_time_untouched(self, chapters, sprint, t0):
        chapter_id = sprint["chapter"].id
        await chapters.set_status(chapter_id, "contribution", now=t0)

        chapter = await chapters.update_deadlines(
            chapter_id, distribution_deadline=t0 + timedelta(hours=6), now=t0
        )

        assert chapter.distribution_end_time is None
        assert chapter.contribution_end_time == t0 + timedelta(hours=1)

    async def test_duration_recomputed(self, chapters, sprint, t0):
        chapter = await chapters.update_deadlines(
            sprint["chapter"].id, distribution_deadline=t0 + timedelta(hours=5, minutes=30), now=t0
        )
        assert chapter.duration == "6h"

    async def test_naive_deadline_treated_as_utc(self, chapters, sprint, t0):
        naive = (t0 + timedelta(hours=3)).replace(tzinfo=None)
        chapter = await chapters.update_deadlines(sprint["chapter"].id, contribution_deadline=naive, now=t0)

        assert chapter.contribution_deadline == t0 + timedelta(hours=3)


# =============================================================================
# Auto-transition sweep
# =============================================================================

class TestAutoTransition:

    async def test_nothing_due(self, chapters, sprint, t0):
        await chapters.set_status(sprint["chapter"].id, "contribution", now=t0)
        report = await chapters.auto_transition(now=t0 + timedelta(minutes=30))

        assert report.updated is False
        assert report.moves == []

    async def test_contribution_to_distribution(self, chapters, sprint, t0):
        chapter_id = sprint["chapter"].id
        await chapters.set_status(chapter_id, "contribution", now=t0)

        report = await chapters.auto_transition(now=t0 + timedelta(hours=1, seconds=1))

        assert report.updated is True
        assert report.to_dict()["moves"] == [
            {"chapterId": chapter_id, "from": "contribution", "to": "distribution"}
        ]
        chapter = await chapters.get(chapter_id)
        assert chapter.status == ChapterStatus.DISTRIBUTION
        assert chapter.distribution_end_time == t0 + timedelta(hours=2)

    async def test_idempotent_at_fixed_clock(self, chapters, store, sprint, t0):
        chapter_id = sprint["chapter"].id
        await chapters.set_status(chapter_id, "contribution", now=t0)
        now = t0 + timedelta(hours=5)

        first = await chapters.auto_transition(now=now)
        version_after_first = (await store.read()).version
        second = await chapters.auto_transition(now=now)

        assert [m.to_status for m in first.moves] == [ChapterStatus.DISTRIBUTION, ChapterStatus.FINISHED]
        assert second.updated is False
        assert (await store.read()).version == version_after_first
        assert (await chapters.get(chapter_id)).end_time == now

    async def test_only_writes_when_changed(self, chapters, store, sprint, t0):
        version = (await store.read()).version
        await chapters.auto_transition(now=t0)
        assert (await store.read()).version == version


# =============================================================================
# Deletes & participants
# =============================================================================

class TestDelete:

    async def test_missing_chapter_returns_false(self, chapters):
        assert await chapters.delete("missing") is False

    async def test_missing_chapter_does_not_write(self, chapters, store, sprint):
        version = (await store.read()).version
        assert await chapters.delete("missing") is False
        assert (await store.read()).version == version

    async def test_whole_chapter_delete_cascades(self, chapters, contributions, ledger, store, sprint, t0):
        from peer_recognition.services.distribution_service import AllocationEntry

        chapter_id = sprint["chapter"].id
        ids = sprint["ids"]
        other = await chapters.create("Other", ["Dana"], now=t0)

        note = await contributions.add_contribution(ids["Bob"], ids["Alice"], chapter_id, "Paired on the API")
        await contributions.add_comment(note.id, ids["Carol"], "Agreed")
        await ledger.submit(ids["Alice"], chapter_id, [AllocationEntry(contribution_id=note.id, points=40)])

        assert await chapters.delete(chapter_id) is True

        document = await store.read()
        assert [c.id for c in document.chapters] == [other.id]
        assert [p.name for p in document.participants] == ["Dana"]
        assert document.contributions == []
        assert document.comments == []
        assert document.distributions == []


class TestParticipants:

    async def test_add_participant(self, chapters, sprint):
        participant = await chapters.add_participant(sprint["chapter"].id, "  Dana ")

        assert participant.name == "Dana"
        assert await chapters.participant_names(sprint["chapter"].id) == ["Alice", "Bob", "Carol", "Dana"]

    async def test_add_duplicate(self, chapters, sprint):
        with pytest.raises(ConflictError):
            await chapters.add_participant(sprint["chapter"].id, "BOB")

    async def test_add_blank(self, chapters, sprint):
        with pytest.raises(ValidationError):
            await chapters.add_participant(sprint["chapter"].id, " ")

    async def test_add_to_unknown_chapter(self, chapters):
        with pytest.raises(NotFoundError):
            await chapters.add_participant("missing", "Dana")

    async def test_list_unknown_chapter(self, chapters):
        with pytest.raises(NotFoundError):
            await chapters.list_participants("missing")

    async def test_remove_unknown(self, chapters):
        with pytest.raises(NotFoundError):
            await chapters.remove_participant("missing")

    async def test_remove_cascades(self, chapters, contributions, ledger, store, sprint):
        from peer_recognition.services.distribution_service import AllocationEntry

        chapter_id = sprint["chapter"].id
        ids = sprint["ids"]
        about_bob = await contributions.add_contribution(ids["Bob"], ids["Alice"], chapter_id, "Shipped search")
        by_bob = await contributions.add_contribution(ids["Carol"], ids["Bob"], chapter_id, "Reviewed my PR")
        about_carol = await contributions.add_contribution(ids["Carol"], ids["Alice"], chapter_id, "Ran retro")
        await contributions.add_comment(about_carol.id, ids["Bob"], "+1")
        await contributions.add_comment(about_carol.id, ids["Alice"], "Nice")
        on_by_bob = await contributions.add_comment(by_bob.id, ids["Alice"], "Thanks")
        await ledger.submit(ids["Alice"], chapter_id, [
            AllocationEntry(contribution_id=about_bob.id, points=30),
            AllocationEntry(contribution_id=about_carol.id, points=20),
        ])
        await ledger.submit(ids["Bob"], chapter_id, [AllocationEntry(contribution_id=about_carol.id, points=50)])

        await chapters.remove_participant(ids["Bob"])

        document = await store.read()
        assert [p.name for p in document.participants] == ["Alice", "Carol"]
        assert [c.id for c in document.contributions] == [about_carol.id]
        assert {c.participant_id for c in document.comments} == {ids["Alice"]}
        assert on_by_bob.id not in {c.id for c in document.comments}
        assert {c.contribution_id for c in document.comments} == {about_carol.id}
        assert all(d.from_participant_id != ids["Bob"] for d in document.distributions)
        assert all(d.to_contribution_id not in {about_bob.id, by_bob.id} for d in document.distributions)
        assert await ledger.total_for(ids["Alice"], chapter_id) == 20


# =============================================================================
# Timer
# =============================================================================

class TestTimer:

    async def test_setup_has_no_timer(self, chapters, sprint, t0):
        timer = await chapters.timer(sprint["chapter"].id, now=t0)

        assert timer["end_time"] is None
        assert timer["display"] is None

    async def test_running_contribution_timer(self, chapters, sprint, t0):
        await chapters.set_status(sprint["chapter"].id, "contribution", now=t0)
        timer = await chapters.timer(sprint["chapter"].id, now=t0 + timedelta(minutes=57, seconds=30))

        assert timer["end_time"] == t0 + timedelta(hours=1)
        assert timer["display"] == "2m 30s"
        assert timer["is_expired"] is False

    async def test_expired(self, chapters, sprint, t0):
        await chapters.set_status(sprint["chapter"].id, "contribution", now=t0)
        timer = await chapters.timer(sprint["chapter"].id, now=t0 + timedelta(hours=2))

        assert timer["is_expired"] is True
        assert timer["display"] == "Time expired"
