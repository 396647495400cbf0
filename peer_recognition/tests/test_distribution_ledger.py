"""
Distribution ledger tests: boundary validation, replace-all semantics,
self-allocation and the allocation summary.
"""
import pytest
import pytest_asyncio

from peer_recognition.config.feature_flags import FeatureFlags
from peer_recognition.errors import NotFoundError, ValidationError
from peer_recognition.services.distribution_service import AllocationEntry


def entries(*pairs):
    return [AllocationEntry(contribution_id=cid, points=points) for cid, points in pairs]


@pytest_asyncio.fixture
async def notes(contributions, sprint):
    """Alice writes one note about Bob and one about Carol; Bob writes one about Alice."""
    ids = sprint["ids"]
    chapter_id = sprint["chapter"].id
    return {
        "bob": await contributions.add_contribution(ids["Bob"], ids["Alice"], chapter_id, "Led planning"),
        "carol": await contributions.add_contribution(ids["Carol"], ids["Alice"], chapter_id, "Fixed tests"),
        "alice": await contributions.add_contribution(ids["Alice"], ids["Bob"], chapter_id, "Mentored me"),
    }


class TestSubmit:

    async def test_replace_all(self, ledger, sprint, notes):
        alice = sprint["ids"]["Alice"]
        chapter_id = sprint["chapter"].id

        await ledger.submit(alice, chapter_id, entries((notes["bob"].id, 60), (notes["carol"].id, 40)))
        await ledger.submit(alice, chapter_id, entries((notes["carol"].id, 25)))

        rows = await ledger.list(chapter_id, alice)
        assert [(r.to_contribution_id, r.points) for r in rows] == [(notes["carol"].id, 25)]
        assert await ledger.total_for(alice, chapter_id) == 25

    async def test_empty_allocation_clears_rows(self, ledger, sprint, notes):
        alice = sprint["ids"]["Alice"]
        chapter_id = sprint["chapter"].id
        await ledger.submit(alice, chapter_id, entries((notes["bob"].id, 10)))

        await ledger.submit(alice, chapter_id, [])

        assert await ledger.list(chapter_id, alice) == []

    async def test_exactly_one_hundred_accepted(self, ledger, sprint, notes):
        alice = sprint["ids"]["Alice"]
        rows = await ledger.submit(alice, sprint["chapter"].id, entries((notes["bob"].id, 50), (notes["carol"].id, 50)))
        assert sum(r.points for r in rows) == 100

    async def test_over_budget_rejected_and_previous_rows_kept(self, ledger, sprint, notes):
        alice = sprint["ids"]["Alice"]
        chapter_id = sprint["chapter"].id
        await ledger.submit(alice, chapter_id, entries((notes["bob"].id, 30)))

        with pytest.raises(ValidationError) as exc:
            await ledger.submit(alice, chapter_id, entries((notes["bob"].id, 60), (notes["carol"].id, 45)))

        assert exc.value.details["total"] == 105
        assert await ledger.total_for(alice, chapter_id) == 30

    async def test_negative_points_rejected(self, ledger, sprint, notes):
        with pytest.raises(ValidationError):
            await ledger.submit(sprint["ids"]["Alice"], sprint["chapter"].id, entries((notes["bob"].id, -5)))

    async def test_duplicate_target_rejected(self, ledger, sprint, notes):
        with pytest.raises(ValidationError):
            await ledger.submit(
                sprint["ids"]["Alice"], sprint["chapter"].id,
                entries((notes["bob"].id, 10), (notes["bob"].id, 20)),
            )

    async def test_unknown_contribution(self, ledger, sprint, notes):
        with pytest.raises(NotFoundError):
            await ledger.submit(sprint["ids"]["Alice"], sprint["chapter"].id, entries(("ghost", 10)))

    async def test_allocator_must_belong_to_chapter(self, ledger, sprint, notes):
        with pytest.raises(NotFoundError):
            await ledger.submit("stranger", sprint["chapter"].id, entries((notes["bob"].id, 10)))

    async def test_unknown_chapter(self, ledger, sprint, notes):
        with pytest.raises(NotFoundError):
            await ledger.submit(sprint["ids"]["Alice"], "missing", entries((notes["bob"].id, 10)))

    async def test_other_participants_rows_untouched(self, ledger, sprint, notes):
        ids = sprint["ids"]
        chapter_id = sprint["chapter"].id
        await ledger.submit(ids["Carol"], chapter_id, entries((notes["bob"].id, 70)))
        await ledger.submit(ids["Alice"], chapter_id, entries((notes["bob"].id, 10)))

        assert await ledger.total_for(ids["Carol"], chapter_id) == 70
        assert len(await ledger.list(chapter_id)) == 2


class TestSelfAllocation:

    async def test_strict_mode_rejects_self_targeted_points(self, ledger, sprint, notes):
        with pytest.raises(ValidationError):
            await ledger.submit(sprint["ids"]["Alice"], sprint["chapter"].id, entries((notes["alice"].id, 10)))

    async def test_lenient_mode_accepts(self, monkeypatch, ledger, sprint, notes):
        monkeypatch.setattr(FeatureFlags, "FEATURE_STRICT_SELF_ALLOCATION", False)
        rows = await ledger.submit(sprint["ids"]["Alice"], sprint["chapter"].id, entries((notes["alice"].id, 10)))
        assert rows[0].points == 10

    async def test_candidates_exclude_own_notes(self, ledger, sprint, notes):
        groups = await ledger.candidates(sprint["ids"]["Alice"], sprint["chapter"].id)

        assert [g["name"] for g in groups] == ["Bob", "Carol"]
        offered = {c.id for g in groups for c in g["contributions"]}
        assert notes["alice"].id not in offered


class TestAllocate:

    async def test_allocate_trusts_input(self, ledger, sprint, notes):
        """The raw ledger write skips validation; the boundary is submit()."""
        rows = await ledger.allocate(sprint["ids"]["Alice"], sprint["chapter"].id, entries((notes["bob"].id, 150)))
        assert rows[0].points == 150


class TestSummary:

    async def test_summary(self, ledger, sprint, notes):
        alice = sprint["ids"]["Alice"]
        chapter_id = sprint["chapter"].id
        await ledger.submit(alice, chapter_id, entries((notes["bob"].id, 35)))

        summary = await ledger.summary(alice, chapter_id)

        assert summary["allocated"] == 35
        assert summary["remaining"] == 65
        assert summary["budget"] == 100
        assert len(summary["allocations"]) == 1
        assert [g["participant_id"] for g in summary["candidates"]] == [sprint["ids"]["Bob"], sprint["ids"]["Carol"]]

    async def test_summary_unknown_participant(self, ledger, sprint):
        with pytest.raises(NotFoundError):
            await ledger.summary("ghost", sprint["chapter"].id)
