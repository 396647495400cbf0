"""
Operator CLI and background sweep tests
"""
import asyncio
import json
from datetime import timedelta

import pytest

from peer_recognition.cli import create_parser, main
from peer_recognition.models import ChapterStatus
from peer_recognition.services.chapter_service import ChapterService
from peer_recognition.storage.memory_store import InMemoryDocumentStore
from peer_recognition.tasks.auto_transition import run_sweep_once, start_auto_transition_task
from peer_recognition.utils.clock import utcnow


def seed_overdue(store) -> str:
    """Chapter in contribution whose deadlines have both passed."""
    async def _seed():
        service = ChapterService(store)
        now = utcnow()
        chapter = await service.create(
            "Overdue",
            ["Alice", "Bob"],
            contribution_deadline=now - timedelta(hours=2),
            distribution_deadline=now - timedelta(hours=1),
            now=now - timedelta(hours=3),
        )
        await service.set_status(chapter.id, "contribution", now=now - timedelta(hours=3))
        return chapter.id

    return asyncio.run(_seed())


# =============================================================================
# CLI (synchronous: the commands run their own event loop)
# =============================================================================

class TestCli:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_parser_requires_id_for_export(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["export"])

    def test_sweep(self, capsys):
        store = InMemoryDocumentStore()
        chapter_id = seed_overdue(store)

        assert main(["sweep"], store=store) == 0
        out = capsys.readouterr().out
        assert f"{chapter_id}: contribution → distribution" in out
        assert f"{chapter_id}: distribution → finished" in out

        assert main(["sweep"], store=store) == 0
        assert "No chapters due" in capsys.readouterr().out

    def test_chapters_list_and_show(self, capsys):
        store = InMemoryDocumentStore()
        chapter_id = seed_overdue(store)

        assert main(["chapters", "list"], store=store) == 0
        assert chapter_id in capsys.readouterr().out

        assert main(["chapters", "show", "--id", chapter_id], store=store) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["participants"] == ["Alice", "Bob"]

    def test_unknown_chapter_exit_code(self, capsys):
        store = InMemoryDocumentStore()
        assert main(["results", "--id", "missing"], store=store) == 1
        assert "not found" in capsys.readouterr().out

    def test_export_to_file(self, tmp_path, capsys):
        store = InMemoryDocumentStore()
        chapter_id = seed_overdue(store)
        output = tmp_path / "export.json"

        assert main(["export", "--id", chapter_id, "--output", str(output)], store=store) == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["chapterId"] == chapter_id
        assert [row["name"] for row in payload["pointsSummary"]] == ["Alice", "Bob"]

    def test_results(self, capsys):
        store = InMemoryDocumentStore()
        chapter_id = seed_overdue(store)

        assert main(["results", "--id", chapter_id], store=store) == 0
        out = capsys.readouterr().out
        assert "=== Results: Overdue ===" in out
        assert "Participants: 2" in out


# =============================================================================
# Background sweep
# =============================================================================

class TestSweepTask:

    async def test_run_once(self, chapters, store, t0):
        chapter = await chapters.create("Quick", ["Alice"], now=t0)
        await chapters.set_status(chapter.id, "contribution", now=t0)

        report = await run_sweep_once(store)

        assert report.updated is True
        assert (await chapters.get(chapter.id)).status == ChapterStatus.DISTRIBUTION

    async def test_storage_failure_reported_as_none(self, store, monkeypatch):
        from peer_recognition.errors import StorageError

        async def failing_read():
            raise StorageError("backend down")

        monkeypatch.setattr(store, "read", failing_read)
        assert await run_sweep_once(store) is None

    async def test_loop_runs_until_cancelled(self, chapters, store, t0):
        chapter = await chapters.create("Looped", ["Alice"], now=t0)
        await chapters.set_status(chapter.id, "contribution", now=t0)

        task = start_auto_transition_task(store, interval_seconds=3600)
        for _ in range(50):
            if (await chapters.get(chapter.id)).status == ChapterStatus.DISTRIBUTION:
                break
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert (await chapters.get(chapter.id)).status == ChapterStatus.DISTRIBUTION
