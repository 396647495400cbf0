"""
Chapter CLI Commands

sweep, chapters list/show, export, results
"""
import asyncio
import json
from pathlib import Path
from typing import Optional

from peer_recognition.config.settings import get_settings
from peer_recognition.errors import APIError
from peer_recognition.services.chapter_service import ChapterService
from peer_recognition.services.export_service import ExportService
from peer_recognition.services.results_service import ResultsService
from peer_recognition.storage import DocumentStore, create_document_store


class StoreCommand:
    """Base handler: owns the store for the duration of one command."""

    def __init__(self, store: Optional[DocumentStore] = None):
        self._store = store

    def execute(self, args) -> int:
        try:
            return asyncio.run(self._run_with_store(args))
        except APIError as e:
            print(f"Error: {e.message}")
            return 1

    async def _run_with_store(self, args) -> int:
        store = self._store or create_document_store(get_settings())
        await store.connect()
        try:
            return await self.run(store, args)
        finally:
            await store.close()

    async def run(self, store: DocumentStore, args) -> int:
        raise NotImplementedError


class SweepCommand(StoreCommand):

    async def run(self, store: DocumentStore, args) -> int:
        report = await ChapterService(store).auto_transition()
        if not report.updated:
            print("No chapters due for transition")
            return 0

        for move in report.moves:
            print(f"✓ {move.chapter_id}: {move.from_status.value} → {move.to_status.value}")
        return 0


class ChapterCommand(StoreCommand):

    async def run(self, store: DocumentStore, args) -> int:
        service = ChapterService(store)
        if args.chapters_action == "list":
            return await self._list(service)
        elif args.chapters_action == "show":
            return await self._show(service, args.id)
        else:
            print("Error: Unknown chapters action")
            return 1

    async def _list(self, service: ChapterService) -> int:
        chapters = await service.list_all()
        if not chapters:
            print("No chapters found")
            return 0

        print(f"\n{'ID':<38} {'Title':<30} {'Status':<14} {'Created':<20}")
        print("-" * 104)
        for chapter in chapters:
            created = chapter.created_at.strftime("%Y-%m-%d %H:%M")
            print(f"{chapter.id:<38} {chapter.title[:28]:<30} {chapter.status.value:<14} {created:<20}")
        return 0

    async def _show(self, service: ChapterService, chapter_id: str) -> int:
        chapter = await service.get(chapter_id)
        names = await service.participant_names(chapter_id)
        payload = chapter.to_json_dict()
        payload["participants"] = names
        print(json.dumps(payload, indent=2))
        return 0


class ExportCommand(StoreCommand):

    async def run(self, store: DocumentStore, args) -> int:
        payload = await ExportService(store).export(args.id)
        text = json.dumps(payload, indent=2)

        if args.output:
            Path(args.output).write_text(text, encoding="utf-8")
            print(f"✓ Export written to {args.output}")
        else:
            print(text)
        return 0


class ResultsCommand(StoreCommand):

    async def run(self, store: DocumentStore, args) -> int:
        report = await ResultsService(store).results(args.id)
        stats = report["statistics"]

        print(f"=== Results: {report['chapter'].title} ===")
        print(f"\n{'Rank':<6} {'Name':<30} {'Points':>8}")
        print("-" * 46)
        for rank, entry in enumerate(report["results"], start=1):
            print(f"{rank:<6} {entry['name'][:28]:<30} {entry['total_points']:>8}")

        print(
            f"\nTotal points: {stats['total_points']}  "
            f"Participants: {stats['participant_count']}  "
            f"Contributions: {stats['contribution_count']}  "
            f"Average: {stats['average_points_rounded']}"
        )
        return 0
