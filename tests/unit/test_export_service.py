"""Tests for the export service."""

import json
from unittest.mock import MagicMock

import httpx
import pytest

from tripdoc.errors import DocumentRenderError
from tripdoc.export.service import ExportRequest, ExportService, export_filename, slugify
from tripdoc.models import ExportFormat, ItineraryItem, Scope, TripSource
from tripdoc.store.working_copy import WorkingCopyStore


@pytest.fixture
def metrics() -> MagicMock:
    return MagicMock()


@pytest.fixture
def export_logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(metrics: MagicMock, export_logger: MagicMock) -> ExportService:
    return ExportService(metrics=metrics, logger=export_logger)


def test_slug_and_filename(sample_source: TripSource) -> None:
    """Test that filenames combine the trip slug, scope label and extension."""
    snapshot = WorkingCopyStore(sample_source).snapshot_for_export()

    assert slugify("Tokyo Spring!! 2026") == "tokyo-spring-2026"
    assert slugify("京都") == "trip"
    assert export_filename(snapshot, ExportRequest(ExportFormat.ical)) == "tokyo-spring-full.ics"
    assert (
        export_filename(snapshot, ExportRequest(ExportFormat.pdf, Scope.parse("budget,packing")))
        == "tokyo-spring-budget-packing.pdf"
    )


@pytest.mark.asyncio
async def test_export_json(
    service: ExportService, metrics: MagicMock, sample_source: TripSource
) -> None:
    """Test a structured export and its metrics."""
    store = WorkingCopyStore(sample_source)

    artifact = await service.export(store, ExportRequest(ExportFormat.json, Scope.of("budget")))

    assert artifact.media_type == "application/json"
    assert json.loads(artifact.content)["budget"][0]["name"] == "JR Pass"
    metrics.inc_outcome.assert_called_once_with("json", "success")
    metrics.record_latency.assert_called_once()


@pytest.mark.asyncio
async def test_export_pdf_logs_page_count(
    service: ExportService, export_logger: MagicMock, sample_source: TripSource
) -> None:
    """Test that pdf exports log the page count and size."""
    store = WorkingCopyStore(sample_source)

    artifact = await service.export(
        store, ExportRequest(ExportFormat.pdf, Scope.all(), "retro", 3), session_id="s1"
    )

    assert artifact.content.startswith(b"%PDF")
    assert artifact.page_count == 6
    ctx, outcome = export_logger.log_export.call_args.args[:2]
    assert outcome == "success"
    assert ctx.session_id == "s1"
    assert ctx.template == "retro"
    assert ctx.items_per_page == 3
    assert export_logger.log_export.call_args.kwargs["page_count"] == 6


@pytest.mark.asyncio
async def test_render_error_is_recorded_and_raised(
    service: ExportService, metrics: MagicMock, export_logger: MagicMock
) -> None:
    """Test that render failures propagate and leave the working copy untouched."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    source = TripSource(
        itinerary={
            "2026-04-01": [
                ItineraryItem(name="A", details={"image_ref": "https://img.example.com/a.png"})
            ]
        }
    )
    store = WorkingCopyStore(source)
    revision = store.revision

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(DocumentRenderError):
            await service.export(store, ExportRequest(ExportFormat.pdf), client=client)

    metrics.inc_outcome.assert_called_once_with("pdf", "render_error")
    assert export_logger.log_export.call_args.args[1] == "render_error"
    assert store.revision == revision
    assert store.items_for("2026-04-01")[0].name == "A"


@pytest.mark.asyncio
async def test_export_captures_snapshot_first(
    service: ExportService, sample_source: TripSource
) -> None:
    """Test that edits made after an export starts do not reach it."""
    store = WorkingCopyStore(sample_source)
    pending = service.export(store, ExportRequest(ExportFormat.text, Scope.of("itinerary")))
    first_id = store.items_for("2026-04-01")[0].stable_id

    # the coroutine has not started yet, so the edit lands before the snapshot
    store.update_item(first_id, {"name": "Edited before start"})
    artifact = await pending
    store.update_item(first_id, {"name": "Edited after"})

    assert "Edited before start" in artifact.content.decode()
    assert "Edited after" not in artifact.content.decode()


def test_preview_text_formats(service: ExportService, sample_source: TripSource) -> None:
    """Test that text previews are produced synchronously."""
    store = WorkingCopyStore(sample_source)

    text = service.preview(store, ExportRequest(ExportFormat.text, Scope.of("itinerary")))
    feed = service.preview(store, ExportRequest(ExportFormat.ical))

    assert text.startswith("Tokyo Spring\n")
    assert feed.startswith("BEGIN:VCALENDAR")


def test_preview_rejects_pdf(service: ExportService, sample_source: TripSource) -> None:
    """Test that the pdf format has no synchronous preview."""
    with pytest.raises(ValueError):
        service.preview(WorkingCopyStore(sample_source), ExportRequest(ExportFormat.pdf))
