"""Export service - snapshot, encode, measure, log.

Every export captures ``snapshot_for_export()`` before doing anything
else, so edits made to the working copy while an export is in flight
never reach it.
"""

import re
import time
from dataclasses import dataclass, field

import httpx

from tripdoc.errors import DocumentRenderError
from tripdoc.export.calendar import encode_calendar
from tripdoc.export.document import render_document
from tripdoc.export.structured import encode_structured
from tripdoc.export.text import encode_text
from tripdoc.layout.templates import clamp_items_per_page, get_template
from tripdoc.models.common import ExportFormat, TemplateId
from tripdoc.models.scope import Scope
from tripdoc.models.trip import TripSnapshot
from tripdoc.store.working_copy import WorkingCopyStore
from tripdoc.utils.logging import ExportContext, StructuredExportLogger
from tripdoc.utils.metrics import PrometheusExportMetrics

MEDIA_TYPES: dict[ExportFormat, str] = {
    ExportFormat.json: "application/json",
    ExportFormat.text: "text/plain; charset=utf-8",
    ExportFormat.ical: "text/calendar; charset=utf-8",
    ExportFormat.pdf: "application/pdf",
}

EXTENSIONS: dict[ExportFormat, str] = {
    ExportFormat.json: "json",
    ExportFormat.text: "txt",
    ExportFormat.ical: "ics",
    ExportFormat.pdf: "pdf",
}

_SLUG_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class ExportRequest:
    """What to export and how it should look."""

    format: ExportFormat
    scope: Scope = field(default_factory=Scope.all)
    template: TemplateId | str | None = None
    items_per_page: int | None = None


@dataclass(frozen=True)
class ExportArtifact:
    """Encoded export ready to hand to the user."""

    filename: str
    media_type: str
    content: bytes
    page_count: int | None = None

    @property
    def size(self) -> int:
        return len(self.content)


def slugify(name: str) -> str:
    return _SLUG_RE.sub("-", name.lower()).strip("-") or "trip"


def export_filename(snapshot: TripSnapshot, request: ExportRequest) -> str:
    return f"{slugify(snapshot.name)}-{request.scope.label()}.{EXTENSIONS[request.format]}"


def encode_as_text(snapshot: TripSnapshot, request: ExportRequest) -> str:
    """Encode one of the textual formats."""
    if request.format == ExportFormat.json:
        return encode_structured(snapshot, request.scope)
    if request.format == ExportFormat.text:
        return encode_text(snapshot, request.scope)
    if request.format == ExportFormat.ical:
        return encode_calendar(snapshot)
    raise ValueError(f"{request.format.value} is not a textual format")


class ExportService:
    """Runs exports and previews with metrics and structured logging."""

    def __init__(
        self,
        metrics: PrometheusExportMetrics | None = None,
        logger: StructuredExportLogger | None = None,
    ) -> None:
        self._metrics = metrics or PrometheusExportMetrics()
        self._logger = logger or StructuredExportLogger()

    def _context(self, request: ExportRequest, session_id: str | None) -> ExportContext:
        is_pdf = request.format == ExportFormat.pdf
        return ExportContext(
            session_id=session_id,
            format=request.format.value,
            scope=request.scope.label(),
            template=get_template(request.template).template_id.value if is_pdf else None,
            items_per_page=clamp_items_per_page(request.items_per_page) if is_pdf else None,
        )

    async def export(
        self,
        store: WorkingCopyStore,
        request: ExportRequest,
        *,
        session_id: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> ExportArtifact:
        """Encode the working copy in the requested format.

        Raises:
            DocumentRenderError: if the paginated document cannot be rendered
        """
        snapshot = store.snapshot_for_export()
        ctx = self._context(request, session_id)
        fmt = request.format.value
        start_time = time.monotonic()

        try:
            if request.format == ExportFormat.pdf:
                rendered = await render_document(
                    snapshot,
                    request.scope,
                    request.template,
                    request.items_per_page,
                    client=client,
                )
                content, page_count = rendered.content, rendered.page_count
            else:
                content, page_count = encode_as_text(snapshot, request).encode("utf-8"), None
        except DocumentRenderError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency(fmt, elapsed_ms)
            self._metrics.inc_outcome(fmt, "render_error")
            self._logger.log_export(ctx, "render_error", elapsed_ms, error_reason=str(e))
            raise

        elapsed_ms = (time.monotonic() - start_time) * 1000
        artifact = ExportArtifact(
            filename=export_filename(snapshot, request),
            media_type=MEDIA_TYPES[request.format],
            content=content,
            page_count=page_count,
        )
        self._metrics.record_latency(fmt, elapsed_ms)
        self._metrics.inc_outcome(fmt, "success")
        self._logger.log_export(
            ctx, "success", elapsed_ms, page_count=page_count, size_bytes=artifact.size
        )
        return artifact

    def preview(
        self,
        store: WorkingCopyStore,
        request: ExportRequest,
        *,
        session_id: str | None = None,
    ) -> str:
        """Text preview of a json, text or ical export."""
        snapshot = store.snapshot_for_export()
        ctx = self._context(request, session_id)
        start_time = time.monotonic()
        body = encode_as_text(snapshot, request)
        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._metrics.inc_outcome(request.format.value, "preview")
        self._logger.log_export(ctx, "success", elapsed_ms, size_bytes=len(body.encode("utf-8")))
        return body


_default_service = ExportService()


async def export_trip(
    store: WorkingCopyStore,
    request: ExportRequest,
    *,
    session_id: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> ExportArtifact:
    """Export with the process-wide service."""
    return await _default_service.export(store, request, session_id=session_id, client=client)


def preview_trip(
    store: WorkingCopyStore, request: ExportRequest, *, session_id: str | None = None
) -> str:
    """Preview with the process-wide service."""
    return _default_service.preview(store, request, session_id=session_id)
