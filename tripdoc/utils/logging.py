"""Structured logging for export operations."""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportContext:
    """What is being exported, for log correlation."""

    session_id: str | None
    format: str
    scope: str
    template: str | None = None
    items_per_page: int | None = None


class StructuredExportLogger:
    """Structured logger for export and preview requests."""

    def log_export(
        self,
        ctx: ExportContext,
        outcome: str,
        latency_ms: float,
        page_count: int | None = None,
        size_bytes: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one export attempt with structured data."""
        log_data: dict[str, Any] = {
            "session_id": ctx.session_id,
            "format": ctx.format,
            "scope": ctx.scope,
            "template": ctx.template,
            "items_per_page": ctx.items_per_page,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if page_count is not None:
            log_data["page_count"] = page_count
        if size_bytes is not None:
            log_data["size_bytes"] = size_bytes
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Export: {ctx.format} ({ctx.scope}) - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
