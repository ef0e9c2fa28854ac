"""In-memory handles for rendered document previews.

A preview handle owns the bytes of one rendered document. Owners (export
sessions) must release handles they no longer display; the registry refuses
to grow an owner's live set beyond a fixed limit.

Every issued handle carries a per-owner sequence number so callers can
tell a superseded preview from the latest one without cancelling work.
"""

import itertools
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from tripdoc.errors import NotFoundError, PreviewHandleLimitError
from tripdoc.utils.metrics import preview_handles_live

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewHandle:
    """Issued preview document."""

    handle_id: str
    owner: str
    sequence: int
    content: bytes
    media_type: str
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def size(self) -> int:
        return len(self.content)


class PreviewHandleRegistry:
    """Tracks live preview handles per owner."""

    def __init__(self, max_live_per_owner: int) -> None:
        self._max_live = max_live_per_owner
        self._handles: dict[str, PreviewHandle] = {}
        self._sequences: dict[str, itertools.count] = {}
        self._latest: dict[str, int] = {}

    def next_sequence(self, owner: str) -> int:
        """Reserve the next request sequence number for ``owner``."""
        counter = self._sequences.setdefault(owner, itertools.count(1))
        sequence = next(counter)
        self._latest[owner] = sequence
        return sequence

    def is_latest(self, owner: str, sequence: int) -> bool:
        return self._latest.get(owner) == sequence

    def live_count(self, owner: str) -> int:
        return sum(1 for handle in self._handles.values() if handle.owner == owner)

    def ensure_capacity(self, owner: str) -> None:
        """Fail fast when ``owner`` cannot take another handle.

        Raises:
            PreviewHandleLimitError: if ``owner`` already holds the maximum
                number of unreleased handles
        """
        if self.live_count(owner) >= self._max_live:
            raise PreviewHandleLimitError(
                f"owner {owner} holds {self._max_live} unreleased preview handle(s)"
            )

    def issue(
        self,
        owner: str,
        sequence: int,
        content: bytes,
        media_type: str = "application/pdf",
    ) -> PreviewHandle:
        """Store rendered bytes and return the handle.

        ``sequence`` must have been reserved with ``next_sequence`` since the
        owner was last released, so a render that outlives its owner cannot
        leave an orphaned handle behind.

        Raises:
            NotFoundError: if ``owner`` holds no reservation for ``sequence``
            PreviewHandleLimitError: if ``owner`` already holds the maximum
                number of unreleased handles
        """
        reserved = self._latest.get(owner)
        if reserved is None or sequence > reserved:
            raise NotFoundError(f"owner {owner} has no reserved preview sequence {sequence}")
        self.ensure_capacity(owner)
        handle = PreviewHandle(
            handle_id=uuid.uuid4().hex,
            owner=owner,
            sequence=sequence,
            content=content,
            media_type=media_type,
        )
        self._handles[handle.handle_id] = handle
        preview_handles_live.inc()
        logger.debug("Issued preview %s for %s (seq %d)", handle.handle_id, owner, sequence)
        return handle

    def get(self, handle_id: str) -> PreviewHandle | None:
        return self._handles.get(handle_id)

    def release(self, handle_id: str) -> bool:
        """Drop a handle. Releasing twice is harmless."""
        handle = self._handles.pop(handle_id, None)
        if handle is None:
            return False
        preview_handles_live.dec()
        return True

    def release_owner(self, owner: str) -> int:
        """Drop every handle of ``owner`` and forget its sequence."""
        owned = [h.handle_id for h in self._handles.values() if h.owner == owner]
        for handle_id in owned:
            self.release(handle_id)
        self._sequences.pop(owner, None)
        self._latest.pop(owner, None)
        return len(owned)
