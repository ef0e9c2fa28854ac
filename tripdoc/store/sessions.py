"""In-memory export session repository."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

from tripdoc.config import get_settings
from tripdoc.models.trip import TripSource
from tripdoc.store.preview_handles import PreviewHandleRegistry
from tripdoc.store.working_copy import WorkingCopyStore


@dataclass
class ExportSession:
    """One open export surface: a working copy plus bookkeeping."""

    session_id: str
    store: WorkingCopyStore
    created_at: datetime = field(default_factory=datetime.now)


class InMemorySessionRepository:
    """Holds open export sessions for the lifetime of the process.

    Nothing here is persisted; closing a session discards its edits.
    """

    def __init__(self, previews: PreviewHandleRegistry | None = None) -> None:
        self._sessions: dict[str, ExportSession] = {}
        self.previews = previews or PreviewHandleRegistry(
            max_live_per_owner=get_settings().max_live_preview_handles
        )

    def open(self, source: TripSource) -> ExportSession:
        """Create a fresh working copy seeded from ``source``."""
        session = ExportSession(session_id=uuid.uuid4().hex, store=WorkingCopyStore(source))
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> ExportSession | None:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        """Discard a session and release its preview handles."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        self.previews.release_owner(session_id)
        return True


@lru_cache
def get_session_repository() -> InMemorySessionRepository:
    """Get the process-wide session repository."""
    return InMemorySessionRepository()
