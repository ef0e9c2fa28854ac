"""Engine error taxonomy.

Three families:
- user-input errors (``NotFoundError``): recovered by the caller, never corrupt the working copy
- resource/rendering errors (``DocumentRenderError``): propagated with section/page context
- invariant violations (``StableIdCollisionError``): fatal, raised as ``AssertionError``
"""


class NotFoundError(LookupError):
    """An edit referenced an item or entry that no longer exists."""

    pass


class StableIdCollisionError(AssertionError):
    """Two items in one working copy share a stable id."""

    pass


class PreviewHandleLimitError(RuntimeError):
    """An owner requested a new preview without releasing earlier ones."""

    pass


class DocumentRenderError(RuntimeError):
    """Rendering the paginated document failed for one page."""

    def __init__(self, section: str, page: int, message: str) -> None:
        super().__init__(f"{section} page {page}: {message}")
        self.section = section
        self.page = page
        self.message = message
