"""Global pytest configuration."""

import os

# Pin settings for tests before any imports read them
os.environ.setdefault("ITEMS_PER_PAGE_DEFAULT", "4")
os.environ.setdefault("MAX_LIVE_PREVIEW_HANDLES", "3")
os.environ.setdefault("DEFAULT_CURRENCY", "HKD")
