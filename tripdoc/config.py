"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Page density (itinerary cards per logical page)
    items_per_page_min: int = 2
    items_per_page_max: int = 8
    items_per_page_default: int = 4

    # Physical page geometry for the print target (millimetres, A4 portrait)
    page_width_mm: float = 210.0
    page_height_mm: float = 297.0
    page_margin_mm: float = 12.0
    sheet_gap_mm: float = 6.0

    # Largest blank spacer the orphan pass may insert before giving up
    orphan_spacer_max_mm: float = 120.0

    # Calendar feed
    calendar_default_start: str = "09:00"
    calendar_default_duration_min: int = 60
    calendar_prodid: str = "-//tripdoc//Itinerary Export//EN"
    calendar_uid_domain: str = "tripdoc"

    # Money
    default_currency: str = "HKD"

    # Universal hotlines printed in the emergency section
    default_hotlines: list[str] = [
        "International emergency (GSM): 112",
        "Police (US/CA): 911",
        "Police / Ambulance (UK/HK): 999",
    ]

    # Remote image fetch for the paginated document (milliseconds)
    asset_fetch_timeout_ms: int = 4000

    # Unreleased in-memory preview documents allowed per session
    max_live_preview_handles: int = 3


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
