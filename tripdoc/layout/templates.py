"""Visual templates for the paginated document.

A template only changes how pages look. It never changes which sections
are rendered or their order.
"""

from dataclasses import dataclass
from typing import Literal

from tripdoc.config import get_settings
from tripdoc.models.common import TemplateId

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class TemplateSpec:
    """Rendering parameters of one template."""

    template_id: TemplateId
    primary: RGB
    secondary: RGB
    text: RGB
    muted: RGB
    card_fill: RGB
    page_fill: RGB
    card_radius: float
    header_style: Literal["banner", "rule", "boxed"]
    date_density: Literal["full", "compact"]
    font_family: str
    dark: bool = False


TEMPLATES: dict[TemplateId, TemplateSpec] = {
    TemplateId.modern: TemplateSpec(
        template_id=TemplateId.modern,
        primary=(79, 70, 229),
        secondary=(124, 58, 237),
        text=(31, 41, 55),
        muted=(107, 114, 128),
        card_fill=(255, 255, 255),
        page_fill=(249, 250, 251),
        card_radius=3.0,
        header_style="banner",
        date_density="full",
        font_family="Helvetica",
    ),
    TemplateId.classic: TemplateSpec(
        template_id=TemplateId.classic,
        primary=(180, 83, 9),
        secondary=(146, 64, 14),
        text=(15, 23, 42),
        muted=(120, 113, 108),
        card_fill=(253, 251, 247),
        page_fill=(255, 255, 255),
        card_radius=2.0,
        header_style="rule",
        date_density="full",
        font_family="Times",
    ),
    TemplateId.glass: TemplateSpec(
        template_id=TemplateId.glass,
        primary=(103, 232, 249),
        secondary=(34, 211, 238),
        text=(255, 255, 255),
        muted=(148, 163, 184),
        card_fill=(30, 41, 59),
        page_fill=(15, 23, 42),
        card_radius=5.0,
        header_style="banner",
        date_density="full",
        font_family="Helvetica",
        dark=True,
    ),
    TemplateId.compact: TemplateSpec(
        template_id=TemplateId.compact,
        primary=(87, 83, 78),
        secondary=(120, 113, 108),
        text=(41, 37, 36),
        muted=(120, 113, 108),
        card_fill=(255, 255, 255),
        page_fill=(255, 255, 255),
        card_radius=1.0,
        header_style="rule",
        date_density="compact",
        font_family="Courier",
    ),
    TemplateId.retro: TemplateSpec(
        template_id=TemplateId.retro,
        primary=(211, 84, 0),
        secondary=(74, 59, 50),
        text=(74, 59, 50),
        muted=(141, 110, 99),
        card_fill=(255, 244, 230),
        page_fill=(255, 248, 240),
        card_radius=3.0,
        header_style="boxed",
        date_density="full",
        font_family="Courier",
    ),
    TemplateId.vibrant: TemplateSpec(
        template_id=TemplateId.vibrant,
        primary=(250, 204, 21),
        secondary=(124, 58, 237),
        text=(255, 255, 255),
        muted=(221, 214, 254),
        card_fill=(91, 33, 182),
        page_fill=(46, 16, 101),
        card_radius=4.0,
        header_style="banner",
        date_density="compact",
        font_family="Helvetica",
        dark=True,
    ),
}

DEFAULT_TEMPLATE = TemplateId.modern


def get_template(template: TemplateId | str | None) -> TemplateSpec:
    """Look up a template, falling back to the default for unknown ids."""
    try:
        return TEMPLATES[TemplateId(template)]
    except ValueError:
        return TEMPLATES[DEFAULT_TEMPLATE]


def clamp_items_per_page(value: int | None) -> int:
    """Bound a requested density to the configured range."""
    settings = get_settings()
    if value is None:
        return settings.items_per_page_default
    return max(settings.items_per_page_min, min(value, settings.items_per_page_max))
