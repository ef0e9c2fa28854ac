"""Print flow - stacking logical pages onto fixed-size physical pages.

Only the paginated document uses this. Logical pages are measured into
blocks with estimated heights, then placed top-down on physical pages.
A block that does not fit moves to the next physical page. Runs of blocks
marked ``keep_with_next`` (a day header and its first card) form an atomic
unit: when such a unit would straddle a page boundary, a blank spacer fills
the rest of the page so the unit starts on the next one. The correction is
skipped when the spacer would exceed ``max_spacer_mm`` or the unit is taller
than a whole page; the natural break then stands.
"""

import math
from dataclasses import dataclass
from typing import Any, Literal

from tripdoc.config import Settings, get_settings
from tripdoc.layout.templates import TemplateSpec
from tripdoc.models.common import SectionKey
from tripdoc.models.page import Page

BlockKind = Literal[
    "cover", "section_title", "day_header", "card", "grid_row", "footer", "gap", "spacer"
]

# Card heights (mm) per itinerary density
CARD_HEIGHT_MM: dict[int, float] = {2: 58.0, 3: 46.0, 4: 38.0, 5: 32.0, 6: 28.0, 7: 25.0, 8: 22.0}

COVER_HEIGHT_MM = 30.0
SECTION_TITLE_HEIGHT_MM = 12.0
DAY_HEADER_HEIGHT_MM = {"full": 16.0, "compact": 11.0}
CONTINUATION_HEADER_HEIGHT_MM = 8.0
GRID_ROW_HEIGHT_MM = 11.0
GRID_COLUMNS = 2
FOOTER_HEIGHT_MM = 8.0


@dataclass(frozen=True)
class PageGeometry:
    """Physical page size in millimetres."""

    width: float
    height: float
    margin: float
    sheet_gap: float

    @property
    def usable_height(self) -> float:
        return self.height - 2 * self.margin

    @property
    def usable_width(self) -> float:
        return self.width - 2 * self.margin

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PageGeometry":
        settings = settings or get_settings()
        return cls(
            width=settings.page_width_mm,
            height=settings.page_height_mm,
            margin=settings.page_margin_mm,
            sheet_gap=settings.sheet_gap_mm,
        )


@dataclass(frozen=True)
class FlowBlock:
    """A vertical slice of a logical page."""

    kind: BlockKind
    height: float
    page_number: int
    section: SectionKey
    keep_with_next: bool = False
    payload: Any = None


@dataclass(frozen=True)
class PlacedBlock:
    """A block positioned on a physical page (``y`` measured from the top margin)."""

    block: FlowBlock
    physical_page: int
    y: float


def card_height(items_per_page: int) -> float:
    """Card height for a density, clamped to the table's range."""
    densities = sorted(CARD_HEIGHT_MM)
    bounded = max(densities[0], min(items_per_page, densities[-1]))
    return CARD_HEIGHT_MM[bounded]


def measure_page(
    page: Page,
    template: TemplateSpec,
    items_per_page: int,
    *,
    with_cover: bool = False,
    with_section_title: bool = False,
) -> list[FlowBlock]:
    """Break one logical page into flow blocks."""

    def block(kind: BlockKind, height: float, keep: bool = False, payload: Any = None) -> FlowBlock:
        return FlowBlock(
            kind=kind,
            height=height,
            page_number=page.number,
            section=page.section,
            keep_with_next=keep,
            payload=payload,
        )

    blocks: list[FlowBlock] = []
    if with_cover:
        blocks.append(block("cover", COVER_HEIGHT_MM, keep=True))
    if with_section_title:
        blocks.append(block("section_title", SECTION_TITLE_HEIGHT_MM, keep=True, payload=page.label))

    if page.day_header is not None:
        header_height = (
            CONTINUATION_HEADER_HEIGHT_MM
            if page.day_header.continuation
            else DAY_HEADER_HEIGHT_MM[template.date_density]
        )
        blocks.append(block("day_header", header_height, keep=True, payload=page.day_header))
        height = card_height(items_per_page)
        for item in page.items:
            blocks.append(block("card", height, payload=item))
    else:
        entries = list(page.entries)
        rows = math.ceil(len(entries) / GRID_COLUMNS)
        for row in range(rows):
            chunk = tuple(entries[row * GRID_COLUMNS : (row + 1) * GRID_COLUMNS])
            blocks.append(block("grid_row", GRID_ROW_HEIGHT_MM, payload=chunk))

    # a trailing keep flag with nothing to keep with is meaningless
    if blocks and blocks[-1].keep_with_next:
        last = blocks[-1]
        blocks[-1] = FlowBlock(
            kind=last.kind,
            height=last.height,
            page_number=last.page_number,
            section=last.section,
            payload=last.payload,
        )

    blocks.append(block("footer", FOOTER_HEIGHT_MM, payload=page.footer))
    return blocks


def measure_document(
    pages: list[Page],
    template: TemplateSpec,
    items_per_page: int,
    geometry: PageGeometry,
) -> list[FlowBlock]:
    """Measure every logical page, separated by sheet gaps."""
    blocks: list[FlowBlock] = []
    previous_section: SectionKey | None = None
    for position, page in enumerate(pages):
        if position > 0:
            blocks.append(
                FlowBlock(
                    kind="gap",
                    height=geometry.sheet_gap,
                    page_number=page.number,
                    section=page.section,
                )
            )
        blocks.extend(
            measure_page(
                page,
                template,
                items_per_page,
                with_cover=position == 0,
                with_section_title=page.section != previous_section,
            )
        )
        previous_section = page.section
    return blocks


def _unit_end(blocks: list[FlowBlock], start: int) -> int:
    end = start
    while end < len(blocks) - 1 and blocks[end].keep_with_next:
        end += 1
    return end


def plan_print_flow(
    blocks: list[FlowBlock],
    geometry: PageGeometry,
    max_spacer_mm: float | None = None,
) -> list[PlacedBlock]:
    """Place blocks on physical pages, applying the orphan-avoidance pass.

    Args:
        blocks: Measured blocks in document order
        geometry: Physical page geometry
        max_spacer_mm: Largest spacer the orphan pass may insert
            (defaults to ``orphan_spacer_max_mm`` from settings)

    Returns:
        Placed blocks, spacers included, in drawing order
    """
    if max_spacer_mm is None:
        max_spacer_mm = get_settings().orphan_spacer_max_mm
    usable = geometry.usable_height

    placed: list[PlacedBlock] = []
    physical_page = 1
    y = 0.0

    start = 0
    while start < len(blocks):
        end = _unit_end(blocks, start)
        unit = blocks[start : end + 1]
        unit_height = sum(b.height for b in unit)
        remaining = usable - y

        if len(unit) > 1 and y > 0 and unit_height > remaining:
            if unit_height <= usable and remaining <= max_spacer_mm:
                spacer = FlowBlock(
                    kind="spacer",
                    height=remaining,
                    page_number=unit[0].page_number,
                    section=unit[0].section,
                )
                placed.append(PlacedBlock(block=spacer, physical_page=physical_page, y=y))
                physical_page += 1
                y = 0.0

        for block in unit:
            if block.kind == "gap":
                # gaps never open a page and never force a break
                if y == 0 or y + block.height > usable:
                    continue
            elif y > 0 and y + block.height > usable:
                physical_page += 1
                y = 0.0
            placed.append(PlacedBlock(block=block, physical_page=physical_page, y=y))
            y += block.height

        start = end + 1
    return placed


def physical_page_count(placed: list[PlacedBlock]) -> int:
    return max((p.physical_page for p in placed), default=0)
