"""Paginated-document encoder - print-ready PDF built with fpdf2.

Pipeline: resolve sections → paginate → measure blocks → plan the print
flow (orphan pass included) → fetch remote images → draw. Drawing runs in
a worker thread; the snapshot passed in is never read again afterwards.
"""

import asyncio
import base64
import binascii
import io
import logging
from dataclasses import dataclass

import httpx
from fpdf import FPDF

from tripdoc.config import Settings, get_settings
from tripdoc.errors import DocumentRenderError
from tripdoc.export.formatting import (
    entry_line,
    format_money,
    latin1_safe,
    route_label,
    time_label,
)
from tripdoc.extract.transport import strip_html
from tripdoc.layout.pagination import paginate
from tripdoc.layout.print_flow import (
    FlowBlock,
    PageGeometry,
    PlacedBlock,
    card_height,
    measure_document,
    physical_page_count,
    plan_print_flow,
)
from tripdoc.layout.sections import resolve_sections
from tripdoc.layout.templates import TemplateSpec, clamp_items_per_page, get_template
from tripdoc.models.common import SectionKey, TemplateId
from tripdoc.models.item import ItineraryItem
from tripdoc.models.page import DayHeader, Page, PageFooter
from tripdoc.models.scope import Scope
from tripdoc.models.trip import PackingEntry, TripSnapshot

logger = logging.getLogger(__name__)

NAME_FONT_SIZE = {2: 13, 3: 12, 4: 11, 5: 10, 6: 10, 7: 9, 8: 9}
LINE_MM = 4.2
CARD_GAP_MM = 3.0
WHITE = (255, 255, 255)


@dataclass(frozen=True)
class RenderedDocument:
    """Output of the paginated-document encoder."""

    content: bytes
    page_count: int
    physical_pages: int


def layout_document(
    snapshot: TripSnapshot,
    scope: Scope,
    template: TemplateSpec,
    items_per_page: int,
    geometry: PageGeometry,
    settings: Settings,
) -> tuple[list[Page], list[PlacedBlock]]:
    """Logical pages and their placement on physical pages."""
    pages = paginate(resolve_sections(scope, snapshot), items_per_page)
    blocks = measure_document(pages, template, items_per_page, geometry)
    return pages, plan_print_flow(blocks, geometry, settings.orphan_spacer_max_mm)


# Assets


def is_fetchable(ref: str) -> bool:
    return ref.startswith(("http://", "https://", "data:"))


def decode_data_uri(ref: str) -> bytes:
    header, _, data = ref.partition(",")
    if not header.endswith(";base64"):
        raise ValueError("only base64 data URIs are supported")
    return base64.b64decode(data, validate=True)


async def fetch_assets(
    pages: list[Page],
    client: httpx.AsyncClient | None = None,
    timeout_s: float = 4.0,
) -> dict[str, bytes]:
    """Fetch every image referenced by an itinerary card.

    Raises:
        DocumentRenderError: naming the first page that references an
            image that could not be loaded
    """
    wanted: dict[str, Page] = {}
    for page in pages:
        for item in page.items:
            ref = item.details.image_ref
            if not ref:
                continue
            if not is_fetchable(ref):
                logger.debug("Skipping unresolvable image reference %r", ref)
                continue
            wanted.setdefault(ref, page)

    if not wanted:
        return {}

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)
        close_client = True

    async def fetch(ref: str, page: Page) -> tuple[str, bytes]:
        try:
            if ref.startswith("data:"):
                return ref, decode_data_uri(ref)
            response = await client.get(ref)
            response.raise_for_status()
            return ref, response.content
        except (httpx.HTTPError, ValueError, binascii.Error) as exc:
            raise DocumentRenderError(
                page.section.value, page.number, f"image {ref!r} unavailable: {exc}"
            ) from exc

    try:
        results = await asyncio.gather(*(fetch(ref, page) for ref, page in wanted.items()))
    finally:
        if close_client:
            await client.aclose()
    return dict(results)


# Drawing


class DocumentPainter:
    """Draws placed blocks onto an fpdf2 document."""

    def __init__(
        self,
        snapshot: TripSnapshot,
        template: TemplateSpec,
        geometry: PageGeometry,
        items_per_page: int,
        images: dict[str, bytes],
    ) -> None:
        self.snapshot = snapshot
        self.template = template
        self.geometry = geometry
        self.items_per_page = items_per_page
        self.images = images
        self.pdf = FPDF(orientation="P", unit="mm", format=(geometry.width, geometry.height))
        self.pdf.set_auto_page_break(auto=False)
        self.pdf.set_margins(geometry.margin, geometry.margin, geometry.margin)
        self.pdf.set_title(latin1_safe(snapshot.name))
        self._physical_page = 0

    @property
    def left(self) -> float:
        return self.geometry.margin

    @property
    def width(self) -> float:
        return self.geometry.usable_width

    def paint(self, placed: list[PlacedBlock]) -> bytes:
        for entry in placed:
            block = entry.block
            try:
                self._goto_page(entry.physical_page)
                self._draw(block, self.geometry.margin + entry.y)
            except Exception as exc:
                raise DocumentRenderError(block.section.value, block.page_number, str(exc)) from exc

        if self._physical_page == 0:
            self._goto_page(1)
            self._draw_cover(self.geometry.margin)

        return bytes(self.pdf.output())

    def _goto_page(self, number: int) -> None:
        while self._physical_page < number:
            self.pdf.add_page()
            self._physical_page += 1
            if self.template.page_fill != WHITE:
                self.pdf.set_fill_color(*self.template.page_fill)
                self.pdf.rect(0, 0, self.geometry.width, self.geometry.height, style="F")

    def _draw(self, block: FlowBlock, y: float) -> None:
        if block.kind == "cover":
            self._draw_cover(y)
        elif block.kind == "section_title":
            self._draw_section_title(y, block.payload)
        elif block.kind == "day_header":
            self._draw_day_header(y, block.height, block.payload)
        elif block.kind == "card":
            self._draw_card(y, block.payload)
        elif block.kind == "grid_row":
            self._draw_grid_row(y, block.section, block.payload)
        elif block.kind == "footer":
            self._draw_footer(y, block.payload)
        # gaps and spacers are blank

    # text helpers

    def _font(self, size: float, style: str = "") -> None:
        self.pdf.set_font(self.template.font_family, style, size)

    def _color(self, rgb: tuple[int, int, int]) -> None:
        self.pdf.set_text_color(*rgb)

    def _fit(self, text: str, width: float) -> str:
        text = latin1_safe(text)
        if self.pdf.get_string_width(text) <= width:
            return text
        while text and self.pdf.get_string_width(text + "...") > width:
            text = text[:-1]
        return text + "..."

    def _wrap(self, text: str, width: float, max_lines: int) -> list[str]:
        if max_lines <= 0:
            return []
        lines: list[str] = []
        current = ""
        truncated = False
        for word in latin1_safe(text).split():
            candidate = f"{current} {word}".strip()
            if self.pdf.get_string_width(candidate) <= width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = word
            if len(lines) == max_lines:
                truncated = True
                break
        if current and not truncated:
            if len(lines) < max_lines:
                lines.append(current)
            else:
                truncated = True
        lines = [self._fit(line, width) for line in lines]
        if truncated and lines and not lines[-1].endswith("..."):
            lines[-1] = self._fit(lines[-1] + " ...", width)
        return lines

    def _text(self, x: float, y: float, text: str) -> None:
        self.pdf.text(x, y, text)

    # blocks

    def _draw_cover(self, y: float) -> None:
        tpl = self.template
        snapshot = self.snapshot
        title_color = tpl.text
        if tpl.header_style == "banner":
            self.pdf.set_fill_color(*tpl.primary)
            self.pdf.rect(self.left, y, self.width, 24, style="F", round_corners=True, corner_radius=tpl.card_radius)
            title_color = tpl.page_fill if tpl.dark else WHITE
        elif tpl.header_style == "boxed":
            self.pdf.set_draw_color(*tpl.secondary)
            self.pdf.set_line_width(0.6)
            self.pdf.rect(self.left, y, self.width, 24, style="D", round_corners=True, corner_radius=tpl.card_radius)
        else:
            self.pdf.set_draw_color(*tpl.primary)
            self.pdf.set_line_width(0.5)
            self.pdf.line(self.left, y + 24, self.left + self.width, y + 24)

        self._font(18, "B")
        self._color(title_color)
        self._text(self.left + 5, y + 10, self._fit(snapshot.name, self.width - 10))

        place = ", ".join(part for part in (snapshot.city, snapshot.country) if part)
        dates = (
            f"{snapshot.start_date.isoformat()} - {snapshot.end_date.isoformat()}"
            if snapshot.start_date and snapshot.end_date
            else ""
        )
        subline = "  |  ".join(part for part in (place, dates) if part)
        if subline:
            self._font(10)
            self._text(self.left + 5, y + 18, self._fit(subline, self.width - 10))

    def _draw_section_title(self, y: float, label: str) -> None:
        tpl = self.template
        self._font(14, "B")
        self._color(tpl.primary)
        self._text(self.left, y + 7, latin1_safe(label))
        self.pdf.set_draw_color(*tpl.primary)
        self.pdf.set_line_width(0.5)
        self.pdf.line(self.left, y + 9, self.left + self.width, y + 9)

    def _draw_day_header(self, y: float, height: float, header: DayHeader) -> None:
        tpl = self.template
        if header.continuation:
            self._font(9, "I")
            self._color(tpl.muted)
            self._text(self.left, y + 5, f"Day {header.day_index} (continued) - {header.date}")
            return

        box_height = height - 3
        self.pdf.set_fill_color(*tpl.card_fill)
        self.pdf.set_draw_color(*tpl.primary)
        self.pdf.set_line_width(0.3)
        self.pdf.rect(self.left, y, self.width, box_height, style="DF", round_corners=True, corner_radius=tpl.card_radius)

        baseline = y + box_height / 2 + 1.5
        self._font(12 if tpl.date_density == "full" else 10, "B")
        self._color(tpl.primary)
        self._text(self.left + 4, baseline, f"DAY {header.day_index}  {header.date}")

        count = f"{header.item_count} item{'s' if header.item_count != 1 else ''}"
        self._font(9)
        self._color(tpl.muted)
        self._text(self.left + self.width - 4 - self.pdf.get_string_width(count), baseline, count)

    def _draw_card(self, y: float, item: ItineraryItem) -> None:
        tpl = self.template
        height = card_height(self.items_per_page) - CARD_GAP_MM
        self.pdf.set_fill_color(*tpl.card_fill)
        self.pdf.set_draw_color(*tpl.muted)
        self.pdf.set_line_width(0.2)
        self.pdf.rect(self.left, y, self.width, height, style="DF", round_corners=True, corner_radius=tpl.card_radius)

        x = self.left + 4
        image = self.images.get(item.details.image_ref or "")
        if image is not None:
            side = height - 4
            self.pdf.image(io.BytesIO(image), x=self.left + 2, y=y + 2, w=side, h=side)
            x = self.left + side + 5
        width = self.left + self.width - 4 - x

        cursor = y + 5
        bottom = y + height - 2

        # time / route line
        if item.is_transport:
            arrival = item.end_time or "--:--"
            mode = item.transport_mode.value.replace("_", " ") if item.transport_mode else "transport"
            head = f"{time_label(item)} -> {arrival}   {mode.upper()}   {route_label(item)}"
        else:
            head = f"{time_label(item)}   {item.category.upper()}"
        self._font(8, "B")
        self._color(tpl.secondary)
        self._text(x, cursor, self._fit(head, width))

        # name
        cursor += LINE_MM + 1
        self._font(NAME_FONT_SIZE.get(self.items_per_page, 10), "B")
        self._color(tpl.text)
        self._text(x, cursor, self._fit(item.name or "(untitled)", width))

        if item.details.secondary_name and cursor + LINE_MM <= bottom:
            cursor += LINE_MM
            self._font(8, "I")
            self._color(tpl.muted)
            self._text(x, cursor, self._fit(item.details.secondary_name, width))

        # info row
        info = []
        if item.details.rating is not None:
            info.append(f"Rating {item.details.rating:.1f}/5")
        if item.cost:
            info.append(format_money(item.cost, item.currency_code))
        if item.details.gate:
            info.append(f"Gate {item.details.gate}")
        if item.details.platform:
            info.append(f"Platform {item.details.platform}")
        if item.details.duration_minutes:
            info.append(f"{item.details.duration_minutes} min")
        if info and cursor + LINE_MM <= bottom:
            cursor += LINE_MM
            self._font(8)
            self._color(tpl.muted)
            self._text(x, cursor, self._fit("   ".join(info), width))

        tags = " ".join(f"#{tag}" for tag in item.details.tags)
        reserved = LINE_MM if tags else 0

        description = strip_html(item.details.description or "")
        if description:
            self._font(8)
            self._color(tpl.text)
            room = int((bottom - reserved - cursor) // LINE_MM)
            for line in self._wrap(description, width, room):
                cursor += LINE_MM
                self._text(x, cursor, line)

        if tags and cursor + LINE_MM <= bottom:
            self._font(7, "B")
            self._color(tpl.primary)
            self._text(x, bottom - 1, self._fit(tags, width))

    def _draw_grid_row(self, y: float, section: SectionKey, entries: tuple) -> None:
        tpl = self.template
        column = self.width / 2
        self._font(9)
        for position, entry in enumerate(entries):
            x = self.left + position * column
            self.pdf.set_draw_color(*tpl.muted)
            self.pdf.set_line_width(0.2)
            if section in (SectionKey.packing, SectionKey.shopping):
                # checkbox
                self.pdf.rect(x, y + 3, 3.5, 3.5, style="D")
                if isinstance(entry, PackingEntry) and entry.packed:
                    self.pdf.line(x, y + 3, x + 3.5, y + 6.5)
                text = entry.name if isinstance(entry, PackingEntry) else entry_line(section, entry)
            else:
                self.pdf.line(x, y + 9, x + column - 4, y + 9)
                text = entry_line(section, entry)
            self._color(tpl.text)
            self._text(x + 5.5, y + 6, self._fit(text, column - 9))

    def _draw_footer(self, y: float, footer: PageFooter) -> None:
        tpl = self.template
        self.pdf.set_draw_color(*tpl.muted)
        self.pdf.set_line_width(0.1)
        self.pdf.line(self.left, y + 1, self.left + self.width, y + 1)
        self._font(8, "B" if footer.kind == "end_of_day" else "")
        self._color(tpl.muted)
        text = latin1_safe(footer.text)
        self._text(self.left + (self.width - self.pdf.get_string_width(text)) / 2, y + 5.5, text)


async def render_document(
    snapshot: TripSnapshot,
    scope: Scope,
    template: TemplateId | str | None = None,
    items_per_page: int | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    include_images: bool = True,
    settings: Settings | None = None,
) -> RenderedDocument:
    """Render the snapshot as a paginated PDF.

    Args:
        snapshot: Detached export snapshot (never a live working copy)
        scope: Sections to include
        template: Template id; unknown ids fall back to the default
        items_per_page: Itinerary density, clamped to the configured range
        client: Optional httpx client for image fetches (for testing with mocks)
        include_images: Fetch and draw card images

    Returns:
        PDF bytes with logical and physical page counts

    Raises:
        DocumentRenderError: carrying the section and page that failed
    """
    settings = settings or get_settings()
    spec = get_template(template)
    density = clamp_items_per_page(items_per_page)
    geometry = PageGeometry.from_settings(settings)

    pages, placed = layout_document(snapshot, scope, spec, density, geometry, settings)

    images: dict[str, bytes] = {}
    if include_images:
        images = await fetch_assets(
            pages, client=client, timeout_s=settings.asset_fetch_timeout_ms / 1000
        )

    painter = DocumentPainter(snapshot, spec, geometry, density, images)
    content = await asyncio.to_thread(painter.paint, placed)

    return RenderedDocument(
        content=content,
        page_count=len(pages),
        physical_pages=max(physical_page_count(placed), 1),
    )
