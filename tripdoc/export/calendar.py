"""Calendar feed encoder (iCalendar text).

One timed event per itinerary item and one all-day span per lodging.
Times are floating local times, the way the itinerary stores them.
"""

import re
from datetime import date, datetime, time, timedelta, timezone

from tripdoc.config import Settings, get_settings
from tripdoc.export.formatting import format_money, route_label
from tripdoc.extract.transport import strip_html
from tripdoc.models.item import ItineraryItem
from tripdoc.models.trip import Lodging, TripSnapshot, parse_day

CRLF = "\r\n"
FOLD_LIMIT_OCTETS = 75

_WHITESPACE_RE = re.compile(r"\s+")


def escape_text(value: str) -> str:
    """Escape a TEXT property value (backslash, comma, semicolon, newline)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace("\r", "\\n")
    )


def fold_line(line: str) -> str:
    """Fold a content line at 75 octets without splitting UTF-8 sequences."""
    if len(line.encode("utf-8")) <= FOLD_LIMIT_OCTETS:
        return line

    parts: list[str] = []
    current = ""
    current_len = 0
    limit = FOLD_LIMIT_OCTETS
    for char in line:
        char_len = len(char.encode("utf-8"))
        if current_len + char_len > limit:
            parts.append(current)
            current = ""
            current_len = 0
            limit = FOLD_LIMIT_OCTETS - 1  # continuation lines start with a space
        current += char
        current_len += char_len
    parts.append(current)
    return (CRLF + " ").join(parts)


def format_local(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%S")


def format_utc(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def event_window(
    day: date,
    start_time: str | None,
    end_time: str | None,
    settings: Settings | None = None,
) -> tuple[datetime, datetime]:
    """Resolve an item's start and end.

    Start defaults to the configured morning slot. A missing end, or one
    equal to the start, means start plus the default duration. An end
    earlier than an explicit start crosses midnight and lands on the next
    day; against the default slot it is ignored like a missing end.
    """
    settings = settings or get_settings()
    start_value = start_time or settings.calendar_default_start
    start = datetime.combine(day, time.fromisoformat(start_value))
    default_end = start + timedelta(minutes=settings.calendar_default_duration_min)

    if not end_time or end_time == start_value:
        return start, default_end
    end = datetime.combine(day, time.fromisoformat(end_time))
    if end < start:
        if not start_time:
            return start, default_end
        end += timedelta(days=1)
    return start, end


def event_uid(prefix: str, index: int, name: str, domain: str) -> str:
    compact = _WHITESPACE_RE.sub("", name) or "item"
    return f"{prefix}-{index}-{compact}@{domain}"


def _item_description(item: ItineraryItem) -> str:
    details = item.details
    parts: list[str] = []
    if details.description:
        parts.append(strip_html(details.description))
    if details.insight:
        parts.append(f"Insight: {details.insight}")
    if item.cost:
        parts.append(f"Cost: {format_money(item.cost, item.currency_code)}")
    if details.booking_url:
        parts.append(f"Booking: {details.booking_url}")
    if details.flight_number:
        parts.append(f"Flight: {details.flight_number}")
    if details.seat:
        parts.append(f"Seat: {details.seat}")
    if details.confirmation_number:
        parts.append(f"Confirmation: {details.confirmation_number}")
    return "\n".join(part for part in parts if part)


def _lodging_description(lodging: Lodging) -> str:
    parts = [
        lodging.address or "",
        f"Check-in: {lodging.check_in_time}" if lodging.check_in_time else "",
        f"Check-out: {lodging.check_out_time}" if lodging.check_out_time else "",
        f"Room: {lodging.room_number}" if lodging.room_number else "",
        f"Booking: {lodging.booking_url}" if lodging.booking_url else "",
    ]
    return "\n".join(part for part in parts if part)


def item_event(
    date_key: str, index: int, item: ItineraryItem, stamp: str, settings: Settings
) -> list[str]:
    start, end = event_window(parse_day(date_key), item.start_time, item.end_time, settings)
    category = item.transport_mode.value if item.transport_mode else item.category
    location = item.details.location or route_label(item)
    return [
        "BEGIN:VEVENT",
        f"UID:{event_uid(date_key, index, item.name, settings.calendar_uid_domain)}",
        f"DTSTAMP:{stamp}",
        f"DTSTART:{format_local(start)}",
        f"DTEND:{format_local(end)}",
        f"SUMMARY:{escape_text(item.name)}",
        f"LOCATION:{escape_text(location)}",
        f"DESCRIPTION:{escape_text(_item_description(item))}",
        f"CATEGORIES:{escape_text(category or item.kind.value)}",
        "END:VEVENT",
    ]


def lodging_event(index: int, lodging: Lodging, stamp: str, settings: Settings) -> list[str]:
    """All-day event spanning the stay. Undated lodging yields no lines."""
    if lodging.check_in is None:
        return []
    check_out = lodging.check_out
    if check_out is None or check_out <= lodging.check_in:
        check_out = lodging.check_in + timedelta(days=1)
    return [
        "BEGIN:VEVENT",
        f"UID:{event_uid('lodging', index, lodging.name, settings.calendar_uid_domain)}",
        f"DTSTAMP:{stamp}",
        f"DTSTART;VALUE=DATE:{lodging.check_in.strftime('%Y%m%d')}",
        f"DTEND;VALUE=DATE:{check_out.strftime('%Y%m%d')}",
        f"SUMMARY:{escape_text('Stay: ' + lodging.name)}",
        f"LOCATION:{escape_text(lodging.address or '')}",
        f"DESCRIPTION:{escape_text(_lodging_description(lodging))}",
        "CATEGORIES:accommodation",
        "END:VEVENT",
    ]


def encode_calendar(
    snapshot: TripSnapshot,
    *,
    generated_at: datetime | None = None,
    calendar_name: str | None = None,
    settings: Settings | None = None,
) -> str:
    """Encode itinerary items and lodging as an iCalendar feed.

    Auxiliary lists never produce events, whatever the export scope.
    """
    settings = settings or get_settings()
    stamp = format_utc(generated_at or datetime.now(timezone.utc))

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{settings.calendar_prodid}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_text(calendar_name or snapshot.name)}",
    ]

    for date_key in snapshot.sorted_dates():
        for index, item in enumerate(snapshot.itinerary[date_key]):
            lines.extend(item_event(date_key, index, item, stamp, settings))

    for index, lodging in enumerate(snapshot.lodging):
        lines.extend(lodging_event(index, lodging, stamp, settings))

    lines.append("END:VCALENDAR")
    return CRLF.join(fold_line(line) for line in lines) + CRLF
