"""Plain-text summary encoder."""

from tripdoc.export.formatting import entry_line, time_label
from tripdoc.layout.sections import resolve_sections
from tripdoc.models.common import SectionKey
from tripdoc.models.scope import Scope
from tripdoc.models.trip import TripSnapshot


def _heading_lines(snapshot: TripSnapshot) -> list[str]:
    lines = [snapshot.name]
    place = ", ".join(part for part in (snapshot.city, snapshot.country) if part)
    if place:
        lines.append(place)
    if snapshot.start_date and snapshot.end_date:
        lines.append(f"{snapshot.start_date.isoformat()} - {snapshot.end_date.isoformat()}")
    return lines


def encode_text(snapshot: TripSnapshot, scope: Scope) -> str:
    """Summarize the trip as plain text.

    Days ascending, items in stored order, one ``<time> <name>`` line per
    item. Auxiliary sections follow as simple bullet lists.
    """
    lines = _heading_lines(snapshot)

    for section in resolve_sections(scope, snapshot):
        if section.key == SectionKey.itinerary:
            for day in section.days:
                if not day.items:
                    continue
                lines.append("")
                lines.append(f"Day {day.day_index} - {day.date}")
                lines.extend(f"{time_label(item)} {item.name}" for item in day.items)
            continue

        lines.append("")
        lines.append(section.label)
        lines.extend(f"- {entry_line(section.key, entry)}" for entry in section.entries)

    return "\n".join(lines) + "\n"
