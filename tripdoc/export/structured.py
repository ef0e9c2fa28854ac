"""Structured-data encoder - pretty-printed JSON of the snapshot."""

import json
from typing import Any

from tripdoc.models.common import SectionKey
from tripdoc.models.scope import Scope
from tripdoc.models.trip import TripSnapshot

TRIP_FIELDS = ("name", "city", "country", "start_date", "end_date", "notes")


def scoped_payload(snapshot: TripSnapshot, scope: Scope) -> dict[str, Any]:
    """Trip metadata plus every in-scope section, out-of-scope ones omitted."""
    data = snapshot.model_dump(mode="json")
    payload: dict[str, Any] = {field: data[field] for field in TRIP_FIELDS}
    for key in scope.selected():
        payload[key.value] = data[key.value]
        if key == SectionKey.itinerary:
            payload["lodging"] = data["lodging"]
    return payload


def encode_structured(snapshot: TripSnapshot, scope: Scope) -> str:
    return json.dumps(scoped_payload(snapshot, scope), indent=2, ensure_ascii=False)
