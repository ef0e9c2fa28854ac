"""Export JSON schemas for TripSource and TripSnapshot."""

import json
from pathlib import Path

from tripdoc.models import TripSnapshot, TripSource


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    # Export TripSource schema (what a host hands in)
    source_schema = TripSource.model_json_schema()
    source_path = schemas_dir / "TripSource.schema.json"
    with open(source_path, "w") as f:
        json.dump(source_schema, f, indent=2)
    print(f"Exported TripSource schema to {source_path}")

    # Export TripSnapshot schema (what an export or commit-back hands out)
    snapshot_schema = TripSnapshot.model_json_schema(mode="serialization")
    snapshot_path = schemas_dir / "TripSnapshot.schema.json"
    with open(snapshot_path, "w") as f:
        json.dump(snapshot_schema, f, indent=2)
    print(f"Exported TripSnapshot schema to {snapshot_path}")


if __name__ == "__main__":
    main()
