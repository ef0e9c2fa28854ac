"""Best-effort extraction of structured fields from free text."""
