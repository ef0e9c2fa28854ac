"""In-memory working copy, identity and preview handle storage."""
