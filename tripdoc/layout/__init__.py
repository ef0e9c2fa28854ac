"""Section resolution, templates and pagination."""
