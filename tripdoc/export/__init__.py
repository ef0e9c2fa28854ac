"""Output encoders for the export snapshot."""
