"""Command-line interface for monorelease."""
