"""Command-line interface for perfguard."""
