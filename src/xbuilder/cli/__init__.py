"""Command-line interface for xbuilder."""
