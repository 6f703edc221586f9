"""Command-line interface for the features tool."""
