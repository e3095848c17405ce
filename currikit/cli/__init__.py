"""Command-line interface for currikit."""
