"""Command line interface for pulpit."""
