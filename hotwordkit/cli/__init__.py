"""Command line interface for hotwordkit."""
