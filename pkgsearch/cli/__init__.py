"""Command line interface for pkgsearch."""
