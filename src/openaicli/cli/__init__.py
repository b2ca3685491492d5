"""Command-line entry points for openaicli."""
