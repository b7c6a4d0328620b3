"""Command line interface for function-run."""
