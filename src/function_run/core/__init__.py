"""Core buildpack resolution, fetching and lifecycle logic."""
