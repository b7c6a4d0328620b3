"""Fetch a buildpack from the buildpack registry and run it locally."""
