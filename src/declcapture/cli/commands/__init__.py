"""Implementations of the declcapture CLI commands."""
