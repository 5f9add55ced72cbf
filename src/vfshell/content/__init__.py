"""Bundled content packages."""
