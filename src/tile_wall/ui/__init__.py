"""Textual UI components for Tile Wall."""
