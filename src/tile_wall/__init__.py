"""Tile Wall: a six-up video wall controller."""
