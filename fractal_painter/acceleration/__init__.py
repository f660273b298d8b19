"""Parallel drawing backends."""
