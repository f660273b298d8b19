"""Configuration persistence."""
