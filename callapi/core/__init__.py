"""Core types, configuration and error values."""
