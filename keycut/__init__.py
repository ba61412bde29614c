"""Keycut — frame-exact video cutting with minimal re-encoding."""

__version__ = "0.1.0"
