"""Delegate identity-host user storage to a remote REST user directory."""

__version__ = "1.0.0"
