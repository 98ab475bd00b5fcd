"""Logging and hook utilities for the sexpc driver."""

from . import hooks, logger

__all__ = ["hooks", "logger"]
