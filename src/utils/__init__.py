"""Utility functions."""

from src.utils.system_log import log_event

__all__ = [
    "log_event",
]
