"""Utility functions and configurations."""

from .logger import logger, set_log_level, is_debug_enabled

__all__ = [
    "logger",
    "set_log_level",
    "is_debug_enabled"
]
