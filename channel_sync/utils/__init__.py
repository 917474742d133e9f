"""Utility modules for the channel sync engine.

This package provides:
- logging: Configured logging with JSON/text output support
"""

from channel_sync.utils.logging import JsonFormatter, configure_root_logger

__all__ = [
    "JsonFormatter",
    "configure_root_logger",
]
