"""Utility functions and helpers."""

from .logging import setup_logging, get_logger
from .correlation import generate_correlation_id, get_correlation_id, set_correlation_id

__all__ = [
    "setup_logging",
    "get_logger",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]
