"""Utilities for carousel."""

from .errors import CarouselError, ErrorHandler
from .logging import setup_logging
from .timeutil import parse_duration, parse_timestamp, utcnow

__all__ = ["CarouselError", "ErrorHandler", "setup_logging", "parse_duration", "parse_timestamp", "utcnow"]
