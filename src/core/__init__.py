"""
Core utilities shared across the application.
"""

from .logger import level_from_name, setup_logging

__all__ = ["level_from_name", "setup_logging"]
