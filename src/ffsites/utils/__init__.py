"""Utility functions for ffsites.

Example:
    >>> from ffsites.utils import setup_logging
    >>> setup_logging(verbosity=2)
"""

from ffsites.utils.logging import Timer, setup_logging

__all__ = [
    "Timer",
    "setup_logging",
]
