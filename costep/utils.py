"""
Utility functions for the costep library.
"""

import os

# Environment variable to control debug mode
DEBUG_DRIVER = os.environ.get("COSTEP_DEBUG", "").lower() in ("1", "true", "yes")


def describe(value: object, max_len: int = 80) -> str:
    """Short repr used in debug log lines."""
    text = repr(value)
    return text[:max_len] + "..." if len(text) > max_len else text


__all__ = [
    "DEBUG_DRIVER",
    "describe",
]
