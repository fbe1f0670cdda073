"""
Utility functions
"""

from surtidores.utils.dates import utc_now

__all__ = [
    "utc_now",
]
