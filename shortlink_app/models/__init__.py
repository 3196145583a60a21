"""
Database models for the URL shortener.

Link holds the short code mapping; Visit holds one row per redirect
and is removed together with its Link (ON DELETE CASCADE).
"""

from .link import Link
from .visit import Visit

__all__ = ["Link", "Visit"]
