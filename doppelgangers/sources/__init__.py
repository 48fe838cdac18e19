"""
Item sources for Doppelgangers.
"""

from .github import fetch_items, parse_repo

__all__ = ["fetch_items", "parse_repo"]
