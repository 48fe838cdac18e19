"""
Batch pipeline: embed fetched items, then build the viewer.
"""

from .embed import build_snippet, build_text, embed_items
from .build import build, load_points

__all__ = ["build", "build_snippet", "build_text", "embed_items", "load_points"]
