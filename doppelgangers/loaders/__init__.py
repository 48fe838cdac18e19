"""
Dataset loaders for Doppelgangers.
"""

from .base import BaseDatasetLoader, get_loader, list_loaders, register_loader, records_to_frame
from .jsonl import EmbeddingsJsonlLoader, parse_lines

__all__ = [
    "BaseDatasetLoader",
    "get_loader",
    "list_loaders",
    "register_loader",
    "records_to_frame",
    "EmbeddingsJsonlLoader",
    "parse_lines",
]
