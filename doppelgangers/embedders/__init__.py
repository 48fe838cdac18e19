"""
Embedding backends for Doppelgangers.
"""

from .base import BaseEmbedder, get_embedder, list_embedders, register_embedder
from .openai_embedder import OpenAIEmbedder

__all__ = ["BaseEmbedder", "OpenAIEmbedder", "get_embedder", "list_embedders", "register_embedder"]
