"""
Embedding backend interface and registry.

The pipeline and the search client only talk to BaseEmbedder; concrete
backends register themselves by name.
"""

from abc import ABC, abstractmethod

import numpy as np


class BaseEmbedder(ABC):
    """
    Turns item text into fixed-length vectors.

    Implementations keep input order, report the width of the vectors they
    produce and raise EmbeddingRequestError once they stop retrying.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend and model identifier, e.g. "openai_text-embedding-3-small"."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Width of the vectors returned by embed()."""

    @abstractmethod
    def embed(self, texts: list[str]) -> np.ndarray:
        """
        Embed texts in one call.

        Args:
            texts: Item texts (title plus body) or search queries

        Returns:
            Array of shape (len(texts), dimension), row i belongs to texts[i]

        Raises:
            EmbeddingRequestError: If the backend gives up
        """

    def embed_single(self, text: str) -> np.ndarray:
        """Vector for one text, shape (dimension,)."""
        return self.embed([text])[0]


_EMBEDDERS: dict[str, type[BaseEmbedder]] = {}


def register_embedder(name: str):
    """Class decorator adding an embedder to the registry under name."""
    def decorator(cls: type[BaseEmbedder]):
        _EMBEDDERS[name] = cls
        return cls
    return decorator


def get_embedder(name: str, **kwargs) -> BaseEmbedder:
    """
    Instantiate a registered embedder.

    Raises:
        ValueError: If no embedder is registered under name
    """
    try:
        cls = _EMBEDDERS[name]
    except KeyError:
        raise ValueError(f"Unknown embedder '{name}'. Available: {sorted(_EMBEDDERS)}") from None
    return cls(**kwargs)


def list_embedders() -> list[str]:
    return sorted(_EMBEDDERS)
