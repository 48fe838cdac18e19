"""
Semantic search over the loaded points.

Embeds a query with a session-held API key, ranks points by cosine
similarity and replaces the selection with the best matches.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np

from doppelgangers.core.points import Point
from doppelgangers.embedders.base import BaseEmbedder
from doppelgangers.embedders.openai_embedder import OpenAIEmbedder
from doppelgangers.errors import EmbeddingRequestError, MissingCredentialError, SearchBusyError
from doppelgangers.viewer.state import ViewerState
import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchHit:
    index: int
    similarity: float


def cosine_similarity(query: np.ndarray, vector: Optional[Sequence[float]]) -> float:
    """
    dot(q, e) / (|q| * |e|); -1 when there is no vector or either norm is zero.
    """
    if vector is None:
        return -1.0
    vector = np.asarray(vector, dtype=np.float64)
    if vector.shape != query.shape:
        return -1.0
    denominator = np.linalg.norm(query) * np.linalg.norm(vector)
    if denominator == 0:
        return -1.0
    return float(np.dot(query, vector) / denominator)


def rank_by_similarity(
    query: Sequence[float],
    points: list[Point],
    top_k: int = config.SEARCH_TOP_K
) -> list[SearchHit]:
    """
    Best matches for a query vector.

    Points without an embedding score -1. Only strictly positive scores
    are kept, highest first, at most top_k of them.
    """
    query = np.asarray(query, dtype=np.float64)
    scored = [SearchHit(i, cosine_similarity(query, p.embedding)) for i, p in enumerate(points)]
    # Stable sort keeps index order among ties
    scored.sort(key=lambda hit: hit.similarity, reverse=True)
    return [hit for hit in scored if hit.similarity > 0][:top_k]


def default_embedder_factory(api_key: str) -> BaseEmbedder:
    return OpenAIEmbedder(api_key=api_key)


class SearchClient:
    """
    Query-by-meaning for the viewer.

    The API key lives only on this object for the session; it is never
    written anywhere and is dropped whenever a request fails.
    """

    def __init__(
        self,
        embedder_factory: Callable[[str], BaseEmbedder] = default_embedder_factory,
        top_k: int = config.SEARCH_TOP_K
    ):
        self._embedder_factory = embedder_factory
        self.top_k = top_k
        self._credential: Optional[str] = None

    @property
    def has_credential(self) -> bool:
        return self._credential is not None

    def set_credential(self, api_key: str) -> None:
        api_key = api_key.strip()
        self._credential = api_key or None

    def clear_credential(self) -> None:
        self._credential = None

    def submit(self, query: str, state: ViewerState, points: list[Point]) -> Optional[list[SearchHit]]:
        """
        Run a search and replace the selection with its results.

        Args:
            query: Free text
            state: Viewer state whose selection is replaced on success
            points: Loaded points (with embeddings)

        Returns:
            Ranked hits, or None if the query was empty or the request failed.
            On failure the error is recorded on the state, the credential is
            discarded and the selection is left alone.

        Raises:
            SearchBusyError: If another search is still pending
            MissingCredentialError: If no API key has been provided
        """
        query = query.strip()
        if not query:
            return None
        if state.search_pending:
            raise SearchBusyError("A search is already running")
        if self._credential is None:
            raise MissingCredentialError("An OpenAI API key is required to search")

        state.search_pending = True
        try:
            embedder = self._embedder_factory(self._credential)
            query_vector = embedder.embed_single(query)
        except (EmbeddingRequestError, ValueError) as e:
            logger.warning(f"Search failed: {e}")
            state.set_error(f"Search failed: {e}")
            self.clear_credential()
            return None
        finally:
            state.search_pending = False

        hits = rank_by_similarity(query_vector, points, self.top_k)
        state.search_order = [hit.index for hit in hits]
        state.selected = {hit.index for hit in hits}
        state.clear_error()
        logger.info(f"Search matched {len(hits)} item(s)")
        return hits
