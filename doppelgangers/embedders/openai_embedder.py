"""
OpenAI embedding backend.
Uses text-embedding-3-small by default.
"""

import logging
import os
import time
from typing import Callable, Optional

import numpy as np
import openai
from openai import OpenAI
from dotenv import load_dotenv

from .base import BaseEmbedder, register_embedder
from doppelgangers.errors import EmbeddingRequestError
import config


# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Errors worth another attempt; anything else (bad key, bad request) fails at once
RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.InternalServerError,
)


@register_embedder("openai")
class OpenAIEmbedder(BaseEmbedder):
    """
    OpenAI embedding backend.

    Features:
    - Batches texts per request
    - Bounded retries with exponentially increasing delay
    - Terminal failures surface as EmbeddingRequestError
    """

    def __init__(
        self,
        model: str = config.OPENAI_MODEL,
        batch_size: int = config.OPENAI_BATCH_SIZE,
        api_key: Optional[str] = None,
        max_retries: int = config.EMBED_MAX_RETRIES,
        base_delay: float = config.EMBED_BASE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        client: Optional[OpenAI] = None
    ):
        """
        Initialize the OpenAI embedder.

        Args:
            model: OpenAI model name (default: text-embedding-3-small)
            batch_size: Number of texts per API call (default: 100)
            api_key: Optional API key (defaults to OPENAI_API_KEY env var)
            max_retries: Attempts per batch before giving up
            base_delay: Delay before the first retry, doubled each time
            sleep: Sleep function (replaceable in tests)
            client: Pre-built client; skips key lookup
        """
        self.model = model
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep

        if client is None:
            # Get API key from env if not provided
            api_key = api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError(
                    "OpenAI API key not found. "
                    "Set OPENAI_API_KEY in .env file or pass api_key parameter."
                )
            client = OpenAI(api_key=api_key, max_retries=0)

        self.client = client
        self._dimension = config.OPENAI_EMBEDDING_DIM

    @property
    def name(self) -> str:
        return f"openai_{self.model}"

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, texts: list[str]) -> np.ndarray:
        """
        Embed texts using the OpenAI API, one request per batch.

        Args:
            texts: List of text strings to embed

        Returns:
            np.ndarray of shape (len(texts), dimension)

        Raises:
            EmbeddingRequestError: If a batch fails permanently
        """
        if not texts:
            return np.array([]).reshape(0, self.dimension)

        cleaned_texts = [self._clean_text(t) for t in texts]

        all_embeddings = []
        for start in range(0, len(cleaned_texts), self.batch_size):
            batch = cleaned_texts[start:start + self.batch_size]
            all_embeddings.extend(self._embed_batch_with_retry(batch))

        embeddings = np.array(all_embeddings, dtype=np.float32)
        self._dimension = embeddings.shape[1]
        return embeddings

    def _embed_batch_with_retry(self, texts: list[str]) -> list[list[float]]:
        """
        Embed a batch, retrying transient failures.

        Args:
            texts: Batch of texts to embed

        Returns:
            List of embedding vectors in input order

        Raises:
            EmbeddingRequestError: After max_retries transient failures,
                or at once on a non-retryable error
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=texts
                )
                # Sort by index to ensure order matches input
                sorted_data = sorted(response.data, key=lambda x: x.index)
                return [item.embedding for item in sorted_data]

            except RETRYABLE_ERRORS as e:
                if attempt >= self.max_retries:
                    raise EmbeddingRequestError(
                        f"Embedding request failed after {attempt} attempts: {e}",
                        attempts=attempt,
                    ) from e
                delay = self.base_delay * (2 ** (attempt - 1))
                logger.warning(f"Embedding request failed ({e}); retrying in {delay:.1f}s")
                self._sleep(delay)

            except openai.OpenAIError as e:
                raise EmbeddingRequestError(f"Embedding request failed: {e}", attempts=attempt) from e

        raise EmbeddingRequestError(
            f"Failed to embed batch after {self.max_retries} attempts",
            attempts=self.max_retries,
        )

    def _clean_text(self, text: str, max_chars: int = 20000) -> str:
        """
        Clean and truncate text for embedding.

        Args:
            text: Raw text
            max_chars: Maximum characters (conservative limit for 8191 token model)

        Returns:
            Cleaned text
        """
        if not text:
            return " "  # Empty strings cause API errors

        text = str(text).strip()
        if len(text) > max_chars:
            text = text[:max_chars]

        return text or " "
