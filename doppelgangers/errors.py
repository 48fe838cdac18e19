"""
Exception types raised across Doppelgangers.
"""


class VectorLengthMismatchError(ValueError):
    """Raised when embeddings in one batch do not share a single length."""

    def __init__(self, expected: int, offending: list[int]):
        self.expected = expected
        self.offending = offending
        preview = ", ".join(str(i) for i in offending[:10])
        if len(offending) > 10:
            preview += ", ..."
        super().__init__(
            f"Embedding length mismatch: expected {expected} values, "
            f"{len(offending)} record(s) differ (indices {preview})"
        )


class EmbeddingRequestError(RuntimeError):
    """Raised when the embedding service keeps failing after all retries."""

    def __init__(self, message: str, attempts: int = 1):
        self.attempts = attempts
        super().__init__(message)


class MissingCredentialError(RuntimeError):
    """Raised when a search is submitted without a session API key."""


class SearchBusyError(RuntimeError):
    """Raised when a search is submitted while another one is pending."""


class GitHubFetchError(RuntimeError):
    """Raised when the GitHub CLI fails to list repository items."""
