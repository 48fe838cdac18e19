"""
Embedding record model shared by the loaders, the pipeline and the viewer.
"""

import math
from dataclasses import dataclass, asdict
from typing import Any, Optional

import config


@dataclass
class EmbeddingRecord:
    """
    One embedded issue or pull request.

    Optional attributes are None when the source did not provide them.
    Records without a state or type stay visible under every filter.
    """
    url: str
    title: str
    body: str
    embedding: list[float]
    number: Optional[int] = None
    state: Optional[str] = None      # "open" | "closed"
    type: Optional[str] = None       # "pr" | "issue"
    files: Optional[list[str]] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmbeddingRecord":
        """
        Build a record from a decoded JSON object.

        Raises:
            ValueError: If the embedding is missing, not a list of numbers
                or holds non-finite values
        """
        embedding = data.get("embedding")
        if not isinstance(embedding, list) or not embedding:
            raise ValueError("record has no embedding")
        try:
            vector = [float(v) for v in embedding]
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"embedding is not numeric: {e}") from e
        if not all(math.isfinite(v) for v in vector):
            raise ValueError("embedding contains NaN or infinite values")

        number = data.get("number")
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            number = None
        elif isinstance(number, float) and not math.isfinite(number):
            number = None
        files = data.get("files")

        return cls(
            url=str(data.get("url") or ""),
            title=str(data.get("title") or ""),
            body=str(data.get("body") or ""),
            embedding=vector,
            number=int(number) if number is not None else None,
            state=_normalize_choice(data.get("state"), (config.STATE_OPEN, config.STATE_CLOSED)),
            type=_normalize_type(data.get("type")),
            files=[str(f) for f in files] if isinstance(files, list) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSONL output, omitting absent optional fields."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}

    @property
    def dimension(self) -> int:
        return len(self.embedding)


def _normalize_choice(value: Any, choices: tuple[str, ...]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    return value if value in choices else None


def _normalize_type(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    if value in ("pr", "pull", "pull_request", "pullrequest"):
        return config.TYPE_PR
    if value == "issue":
        return config.TYPE_ISSUE
    return None
