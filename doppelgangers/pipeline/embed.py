"""
Embedding pipeline: fetched items in, embeddings JSONL out.
"""

import json
import logging
import re
from pathlib import Path
from typing import Callable, Optional

from doppelgangers.embedders.base import BaseEmbedder
from doppelgangers.embedders.openai_embedder import OpenAIEmbedder
import config

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

# Metadata carried from the fetched item into the embeddings file
PASSTHROUGH_FIELDS = ("number", "state", "type", "files")


def build_text(title: str, body: Optional[str], max_chars: int = config.EMBED_MAX_CHARS) -> str:
    """Embedding input: title, blank line, body; truncated to max_chars."""
    body_text = (body or "").replace("\r\n", "\n").strip()
    return f"{title}\n\n{body_text}".strip()[:max_chars]


def build_snippet(body: Optional[str], body_chars: int = config.EMBED_BODY_CHARS) -> str:
    """Single-line body preview for display."""
    if not body:
        return ""
    return _WHITESPACE.sub(" ", body).strip()[:body_chars]


def read_items(path: Path) -> list[dict]:
    """
    Read fetched items from a JSON array file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON array
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Items file not found at {path}")
    with path.open("r", encoding="utf-8") as f:
        items = json.load(f)
    if not isinstance(items, list):
        raise ValueError(f"{path} must contain a JSON array of items")
    return items


def read_embedded_urls(path: Path) -> set[str]:
    """URLs already present in an embeddings file; unreadable lines are ignored."""
    path = Path(path)
    urls: set[str] = set()
    if not path.exists():
        return urls
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                item = json.loads(line)
            except ValueError:
                continue
            if isinstance(item, dict) and item.get("url"):
                urls.add(item["url"])
    return urls


def embed_items(
    input_path: Path,
    output_path: Path,
    model: str = config.OPENAI_MODEL,
    batch_size: int = config.OPENAI_BATCH_SIZE,
    max_chars: int = config.EMBED_MAX_CHARS,
    body_chars: int = config.EMBED_BODY_CHARS,
    resume: bool = True,
    embedder: Optional[BaseEmbedder] = None,
    progress_callback: Optional[Callable[[str], None]] = None
) -> int:
    """
    Embed fetched items and write one JSON record per line.

    Args:
        input_path: JSON array of {url, title, body, ...}
        output_path: Embeddings JSONL to write
        model: Embedding model name
        batch_size: Items per embedding request
        max_chars: Truncation length of the embedding input
        body_chars: Length of the stored body snippet
        resume: Append to output_path, skipping URLs it already holds
        embedder: Embedding backend (defaults to OpenAIEmbedder)
        progress_callback: Optional callable(message: str) for progress updates

    Returns:
        Number of items embedded in this run

    Raises:
        EmbeddingRequestError: If a batch keeps failing; earlier batches stay written
    """
    def log(msg: str):
        if progress_callback:
            progress_callback(msg)
        logger.info(msg)

    input_path = Path(input_path)
    output_path = Path(output_path)

    items = read_items(input_path)
    existing = read_embedded_urls(output_path) if resume else set()
    pending = [item for item in items if isinstance(item, dict) and item.get("url") and item["url"] not in existing]
    skipped = len(items) - len(pending)
    total = len(pending)

    if embedder is None:
        embedder = OpenAIEmbedder(model=model, batch_size=batch_size)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    processed = 0

    with output_path.open("a" if resume else "w", encoding="utf-8") as out:
        for start in range(0, total, batch_size):
            batch = pending[start:start + batch_size]
            inputs = []
            for item in batch:
                title = item.get("title") or ""
                text = build_text(title, item.get("body"), max_chars)
                inputs.append(text or title or item["url"])

            vectors = embedder.embed(inputs)

            for item, vector in zip(batch, vectors):
                record = {
                    "url": item["url"],
                    "title": item.get("title") or "",
                    "body": build_snippet(item.get("body"), body_chars),
                    "embedding": [float(v) for v in vector],
                }
                for key in PASSTHROUGH_FIELDS:
                    if item.get(key) is not None:
                        record[key] = item[key]
                out.write(json.dumps(record) + "\n")
                processed += 1
                if processed % 50 == 0 or processed == total:
                    log(f"Embedded {processed}/{total} items")
            # Completed batches must be on disk before the next request
            out.flush()

    log(f"Done. Embedded {processed}/{total} items, skipped {skipped}.")
    return processed
