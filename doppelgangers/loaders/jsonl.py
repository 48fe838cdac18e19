"""
Newline-delimited JSON loader for embedded issues and pull requests.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from .base import BaseDatasetLoader, register_loader
from doppelgangers.core.records import EmbeddingRecord
import config

logger = logging.getLogger(__name__)


@register_loader("jsonl")
class EmbeddingsJsonlLoader(BaseDatasetLoader):
    """
    Loader for the embeddings JSONL written by the embed pipeline.

    Expected format, one object per line:
    - url, title, body: display metadata
    - embedding: list of floats
    - number, state, type, files: optional

    Blank lines are ignored. Lines that are not valid JSON or that lack a
    numeric embedding are skipped one at a time.
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize the JSONL loader.

        Args:
            path: Path to the JSONL file (defaults to config.EMBEDDINGS_PATH)
        """
        self.path = Path(path) if path else config.EMBEDDINGS_PATH

    @property
    def name(self) -> str:
        return self.path.stem

    def load(self) -> list[EmbeddingRecord]:
        """
        Read, parse and validate the JSONL file.

        Returns:
            Records in file order

        Raises:
            FileNotFoundError: If the file doesn't exist
            VectorLengthMismatchError: If embeddings differ in length
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Embeddings file not found at {self.path}")

        with self.path.open("r", encoding="utf-8") as f:
            records = parse_lines(f)

        return self.validate(records)

    def exists(self) -> bool:
        """Check if the embeddings file exists."""
        return self.path.exists()


def parse_lines(lines) -> list[EmbeddingRecord]:
    """
    Parse JSONL lines into records, skipping malformed ones.

    Args:
        lines: Iterable of text lines

    Returns:
        Parsed records in input order
    """
    records = []
    skipped = 0

    for line_no, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
            if not isinstance(data, dict):
                raise ValueError("line is not a JSON object")
            records.append(EmbeddingRecord.from_dict(data))
        except ValueError as e:
            skipped += 1
            logger.debug(f"Skipping line {line_no}: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed line(s)")

    return records
