"""
Base class for dataset loaders.
Defines the interface all loaders must implement.
"""

import logging
from abc import ABC, abstractmethod
from typing import Sequence

import pandas as pd

from doppelgangers.core.records import EmbeddingRecord
from doppelgangers.errors import VectorLengthMismatchError

logger = logging.getLogger(__name__)


class BaseDatasetLoader(ABC):
    """
    Abstract base class for embedded dataset loaders.

    All loaders return a list of EmbeddingRecord in source order. Every
    record in the list carries an embedding of the same length.
    """

    @abstractmethod
    def load(self) -> list[EmbeddingRecord]:
        """
        Load and return the dataset.

        Returns:
            List of EmbeddingRecord, index-aligned with the source
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique name for this dataset.

        Returns:
            String identifier for the dataset
        """
        pass

    def validate(self, records: list[EmbeddingRecord]) -> list[EmbeddingRecord]:
        """
        Check that every record shares the first record's vector length.

        A mismatch rejects the whole batch.

        Args:
            records: Records to validate

        Returns:
            The same records

        Raises:
            VectorLengthMismatchError: If any vector length differs
        """
        if not records:
            logger.warning(f"Dataset {self.name} is empty")
            return records

        expected = records[0].dimension
        offending = [i for i, r in enumerate(records) if r.dimension != expected]
        if offending:
            raise VectorLengthMismatchError(expected, offending)

        logger.info(f"Validated dataset: {len(records)} records, dimension {expected}")
        return records


def records_to_frame(records: Sequence) -> pd.DataFrame:
    """
    Tabulate item metadata (without embeddings) for display or export.

    Args:
        records: EmbeddingRecords or Points; only the shared metadata fields are read

    Returns:
        DataFrame with columns: url, title, body, number, state, type, files
    """
    columns = ["url", "title", "body", "number", "state", "type", "files"]
    rows = [
        {
            "url": r.url,
            "title": r.title,
            "body": r.body,
            "number": r.number,
            "state": r.state,
            "type": r.type,
            "files": ", ".join(r.files) if r.files else None,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=columns)


# Registry for available loaders
_LOADER_REGISTRY: dict[str, type[BaseDatasetLoader]] = {}


def register_loader(name: str):
    """
    Decorator to register a loader class.

    Usage:
        @register_loader("jsonl")
        class EmbeddingsJsonlLoader(BaseDatasetLoader):
            ...

    Raises:
        TypeError: If class doesn't inherit from BaseDatasetLoader
        ValueError: If name is already registered
    """
    def decorator(cls: type[BaseDatasetLoader]):
        if not issubclass(cls, BaseDatasetLoader):
            raise TypeError(f"{cls.__name__} must inherit from BaseDatasetLoader")
        if name in _LOADER_REGISTRY:
            raise ValueError(
                f"Loader '{name}' already registered by {_LOADER_REGISTRY[name].__name__}"
            )
        _LOADER_REGISTRY[name] = cls
        return cls
    return decorator


def get_loader(name: str, **kwargs) -> BaseDatasetLoader:
    """
    Instantiate a registered loader, e.g. get_loader("jsonl", path=...).

    Raises:
        ValueError: If no loader is registered under name
    """
    if name not in _LOADER_REGISTRY:
        raise ValueError(f"Unknown loader '{name}'. Available: {sorted(_LOADER_REGISTRY)}")
    return _LOADER_REGISTRY[name](**kwargs)


def list_loaders() -> list[str]:
    return sorted(_LOADER_REGISTRY)
