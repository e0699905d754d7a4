"""Sample sources for training runs."""

# Ensure built-in tables register themselves when the package is imported.
from . import tables as _tables  # noqa: F401
from .registry import DatasetSpec, Sample, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetSpec",
    "Sample",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
