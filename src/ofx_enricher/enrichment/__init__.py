"""Payment reference resolution and description indexing."""

from .index import (
    DescriptionIndex,
    build_description_index,
    missing_descriptions,
    results_from_store,
)
from .resolver import ReferenceResolver
from .store import DiskResultStore, InMemoryResultStore, ResultStore
from .waves import iter_waves, run_in_waves

__all__ = [
    "DescriptionIndex",
    "build_description_index",
    "missing_descriptions",
    "results_from_store",
    "ReferenceResolver",
    "DiskResultStore",
    "InMemoryResultStore",
    "ResultStore",
    "iter_waves",
    "run_in_waves",
]
