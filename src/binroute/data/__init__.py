"""Bin and collector storage."""

from .sources import (
    DataSource,
    FallbackDataSource,
    InMemoryDataSource,
    LookupResult,
    SupabaseDataSource,
    build_data_source,
)

__all__ = [
    "DataSource",
    "FallbackDataSource",
    "InMemoryDataSource",
    "LookupResult",
    "SupabaseDataSource",
    "build_data_source",
]
