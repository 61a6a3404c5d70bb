from .base import SORTABLE_KEYS, ListingStore, SnapshotListingStore
from .memory import InMemoryListingStore, JsonFileListingStore, write_listings_json
from .postgrest import PostgrestClient, PostgrestListingStore, filter_params

__all__ = [
    "ListingStore",
    "SnapshotListingStore",
    "SORTABLE_KEYS",
    "InMemoryListingStore",
    "JsonFileListingStore",
    "write_listings_json",
    "PostgrestClient",
    "PostgrestListingStore",
    "filter_params",
]
