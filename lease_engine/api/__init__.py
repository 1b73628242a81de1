"""
API support module for Lease Match Engine.

Record storage with in-memory/JSON persistence and a versioned cache
for derived match results.
"""

from .cache import MatchCache, VersionedCache
from .storage import RecordStore, create_sample_records

__all__ = ["MatchCache", "VersionedCache", "RecordStore", "create_sample_records"]
