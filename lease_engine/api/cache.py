"""
Versioned result cache.

Stores derived results (matches, summaries) keyed by the record they
were computed from and that record's content version. A lookup with a
different version is a miss, so stale results are never served.
"""

import logging
import threading
from typing import Any, Callable, Hashable, Optional

from lease_engine.core import DEFAULT_POLICY, Match, Opportunity, Property, ScoringPolicy


logger = logging.getLogger(__name__)


class VersionedCache:
    """
    In-memory key-value cache with one slot per record key.

    Each slot remembers the version it was computed at; a get or put
    with a different version replaces it.
    """

    def __init__(self):
        self._entries: dict[Hashable, tuple[Hashable, Any]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, version: Hashable) -> Optional[Any]:
        """Get a cached value, or None if absent or computed at another version."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[0] != version:
                self.misses += 1
                return None
            self.hits += 1
            return entry[1]

    def put(self, key: Hashable, version: Hashable, value: Any) -> None:
        """Store a value for key at version."""
        with self._lock:
            self._entries[key] = (version, value)

    def get_or_compute(
        self,
        key: Hashable,
        version: Hashable,
        compute: Callable[[], Any],
        force_refresh: bool = False,
    ) -> Any:
        """
        Return the cached value, computing and storing it on a miss.

        Args:
            key: Record key
            version: Content version of the record(s) behind the value
            compute: Zero-argument callable producing the value
            force_refresh: Recompute even if a current entry exists

        Returns:
            The cached or freshly computed value
        """
        if not force_refresh:
            cached = self.get(key, version)
            if cached is not None:
                return cached

        # Computed outside the lock; concurrent misses may both compute
        value = compute()
        self.put(key, version, value)
        return value

    def invalidate(self, key: Hashable) -> bool:
        """
        Drop the entry for key.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_where(self, predicate: Callable[[Hashable], bool]) -> int:
        """Drop every entry whose key satisfies predicate."""
        with self._lock:
            stale = [k for k in self._entries if predicate(k)]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug("Invalidated %d cache entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class MatchCache(VersionedCache):
    """
    Cache of Match results keyed by (opportunity, property).

    The entry version combines both record versions with the scoring
    policy fingerprint, so a match computed under one policy is never
    served for another.
    """

    @staticmethod
    def key_for(opportunity: Opportunity, prop: Property) -> tuple[str, str]:
        return (opportunity.opportunity_id, prop.property_id)

    @staticmethod
    def version_for(
        opportunity: Opportunity,
        prop: Property,
        policy: Optional[ScoringPolicy] = None,
    ) -> tuple[int, int, str]:
        return (opportunity.version, prop.version, (policy or DEFAULT_POLICY).fingerprint())

    def get_match(
        self,
        opportunity: Opportunity,
        prop: Property,
        policy: Optional[ScoringPolicy] = None,
    ) -> Optional[Match]:
        return self.get(self.key_for(opportunity, prop), self.version_for(opportunity, prop, policy))

    def put_match(self, match: Match, policy: Optional[ScoringPolicy] = None) -> None:
        self.put(
            (match.opportunity_id, match.property_id),
            (match.opportunity_version, match.property_version, (policy or DEFAULT_POLICY).fingerprint()),
            match,
        )

    def get_or_score(
        self,
        opportunity: Opportunity,
        prop: Property,
        score: Callable[[Opportunity, Property], Match],
        force_refresh: bool = False,
        policy: Optional[ScoringPolicy] = None,
    ) -> Match:
        """
        Return a current cached Match or score the pair with score().

        policy must be the policy score() applies; it is part of the
        entry version.
        """
        return self.get_or_compute(
            self.key_for(opportunity, prop),
            self.version_for(opportunity, prop, policy),
            lambda: score(opportunity, prop),
            force_refresh=force_refresh,
        )

    def invalidate_opportunity(self, opportunity_id: str) -> int:
        """Drop every cached match for an opportunity."""
        return self.invalidate_where(lambda key: key[0] == opportunity_id)

    def invalidate_property(self, property_id: str) -> int:
        """Drop every cached match for a property."""
        return self.invalidate_where(lambda key: key[1] == property_id)
