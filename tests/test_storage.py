"""
Tests for record storage and the versioned match cache.
"""

from datetime import date

import pytest

from lease_engine.api import MatchCache, RecordStore, VersionedCache, create_sample_records
from lease_engine.core import (
    Address,
    BuildingClass,
    BuildingFeature,
    ListingStatus,
    Opportunity,
    Property,
    RecordNotFound,
    ScoringPolicy,
    SpaceRequirement,
    score_pair,
)
from lease_engine.neighborhood import ReferenceProperty


@pytest.fixture
def storage():
    """In-memory store loaded with sample records."""
    store = RecordStore()
    create_sample_records(store)
    return store


class TestRecordStore:
    """Test record storage."""

    def test_sample_records(self, storage):
        assert storage.count_opportunities() == 2
        assert storage.count_properties() == 4
        assert storage.count_reference_properties() == 5

    def test_sample_records_idempotent(self, storage):
        create_sample_records(storage)
        assert storage.count_properties() == 4

    def test_get_unknown_raises(self, storage):
        with pytest.raises(RecordNotFound) as exc_info:
            storage.get_opportunity("OPP-NOPE")
        assert str(exc_info.value) == "opportunity 'OPP-NOPE' not found"
        with pytest.raises(KeyError):
            storage.get_property("PROP-NOPE")

    def test_duplicate_create_raises(self, storage):
        with pytest.raises(ValueError):
            storage.create_opportunity(Opportunity(opportunity_id="OPP-DC-0001"))

    def test_update_bumps_version(self, storage):
        opp = storage.get_opportunity("OPP-DC-0001")
        assert opp.version == 1
        updated = Opportunity.from_dict(opp.to_dict())
        updated.space = SpaceRequirement(min_sqft=10000, max_sqft=20000)
        storage.update_opportunity(updated)
        assert storage.get_opportunity("OPP-DC-0001").version == 2

    def test_update_unknown_raises(self, storage):
        with pytest.raises(RecordNotFound):
            storage.update_property(Property(property_id="PROP-NOPE"))

    def test_active_properties_excludes_inactive(self, storage):
        ids = {p.property_id for p in storage.active_properties()}
        assert ids == {"PROP-0001", "PROP-0002", "PROP-0003"}

    def test_active_properties_filters(self, storage):
        assert [p.property_id for p in storage.active_properties(state="md")] == ["PROP-0003"]
        assert [p.property_id for p in storage.active_properties(state="DC", city="washington")] == [
            "PROP-0001"
        ]

    def test_status_filter(self, storage):
        leased = storage.get_properties(ListingStatus.LEASED)
        assert [p.property_id for p in leased] == ["PROP-0004"]

    def test_delete_property(self, storage):
        assert storage.delete_property("PROP-0002") is True
        assert storage.delete_property("PROP-0002") is False

    def test_json_persistence(self, tmp_path):
        path = tmp_path / "records.json"
        store = RecordStore(str(path))
        store.create_property(Property(
            property_id="PROP-X",
            address=Address(city="Richmond", state="VA"),
            available_sqft=9000,
            building_class=BuildingClass.B,
            available_date=date(2025, 9, 1),
            ada_compliant=True,
            features={BuildingFeature.FIBER, BuildingFeature.LOADING_DOCK},
            certifications=["LEED Silver"],
        ))
        store.add_reference_property(ReferenceProperty("REF-X", 37.54, -77.43))

        reloaded = RecordStore(str(path))
        prop = reloaded.get_property("PROP-X")
        assert prop.building_class == BuildingClass.B
        assert prop.available_date == date(2025, 9, 1)
        assert prop.ada_compliant is True
        assert prop.features == {BuildingFeature.FIBER, BuildingFeature.LOADING_DOCK}
        assert prop.certifications == ["LEED Silver"]
        assert reloaded.count_reference_properties() == 1

    def test_corrupt_file_is_ignored(self, tmp_path, caplog):
        path = tmp_path / "records.json"
        path.write_text("{not json")
        store = RecordStore(str(path))
        assert store.is_empty()
        assert "Could not load records" in caplog.text


class TestVersionedCache:
    """Test the versioned key-value cache."""

    def test_get_put(self):
        cache = VersionedCache()
        cache.put("k", 1, "value")
        assert cache.get("k", 1) == "value"

    def test_version_change_is_miss(self):
        cache = VersionedCache()
        cache.put("k", 1, "old")
        assert cache.get("k", 2) is None

    def test_get_or_compute(self):
        cache = VersionedCache()
        calls = []

        def compute():
            calls.append(1)
            return "computed"

        assert cache.get_or_compute("k", 1, compute) == "computed"
        assert cache.get_or_compute("k", 1, compute) == "computed"
        assert len(calls) == 1

        cache.get_or_compute("k", 1, compute, force_refresh=True)
        assert len(calls) == 2

        cache.get_or_compute("k", 2, compute)
        assert len(calls) == 3

    def test_invalidate_and_clear(self):
        cache = VersionedCache()
        cache.put("a", 1, "x")
        cache.put("b", 1, "y")
        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0


class TestMatchCache:
    """Test match caching keyed on both record versions."""

    def test_cached_match_reused(self, storage):
        cache = MatchCache()
        opp = storage.get_opportunity("OPP-DC-0001")
        prop = storage.get_property("PROP-0001")

        first = cache.get_or_score(opp, prop, score_pair)
        second = cache.get_or_score(opp, prop, score_pair)
        assert first is second

    def test_version_bump_invalidates(self, storage):
        cache = MatchCache()
        opp = storage.get_opportunity("OPP-DC-0001")
        prop = storage.get_property("PROP-0001")
        first = cache.get_or_score(opp, prop, score_pair)

        updated = Property.from_dict(prop.to_dict())
        updated.available_sqft = 40000
        storage.update_property(updated)

        second = cache.get_or_score(opp, storage.get_property("PROP-0001"), score_pair)
        assert second is not first
        assert second.property_version == 2
        assert second.space.score < first.space.score

    def test_policy_change_invalidates(self, storage):
        cache = MatchCache()
        opp = storage.get_opportunity("OPP-DC-0001")
        prop = storage.get_property("PROP-0001")
        strict = ScoringPolicy(grade_a_threshold=99.5)

        default_match = cache.get_or_score(opp, prop, score_pair)
        strict_match = cache.get_or_score(opp, prop, lambda o, p: score_pair(o, p, strict), policy=strict)
        assert strict_match is not default_match
        assert default_match.grade == "A"
        assert strict_match.grade == "B"

        again = cache.get_or_score(opp, prop, score_pair)
        assert again is not strict_match
        assert again.grade == "A"

    def test_put_match_records_policy(self, storage):
        cache = MatchCache()
        opp = storage.get_opportunity("OPP-DC-0001")
        prop = storage.get_property("PROP-0001")
        strict = ScoringPolicy(grade_a_threshold=99.5)
        match = score_pair(opp, prop, strict)

        cache.put_match(match, strict)
        assert cache.get_match(opp, prop) is None
        assert cache.get_match(opp, prop, strict) is match

    def test_invalidate_by_record(self, storage):
        cache = MatchCache()
        opp = storage.get_opportunity("OPP-DC-0001")
        for prop in storage.active_properties():
            cache.put_match(score_pair(opp, prop))
        assert len(cache) == 3
        assert cache.invalidate_property("PROP-0002") == 1
        assert cache.invalidate_opportunity("OPP-DC-0001") == 2
        assert len(cache) == 0
