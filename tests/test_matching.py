"""
Tests for pair and batch matching.

Includes the end-to-end downtown DC scenario, batch ranking and
tie-breaking, parallel scoring and input validation.
"""

from datetime import date

import pytest

from lease_engine.core import (
    Address,
    BrokerContact,
    BuildingClass,
    BuildingFeature,
    BuildingRequirement,
    GeoPoint,
    InvalidCoordinate,
    InvalidInput,
    LocationRequirement,
    Match,
    Opportunity,
    Property,
    QualificationTier,
    ScoringPolicy,
    ScoringWeights,
    SpaceRequirement,
    miles_to_km,
    rank_matches,
    score_batch,
    score_pair,
    validate_property,
)
from lease_engine.core.matching import PARALLEL_THRESHOLD


# --- Test Data Fixtures ---

@pytest.fixture
def opportunity():
    """Downtown DC office requirement."""
    return Opportunity(
        opportunity_id="OPP-DC",
        location=LocationRequirement(center=GeoPoint(38.90, -77.03), radius_km=miles_to_km(10)),
        space=SpaceRequirement(min_sqft=15000, max_sqft=25000),
        building=BuildingRequirement(building_class=BuildingClass.A),
        occupancy_date=date(2025, 6, 1),
    )


@pytest.fixture
def prop():
    """Property at the requirement center meeting every requirement."""
    return Property(
        property_id="PROP-A",
        location=GeoPoint(38.90, -77.03),
        available_sqft=18000,
        building_class=BuildingClass.A,
        available_date=date(2025, 5, 1),
        broker=BrokerContact(closed_transactions=0),
    )


def make_property(property_id: str, sqft: int) -> Property:
    return Property(
        property_id=property_id,
        location=GeoPoint(38.90, -77.03),
        available_sqft=sqft,
        building_class=BuildingClass.A,
        available_date=date(2025, 5, 1),
        broker=BrokerContact(closed_transactions=0),
    )


class TestScorePair:
    """Test single pair scoring."""

    def test_end_to_end_scenario(self, opportunity, prop):
        match = score_pair(opportunity, prop)

        assert match.location.score == 100.0
        assert match.space.score == 100.0
        assert match.building.score == 100.0
        assert match.timeline.score == 100.0
        assert match.experience.score == 50.0
        assert match.overall_score == pytest.approx(92.5)
        assert match.grade == "A"
        assert match.tier == QualificationTier.COMPETITIVE
        assert match.competitive is True
        assert match.qualified is True

    def test_deterministic(self, opportunity, prop):
        first = score_pair(opportunity, prop)
        second = score_pair(opportunity, prop)
        assert first.to_dict() == second.to_dict()

    def test_versions_recorded(self, opportunity, prop):
        opportunity.version = 4
        prop.version = 7
        match = score_pair(opportunity, prop)
        assert match.cache_key == ("OPP-DC", 4, "PROP-A", 7)

    def test_invalid_coordinate_rejected(self, opportunity, prop):
        prop.location = GeoPoint(95.0, -77.03)
        with pytest.raises(InvalidCoordinate):
            score_pair(opportunity, prop)

    def test_min_exceeds_max_rejected(self, opportunity, prop):
        opportunity.space = SpaceRequirement(min_sqft=30000, max_sqft=20000)
        with pytest.raises(InvalidInput) as exc_info:
            score_pair(opportunity, prop)
        assert exc_info.value.field == "space"

    def test_negative_sqft_rejected(self, opportunity, prop):
        prop.available_sqft = -10
        with pytest.raises(InvalidInput):
            score_pair(opportunity, prop)

    def test_bad_weights_rejected(self, opportunity, prop):
        policy = ScoringPolicy(weights=ScoringWeights(experience=0.5))
        with pytest.raises(InvalidInput):
            score_pair(opportunity, prop, policy)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_sqft_rejected(self, opportunity, prop, value):
        prop.available_sqft = value
        with pytest.raises(InvalidInput) as exc_info:
            score_pair(opportunity, prop)
        assert exc_info.value.field == "available_sqft"

    def test_non_finite_requirement_rejected(self, opportunity, prop):
        opportunity.space = SpaceRequirement(min_sqft=float("nan"), max_sqft=25000)
        with pytest.raises(InvalidInput) as exc_info:
            score_pair(opportunity, prop)
        assert exc_info.value.field == "space.min_sqft"

    def test_unknown_feature_rejected(self, opportunity, prop):
        prop.features = {"helipad"}
        assert not validate_property(prop).is_valid
        with pytest.raises(InvalidInput):
            score_pair(opportunity, prop)

    def test_sparse_building_table(self, opportunity, prop):
        policy = ScoringPolicy.from_dict({"building_class_table": {"0": 100, "2": 20}})
        prop.building_class = BuildingClass.B
        match = score_pair(opportunity, prop, policy)
        assert match.building.score == 100.0

    def test_out_of_range_policy_rejected(self, opportunity, prop):
        policy = ScoringPolicy.from_dict({"insufficient_data_score": 150})
        with pytest.raises(InvalidInput):
            score_pair(opportunity, prop, policy)

    def test_missing_data_degrades(self, opportunity):
        bare = Property(property_id="PROP-BARE")
        match = score_pair(opportunity, bare)
        for score in match.category_scores.values():
            assert score.insufficient_data
            assert score.score == 50.0
        assert match.overall_score == pytest.approx(50.0)
        assert match.tier == QualificationTier.UNQUALIFIED

    def test_response_shape(self, opportunity, prop):
        response = score_pair(opportunity, prop).to_response()
        for key in [
            "opportunityId", "propertyId", "overallScore", "grade", "tier",
            "qualified", "competitive", "locationScore", "spaceScore",
            "buildingScore", "timelineScore", "experienceScore", "reasons",
            "strengths", "weaknesses", "recommendations", "disqualifiers",
        ]:
            assert key in response
        assert response["tier"] == "competitive"
        assert set(response["reasons"]) == {"location", "space", "building", "timeline", "experience"}


class TestScoreBatch:
    """Test batch scoring and ranking."""

    def test_sorted_by_score_descending(self, opportunity):
        props = [
            make_property("P-1", 8000),
            make_property("P-2", 20000),
            make_property("P-3", 12000),
        ]
        matches = score_batch(opportunity, props)
        assert [m.property_id for m in matches] == ["P-2", "P-3", "P-1"]
        scores = [m.overall_score for m in matches]
        assert scores == sorted(scores, reverse=True)

    def test_ties_broken_by_property_id(self, opportunity):
        props = [make_property(pid, 20000) for pid in ["P-C", "P-A", "P-B"]]
        matches = score_batch(opportunity, props)
        assert [m.property_id for m in matches] == ["P-A", "P-B", "P-C"]

    def test_empty_batch(self, opportunity):
        assert score_batch(opportunity, []) == []

    def test_min_score_filter(self, opportunity):
        props = [make_property("P-1", 8000), make_property("P-2", 20000)]
        matches = score_batch(opportunity, props, min_score=90.0)
        assert [m.property_id for m in matches] == ["P-2"]

    def test_invalid_record_fails_before_scoring(self, opportunity):
        props = [make_property("P-1", 20000), make_property("P-2", 20000)]
        props[1].location = GeoPoint(0.0, 200.0)
        with pytest.raises(InvalidInput):
            score_batch(opportunity, props)

    def test_parallel_matches_sequential(self, opportunity):
        count = PARALLEL_THRESHOLD + 6
        props = [make_property(f"P-{i:03d}", 5000 + i * 500) for i in range(count)]

        parallel = score_batch(opportunity, props, max_workers=4)
        sequential = score_batch(opportunity, props, max_workers=1)

        assert len(parallel) == count
        assert [m.to_dict() for m in parallel] == [m.to_dict() for m in sequential]

    def test_batch_matches_pair_scores(self, opportunity, prop):
        batch = score_batch(opportunity, [prop])
        assert batch[0].to_dict() == score_pair(opportunity, prop).to_dict()


class TestRankMatches:
    """Test ranking helper."""

    def test_rank(self, opportunity):
        matches = [score_pair(opportunity, make_property(pid, sqft))
                   for pid, sqft in [("B", 20000), ("A", 20000), ("C", 9000)]]
        ranked = rank_matches(matches)
        assert [m.property_id for m in ranked] == ["A", "B", "C"]
        assert all(isinstance(m, Match) for m in ranked)


class TestDisqualifiers:
    """Test hard requirement failures reported next to the tier."""

    def test_clean_match_has_none(self, opportunity, prop):
        assert score_pair(opportunity, prop).disqualifiers == []

    def test_state_mismatch(self, opportunity, prop):
        opportunity.location = LocationRequirement(state="DC")
        prop.address = Address(city="Arlington", state="VA")
        assert score_pair(opportunity, prop).disqualifiers == ["Property not in required state"]

    def test_far_outside_delineated_area(self, opportunity, prop):
        prop.location = GeoPoint(40.0, -77.03)
        match = score_pair(opportunity, prop)
        assert match.location.score == 0.0
        assert "Property far outside the delineated area" in match.disqualifiers

    def test_significantly_undersized(self, opportunity, prop):
        prop.available_sqft = 11000  # More than 20% under 15,000
        assert "Property significantly under minimum size requirement" in score_pair(opportunity, prop).disqualifiers
        prop.available_sqft = 12500
        assert score_pair(opportunity, prop).disqualifiers == []

    def test_ada_not_met_does_not_change_tier(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.A, ada_compliant=True)
        match = score_pair(opportunity, prop)
        assert match.disqualifiers == ["ADA accessibility requirement not met"]
        assert match.building.score == 70.0
        assert match.tier == QualificationTier.COMPETITIVE

    def test_scif_required(self, opportunity, prop):
        opportunity.building = BuildingRequirement(
            building_class=BuildingClass.A, features={BuildingFeature.SCIF_CAPABLE},
        )
        assert score_pair(opportunity, prop).disqualifiers == ["SCIF capability required but not available"]
        prop.features = {BuildingFeature.SCIF_CAPABLE}
        assert score_pair(opportunity, prop).disqualifiers == []

    def test_serialized(self, opportunity, prop):
        prop.available_sqft = 5000
        match = score_pair(opportunity, prop)
        assert match.to_dict()["disqualifiers"] == match.disqualifiers
        assert match.to_response()["disqualifiers"] == match.disqualifiers
