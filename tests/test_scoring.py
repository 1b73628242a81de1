"""
Tests for the five category scorers.

Each scorer maps an (opportunity, property) pair to 0-100 with reasons,
and degrades to the insufficient-data score instead of raising.
"""

import math
from datetime import date

import pytest

from lease_engine.core import (
    Address,
    BrokerContact,
    BuildingClass,
    BuildingFeature,
    BuildingRequirement,
    GeoPoint,
    LocationRequirement,
    Opportunity,
    Property,
    ScoreCategory,
    ScoringPolicy,
    SpaceRequirement,
    score_building,
    score_categories,
    score_experience,
    score_location,
    score_space,
    score_timeline,
)


# --- Test Data Fixtures ---

@pytest.fixture
def opportunity():
    """Opportunity with every requirement specified."""
    return Opportunity(
        opportunity_id="OPP-1",
        location=LocationRequirement(
            state="DC",
            city="Washington",
            center=GeoPoint(0.0, 0.0),
            radius_km=10.0,
        ),
        space=SpaceRequirement(min_sqft=15000, max_sqft=25000),
        building=BuildingRequirement(building_class=BuildingClass.A),
        occupancy_date=date(2025, 6, 1),
    )


@pytest.fixture
def prop():
    """Property that fully meets the fixture opportunity."""
    return Property(
        property_id="PROP-1",
        address=Address(city="Washington", state="DC"),
        location=GeoPoint(0.0, 0.0),
        available_sqft=18000,
        building_class=BuildingClass.A,
        available_date=date(2025, 5, 1),
        broker=BrokerContact(closed_transactions=0),
    )


# --- Location ---

class TestLocationScore:
    """Test location scoring."""

    def test_inside_radius(self, opportunity, prop):
        result = score_location(opportunity, prop)
        assert result.score == 100.0
        assert result.category == ScoreCategory.LOCATION
        assert "mi" in result.reasons[0]

    def test_outside_radius_decays(self, opportunity, prop):
        """Overshoot beyond the radius decays linearly toward zero."""
        prop.location = GeoPoint(0.0, 0.2)  # ~22.2 km from center
        result = score_location(opportunity, prop)
        overshoot = 22.239 - 10.0
        assert result.score == pytest.approx(100 * (1 - overshoot / 50.0), abs=0.1)
        assert "outside" in result.reasons[0]

    def test_far_outside_radius_is_zero(self, opportunity, prop):
        prop.location = GeoPoint(0.0, 2.0)
        assert score_location(opportunity, prop).score == 0.0

    def test_missing_coordinates_is_insufficient(self, opportunity, prop):
        prop.location = None
        result = score_location(opportunity, prop)
        assert result.insufficient_data
        assert result.score == 50.0
        assert result.reasons[0].startswith("insufficient data")

    def test_state_mismatch_is_zero(self, opportunity, prop):
        opportunity.location = LocationRequirement(state="DC", city="Washington")
        prop.address = Address(city="Arlington", state="VA")
        assert score_location(opportunity, prop).score == 0.0

    def test_exact_city_match(self, opportunity, prop):
        opportunity.location = LocationRequirement(state="DC", city="Washington")
        result = score_location(opportunity, prop)
        assert result.score == 100.0
        assert "Exact city match" in result.reasons[0]

    def test_state_match_city_mismatch(self, opportunity, prop):
        opportunity.location = LocationRequirement(state="MD", city="Baltimore")
        prop.address = Address(city="Rockville", state="md")
        assert score_location(opportunity, prop).score == 60.0

    def test_state_match_city_missing_is_insufficient(self, opportunity, prop):
        opportunity.location = LocationRequirement(state="DC", city="Washington")
        prop.address = Address(state="DC")
        result = score_location(opportunity, prop)
        assert result.insufficient_data
        assert result.score == 50.0
        assert result.reasons == ["insufficient data: property has no city"]

    def test_no_location_requirement(self, opportunity, prop):
        opportunity.location = LocationRequirement()
        result = score_location(opportunity, prop)
        assert result.insufficient_data
        assert result.score == 50.0


# --- Space ---

class TestSpaceScore:
    """Test square footage scoring."""

    def test_within_range(self, opportunity, prop):
        assert score_space(opportunity, prop).score == 100.0

    def test_at_bounds(self, opportunity, prop):
        prop.available_sqft = 15000
        assert score_space(opportunity, prop).score == 100.0
        prop.available_sqft = 25000
        assert score_space(opportunity, prop).score == 100.0

    def test_under_minimum(self, opportunity, prop):
        prop.available_sqft = 12000  # 20% short
        result = score_space(opportunity, prop)
        assert result.score == pytest.approx(80.0)
        assert "short" in result.reasons[0]

    def test_over_maximum(self, opportunity, prop):
        prop.available_sqft = 30000  # 20% over
        assert score_space(opportunity, prop).score == pytest.approx(90.0)

    def test_far_over_maximum_hits_floor(self, opportunity, prop):
        prop.available_sqft = 100000
        assert score_space(opportunity, prop).score == 25.0

    def test_oversize_penalized_less_than_undersize(self, opportunity, prop):
        prop.available_sqft = 30000
        over = score_space(opportunity, prop).score
        prop.available_sqft = 12000
        under = score_space(opportunity, prop).score
        assert over > under

    def test_divisible_block(self, opportunity, prop):
        prop.available_sqft = 40000
        prop.min_divisible_sqft = 20000
        result = score_space(opportunity, prop)
        assert result.score == 90.0
        assert any("subdivide" in r for r in result.reasons)

    def test_unknown_availability(self, opportunity, prop):
        prop.available_sqft = None
        result = score_space(opportunity, prop)
        assert result.insufficient_data
        assert result.score == 50.0

    def test_no_requirement(self, opportunity, prop):
        opportunity.space = SpaceRequirement()
        assert score_space(opportunity, prop).insufficient_data


# --- Building ---

class TestBuildingScore:
    """Test building class scoring."""

    def test_exact_class(self, opportunity, prop):
        assert score_building(opportunity, prop).score == 100.0

    def test_higher_class_satisfies_lower_requirement(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.C)
        assert score_building(opportunity, prop).score == 100.0

    def test_one_grade_below(self, opportunity, prop):
        prop.building_class = BuildingClass.B
        result = score_building(opportunity, prop)
        assert result.score == 60.0
        assert "1 grade below" in result.reasons[0]

    def test_two_grades_below(self, opportunity, prop):
        prop.building_class = BuildingClass.C
        assert score_building(opportunity, prop).score == 20.0

    def test_security_level_shortfall(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.A, security_level=3)
        prop.security_level = 1
        result = score_building(opportunity, prop)
        assert result.score == 60.0
        assert len(result.reasons) == 2

    def test_premium_class_parses_as_a(self):
        assert BuildingClass.parse("a+") == BuildingClass.A

    def test_unknown_class(self, opportunity, prop):
        prop.building_class = None
        result = score_building(opportunity, prop)
        assert result.insufficient_data
        assert result.score == 50.0

    def test_custom_table(self, opportunity, prop):
        policy = ScoringPolicy(building_class_table={0: 100.0, 1: 75.0, 2: 40.0})
        prop.building_class = BuildingClass.B
        assert score_building(opportunity, prop, policy).score == 75.0

    def test_sparse_table_uses_largest_defined_gap(self, opportunity, prop):
        policy = ScoringPolicy.from_dict({"building_class_table": {"0": 100, "2": 20}})
        policy.validate()
        prop.building_class = BuildingClass.B
        assert score_building(opportunity, prop, policy).score == 100.0
        prop.building_class = BuildingClass.C
        assert score_building(opportunity, prop, policy).score == 20.0

    def test_gap_beyond_table(self, opportunity, prop):
        policy = ScoringPolicy(building_class_table={0: 100.0, 1: 70.0})
        prop.building_class = BuildingClass.C
        assert score_building(opportunity, prop, policy).score == 70.0

    def test_ada_required_not_met(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.A, ada_compliant=True)
        prop.ada_compliant = False
        result = score_building(opportunity, prop)
        assert result.score == 70.0
        assert any("ADA" in r for r in result.reasons)

    def test_ada_unreported_counts_as_not_met(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.A, ada_compliant=True)
        assert score_building(opportunity, prop).score == 70.0
        prop.ada_compliant = True
        assert score_building(opportunity, prop).score == 100.0

    def test_public_transit_required(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.A, public_transit=True)
        assert score_building(opportunity, prop).score == 95.0
        prop.public_transit_access = True
        assert score_building(opportunity, prop).score == 100.0

    def test_missing_feature_costs_half_its_points(self, opportunity, prop):
        opportunity.building = BuildingRequirement(
            building_class=BuildingClass.A,
            features={BuildingFeature.SCIF_CAPABLE, BuildingFeature.CONFERENCE_CENTER},
        )
        result = score_building(opportunity, prop)
        assert result.score == 100.0 - 5 - 2
        assert "Missing required features: conference_center, scif_capable" in result.reasons

    def test_present_features_offset_class_gap(self, opportunity, prop):
        opportunity.building = BuildingRequirement(
            building_class=BuildingClass.A,
            features={BuildingFeature.FIBER, BuildingFeature.DATA_CENTER},
        )
        prop.building_class = BuildingClass.B
        prop.features = {BuildingFeature.FIBER, BuildingFeature.DATA_CENTER, BuildingFeature.CAFETERIA}
        assert score_building(opportunity, prop).score == 60.0 + 5 + 10

    def test_bonus_capped_at_100(self, opportunity, prop):
        opportunity.building = BuildingRequirement(
            building_class=BuildingClass.A, features={BuildingFeature.FIBER},
        )
        prop.features = {BuildingFeature.FIBER}
        assert score_building(opportunity, prop).score == 100.0

    def test_certifications_match_case_insensitively(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.A, certifications=["leed"])
        prop.building_class = BuildingClass.B
        prop.certifications = ["LEED Gold"]
        assert score_building(opportunity, prop).score == 65.0

    def test_missing_certification(self, opportunity, prop):
        opportunity.building = BuildingRequirement(building_class=BuildingClass.A, certifications=["Energy Star"])
        result = score_building(opportunity, prop)
        assert result.score == 97.0
        assert "Missing certifications: Energy Star" in result.reasons

    def test_requirements_without_class_still_scored(self, opportunity, prop):
        opportunity.building = BuildingRequirement(ada_compliant=True)
        prop.ada_compliant = True
        result = score_building(opportunity, prop)
        assert not result.insufficient_data
        assert result.score == 100.0

    def test_reasons_capped(self, opportunity, prop):
        opportunity.building = BuildingRequirement(
            building_class=BuildingClass.A,
            security_level=3,
            ada_compliant=True,
            public_transit=True,
            features={BuildingFeature.LOADING_DOCK},
            certifications=["LEED"],
        )
        prop.building_class = BuildingClass.C
        prop.security_level = 1
        result = score_building(opportunity, prop)
        assert result.score == 0.0
        assert len(result.reasons) == 3


# --- Timeline ---

class TestTimelineScore:
    """Test availability timeline scoring."""

    def test_available_early(self, opportunity, prop):
        result = score_timeline(opportunity, prop)
        assert result.score == 100.0
        assert "before" in result.reasons[0]

    def test_available_on_date(self, opportunity, prop):
        prop.available_date = date(2025, 6, 1)
        assert score_timeline(opportunity, prop).score == 100.0

    def test_delay_decays_linearly(self, opportunity, prop):
        prop.available_date = date(2025, 8, 30)  # 90 days late
        assert score_timeline(opportunity, prop).score == pytest.approx(50.0)

    def test_long_delay_is_zero(self, opportunity, prop):
        prop.available_date = date(2026, 6, 1)
        assert score_timeline(opportunity, prop).score == 0.0

    def test_missing_dates(self, opportunity, prop):
        prop.available_date = None
        assert score_timeline(opportunity, prop).insufficient_data
        opportunity.occupancy_date = None
        prop.available_date = date(2025, 5, 1)
        assert score_timeline(opportunity, prop).insufficient_data


# --- Experience ---

class TestExperienceScore:
    """Test broker track record scoring."""

    def test_zero_transactions_is_baseline(self, opportunity, prop):
        result = score_experience(opportunity, prop)
        assert result.score == 50.0
        assert not result.insufficient_data

    def test_unknown_record_is_insufficient(self, opportunity, prop):
        prop.broker = BrokerContact()
        result = score_experience(opportunity, prop)
        assert result.insufficient_data
        assert result.score == 50.0

    def test_experience_curve(self, opportunity, prop):
        prop.broker = BrokerContact(closed_transactions=3)
        expected = 50 + 50 * (1 - math.exp(-1))
        assert score_experience(opportunity, prop).score == pytest.approx(expected, abs=0.01)

    def test_monotonic_and_bounded(self, opportunity, prop):
        scores = []
        for closed in [0, 1, 2, 5, 10, 50]:
            prop.broker = BrokerContact(closed_transactions=closed)
            scores.append(score_experience(opportunity, prop).score)
        assert scores == sorted(scores)
        assert scores[-1] <= 100.0


# --- All Categories ---

class TestScoreCategories:
    """Test running all scorers together."""

    def test_all_categories_present(self, opportunity, prop):
        scores = score_categories(opportunity, prop)
        assert set(scores) == set(ScoreCategory)

    def test_scores_in_range_with_reasons(self, opportunity, prop):
        prop.available_sqft = 100000
        prop.building_class = BuildingClass.C
        prop.available_date = date(2027, 1, 1)
        for result in score_categories(opportunity, prop).values():
            assert 0.0 <= result.score <= 100.0
            assert 1 <= len(result.reasons) <= 3

    def test_to_dict(self, opportunity, prop):
        data = score_location(opportunity, prop).to_dict()
        assert data["category"] == "location"
        assert data["score"] == 100.0
        assert data["insufficient_data"] is False

    def test_unvalidated_default_score_is_clamped(self, opportunity, prop):
        policy = ScoringPolicy(insufficient_data_score=150.0)
        opportunity.occupancy_date = None
        result = score_timeline(opportunity, prop, policy)
        assert result.insufficient_data
        assert result.score == 100.0
