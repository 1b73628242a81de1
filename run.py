#!/usr/bin/env python3
"""
Lease Match Engine - Demo

Demonstrates the core functionality:
- Opportunity and property validation
- Pair scoring with category breakdown, grade and tier
- Batch ranking of listings against one opportunity
- Neighborhood federal presence scoring

Run with: python run.py
"""

import json
import logging
from datetime import date

from lease_engine.core import (
    Address,
    BrokerContact,
    BuildingClass,
    BuildingRequirement,
    GeoPoint,
    LocationRequirement,
    Opportunity,
    Property,
    SpaceRequirement,
    km_to_miles,
    miles_to_km,
    score_batch,
    score_pair,
    validate_opportunity,
    validate_property,
)
from lease_engine.neighborhood import score_neighborhood
from lease_engine.api import RecordStore, create_sample_records


def create_sample_opportunity() -> Opportunity:
    """Create a downtown DC office requirement for demonstration."""
    return Opportunity(
        opportunity_id="OPP-DEMO-001",
        solicitation_number="47PC0025R0099",
        agency="General Services Administration",
        title="Office space - Washington, DC",
        location=LocationRequirement(
            state="DC",
            city="Washington",
            center=GeoPoint(38.90, -77.03),
            radius_km=miles_to_km(10),
        ),
        space=SpaceRequirement(min_sqft=15000, max_sqft=25000),
        building=BuildingRequirement(building_class=BuildingClass.A),
        occupancy_date=date(2025, 6, 1),
    )


def create_sample_property() -> Property:
    """Create a listing that fully meets the sample opportunity."""
    return Property(
        property_id="PROP-DEMO-001",
        name="Farragut Square Plaza",
        address=Address(street="900 17th St NW", city="Washington", state="DC", zip_code="20006"),
        location=GeoPoint(38.90, -77.03),
        available_sqft=18000,
        building_class=BuildingClass.A,
        available_date=date(2025, 5, 1),
        broker=BrokerContact(name="Jordan Hale", company="Metro Office Advisors", closed_transactions=0),
    )


def print_header(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def demo_validation():
    """Demonstrate record validation."""
    print_header("VALIDATION DEMO")

    opportunity = create_sample_opportunity()
    result = validate_opportunity(opportunity)
    print(f"\nOpportunity '{opportunity.opportunity_id}' valid: {result.is_valid}")

    print("\n--- Testing invalid property ---")
    invalid = Property(
        property_id="PROP-BAD",
        location=GeoPoint(120.0, -77.03),  # Invalid: latitude out of range
        available_sqft=-500,  # Invalid: negative
        min_divisible_sqft=2000,
    )
    result = validate_property(invalid)
    print(f"  Valid: {result.is_valid}")
    for err in result.errors:
        print(f"    - {err.field}: {err.message}")


def demo_pair_scoring():
    """Demonstrate scoring a single property."""
    print_header("PAIR SCORING DEMO")

    opportunity = create_sample_opportunity()
    prop = create_sample_property()
    match = score_pair(opportunity, prop)

    print(f"\n{prop.name} vs {opportunity.title}")
    print(f"  Overall: {match.overall_score:.2f}  Grade: {match.grade}  Tier: {match.tier.value}")
    for category, score in match.category_scores.items():
        print(f"    {category.value:<11} {score.score:6.1f}  {'; '.join(score.reasons)}")

    if match.strengths:
        print("  Strengths:")
        for s in match.strengths:
            print(f"    + {s}")
    if match.recommendations:
        print("  Recommendations:")
        for r in match.recommendations:
            print(f"    > {r}")


def demo_batch_scoring(storage: RecordStore):
    """Demonstrate ranking stored listings against an opportunity."""
    print_header("BATCH SCORING DEMO")

    opportunity = storage.get_opportunity("OPP-DC-0001")
    properties = storage.active_properties()

    print(f"\nScoring {len(properties)} active listings against {opportunity.opportunity_id}...\n")

    for match in score_batch(opportunity, properties):
        status = "QUALIFIED" if match.qualified else "-"
        print(f"[{match.grade}] {match.overall_score:6.2f} {match.property_id} ({match.tier.value}) {status}")
        for reason in match.disqualifiers:
            print(f"      ! {reason}")


def demo_neighborhood(storage: RecordStore):
    """Demonstrate neighborhood scoring."""
    print_header("NEIGHBORHOOD SCORE DEMO")

    result = score_neighborhood((38.8977, -77.0365), miles_to_km(2), storage.get_reference_properties())

    print(f"\nFederal presence within 2 miles of the White House: {result.score} ({result.label.value})")
    print(f"  Properties: {result.count}")
    for nearby in result.contributors:
        print(f"    {nearby.property_id}  {km_to_miles(nearby.distance_km):.2f} mi  {nearby.reference.agency}")

    print("\n--- Metrics ---")
    print(json.dumps(result.metrics.to_dict(), indent=2))

    print(f"\n--- Factors (composite {result.factors.composite}) ---")
    print(json.dumps(result.factors.to_dict(), indent=2))


def main():
    """Run all demos."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print_header("  LEASE MATCH ENGINE - DEMO")

    storage = RecordStore()
    create_sample_records(storage)

    demo_validation()
    demo_pair_scoring()
    demo_batch_scoring(storage)
    demo_neighborhood(storage)

    print_header("  DEMO COMPLETE")
    print("\nRun the API with: python serve.py")
    print()


if __name__ == "__main__":
    main()
