"""
Category scorers for matching properties against opportunities.

Five independent scorers (location, space, building, timeline,
experience) each map an (opportunity, property) pair to a 0-100
CategoryScore with a few human-readable reasons. Scorers never raise:
a dimension that cannot be evaluated degrades to the policy's
insufficient-data score.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .geo import distance, km_to_miles
from .listing import Property
from .opportunity import Opportunity
from .policy import DEFAULT_POLICY, ScoringPolicy


logger = logging.getLogger(__name__)

MAX_REASONS = 3


class ScoreCategory(Enum):
    """Categories of scoring factors."""

    LOCATION = "location"
    SPACE = "space"
    BUILDING = "building"
    TIMELINE = "timeline"
    EXPERIENCE = "experience"


@dataclass
class CategoryScore:
    """Score for one category of an (opportunity, property) pair."""

    category: ScoreCategory
    score: float  # 0.0 to 100.0
    reasons: list[str] = field(default_factory=list)
    insufficient_data: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "category": self.category.value,
            "score": round(self.score, 2),
            "reasons": list(self.reasons),
            "insufficient_data": self.insufficient_data,
        }


def _clamp(score: float) -> float:
    return max(0.0, min(100.0, score))


def _linear_decay(value: float, limit: float) -> float:
    """100 at value 0, falling linearly to 0 at limit and beyond."""
    if value <= 0:
        return 100.0
    return max(0.0, 100.0 * (1.0 - value / limit))


def _result(category: ScoreCategory, score: float, *reasons: str) -> CategoryScore:
    return CategoryScore(
        category=category,
        score=round(_clamp(score), 2),
        reasons=list(reasons[:MAX_REASONS]),
    )


def _insufficient(category: ScoreCategory, policy: ScoringPolicy, detail: str) -> CategoryScore:
    return CategoryScore(
        category=category,
        score=_clamp(policy.insufficient_data_score),
        reasons=[f"insufficient data: {detail}"],
        insufficient_data=True,
    )


def _miles(km: float) -> str:
    return f"{km_to_miles(km):.1f} mi"


def score_location(
    opportunity: Opportunity,
    prop: Property,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> CategoryScore:
    """Score how well the property's location satisfies the requirement."""
    req = opportunity.location
    category = ScoreCategory.LOCATION

    # Point constraint takes precedence over jurisdiction matching
    if req.center is not None:
        if prop.location is None:
            return _insufficient(category, policy, "property has no coordinates")

        dist_km = distance(req.center, prop.location)

        if req.radius_km:
            if dist_km <= req.radius_km:
                return _result(
                    category, 100.0,
                    f"{_miles(dist_km)} from center (within {_miles(req.radius_km)} radius)",
                )
            overshoot = dist_km - req.radius_km
            return _result(
                category,
                _linear_decay(overshoot, policy.max_location_distance_km),
                f"{_miles(dist_km)} from center, {_miles(overshoot)} outside "
                f"required radius of {_miles(req.radius_km)}",
            )

        return _result(
            category,
            _linear_decay(dist_km, policy.max_location_distance_km),
            f"{_miles(dist_km)} from required location",
        )

    if req.state:
        if not prop.state:
            return _insufficient(category, policy, "property has no state")
        if prop.state.strip().upper() != req.state.strip().upper():
            return _result(category, 0.0, f"Property in {prop.state}, not in required state {req.state}")
        if req.city:
            if not prop.city:
                return _insufficient(category, policy, "property has no city")
            if prop.city.strip().lower() == req.city.strip().lower():
                return _result(category, 100.0, f"Exact city match ({req.city}, {req.state})")
            return _result(
                category, policy.city_mismatch_score,
                f"In {req.state} but outside required city {req.city}",
            )
        return _result(category, 100.0, f"Within required state {req.state}")

    if req.city:
        if not prop.city:
            return _insufficient(category, policy, "property has no city")
        if prop.city.strip().lower() == req.city.strip().lower():
            return _result(category, 100.0, f"Exact city match ({req.city})")
        return _result(category, policy.city_mismatch_score, f"Outside required city {req.city}")

    return _insufficient(category, policy, "no location requirement")


def score_space(
    opportunity: Opportunity,
    prop: Property,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> CategoryScore:
    """Score available square footage against the required band."""
    req = opportunity.space
    category = ScoreCategory.SPACE

    if not req.is_specified:
        return _insufficient(category, policy, "no space requirement")

    available = prop.available_sqft
    if available is None:
        return _insufficient(category, policy, "available square footage unknown")

    min_req = req.min_sqft
    max_req = req.max_sqft

    # Under minimum
    if min_req and available < min_req:
        shortfall = (min_req - available) / min_req
        return _result(
            category,
            100.0 * (1.0 - shortfall),
            f"{min_req - available:,} SF short of {min_req:,} SF minimum ({shortfall:.0%})",
        )

    # Over maximum - oversized space is less disqualifying than undersized
    if max_req is not None and available > max_req:
        min_block = prop.min_divisible_sqft
        if min_block is not None and min_block <= max_req:
            return _result(
                category, policy.divisible_score,
                f"{available - max_req:,} SF over maximum",
                f"Can subdivide to {min_block:,} SF blocks",
            )
        if max_req <= 0:
            return _result(category, policy.oversize_floor, f"{available:,} SF over maximum")
        excess = (available - max_req) / max_req
        score = max(policy.oversize_floor, 100.0 * (1.0 - excess * policy.oversize_penalty))
        return _result(
            category, score,
            f"{available - max_req:,} SF over {max_req:,} SF maximum ({excess:.0%})",
        )

    return _result(category, 100.0, f"{available:,} SF within required range")


def score_building(
    opportunity: Opportunity,
    prop: Property,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> CategoryScore:
    """
    Score building compatibility.

    Starts from the class gap table, then applies the security level
    shortfall, accessibility and transit penalties. Each required
    feature adds its points when present and costs half of them
    (rounded up) when missing; required certifications work the same
    way with the policy's certification points.
    """
    req = opportunity.building
    category = ScoreCategory.BUILDING

    required = req.building_class
    offered = prop.building_class

    if required is None:
        if req.security_level is None and not req.has_extra_requirements:
            return _insufficient(category, policy, "no building class requirement")
        score = policy.building_score_for_gap(0)
        reasons = []
    elif offered is None:
        return _insufficient(category, policy, "building class unknown")
    else:
        # Higher quality always satisfies a lower requirement
        gap = required.rank - offered.rank
        score = policy.building_score_for_gap(gap)
        if gap <= 0:
            reasons = [f"Class {offered.value} meets class {required.value} requirement"]
        else:
            grades = "grade" if gap == 1 else "grades"
            reasons = [f"Class {offered.value} is {gap} {grades} below required class {required.value}"]

    if req.ada_compliant and not prop.ada_compliant:
        score -= policy.ada_penalty
        reasons.append("ADA accessibility required but not confirmed")

    if req.security_level is not None and prop.security_level is not None:
        shortfall = req.security_level - prop.security_level
        if shortfall > 0:
            score -= shortfall * policy.security_level_penalty
            reasons.append(
                f"Security level {prop.security_level} below required level {req.security_level}"
            )

    missing = sorted(f.value for f in req.features if f not in prop.features)
    for feature in req.features:
        if feature in prop.features:
            score += feature.points
        else:
            score -= math.ceil(feature.points / 2)
    if missing:
        reasons.append(f"Missing required features: {', '.join(missing)}")

    missing_certs = [c for c in req.certifications if not prop.has_certification(c)]
    score += policy.certification_points * (len(req.certifications) - len(missing_certs))
    score -= math.ceil(policy.certification_points / 2) * len(missing_certs)
    if missing_certs:
        reasons.append(f"Missing certifications: {', '.join(missing_certs)}")

    if req.public_transit and not prop.public_transit_access:
        score -= policy.transit_penalty
        reasons.append("No public transit access")

    if not reasons:
        reasons.append("Meets building requirements")

    return _result(category, score, *reasons)


def score_timeline(
    opportunity: Opportunity,
    prop: Property,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> CategoryScore:
    """Score availability date against the required occupancy date."""
    category = ScoreCategory.TIMELINE

    occupancy = opportunity.occupancy_date
    available = prop.available_date

    if occupancy is None:
        return _insufficient(category, policy, "no occupancy date")
    if available is None:
        return _insufficient(category, policy, "availability date unknown")

    delay_days = (available - occupancy).days

    if delay_days <= 0:
        if delay_days == 0:
            return _result(category, 100.0, "Available on required occupancy date")
        return _result(category, 100.0, f"Available {-delay_days} days before required occupancy")

    return _result(
        category,
        _linear_decay(delay_days, policy.max_delay_days),
        f"Available {delay_days} days after required occupancy",
    )


def score_experience(
    opportunity: Opportunity,
    prop: Property,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> CategoryScore:
    """
    Score the listing broker's government leasing track record.

    Zero prior transactions maps to the neutral baseline, not zero;
    each additional closed lease moves the score toward 100 with
    diminishing returns.
    """
    category = ScoreCategory.EXPERIENCE
    closed = prop.broker.closed_transactions

    if closed is None:
        return _insufficient(category, policy, "no broker track record on file")

    if closed <= 0:
        return _result(category, policy.experience_baseline, "No prior closed government leases")

    headroom = 100.0 - policy.experience_baseline
    score = policy.experience_baseline + headroom * (1.0 - math.exp(-closed / policy.experience_scale))
    noun = "lease" if closed == 1 else "leases"
    return _result(category, score, f"{closed} prior government {noun} closed")


SCORERS: dict[ScoreCategory, Callable[[Opportunity, Property, ScoringPolicy], CategoryScore]] = {
    ScoreCategory.LOCATION: score_location,
    ScoreCategory.SPACE: score_space,
    ScoreCategory.BUILDING: score_building,
    ScoreCategory.TIMELINE: score_timeline,
    ScoreCategory.EXPERIENCE: score_experience,
}


def score_categories(
    opportunity: Opportunity,
    prop: Property,
    policy: Optional[ScoringPolicy] = None,
) -> dict[ScoreCategory, CategoryScore]:
    """Run all five category scorers for a pair."""
    active_policy = policy or DEFAULT_POLICY
    scores = {
        category: scorer(opportunity, prop, active_policy)
        for category, scorer in SCORERS.items()
    }
    logger.debug(
        "Scored %s against %s: %s",
        prop.property_id,
        opportunity.opportunity_id,
        {c.value: s.score for c, s in scores.items()},
    )
    return scores
