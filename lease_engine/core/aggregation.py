"""
Match aggregation.

Combines the five category scores into an overall score, a letter
grade and a qualification tier. Grade and tier use independent
thresholds so they can be tuned separately. Disqualifiers flag hard
requirement failures for display; they never change the score or tier.
"""

from enum import Enum
from typing import Optional

from .errors import InvalidInput
from .listing import Property
from .opportunity import BuildingFeature, Opportunity
from .policy import DEFAULT_POLICY, ScoringPolicy
from .scoring import CategoryScore, ScoreCategory


class QualificationTier(Enum):
    """How seriously a property competes for an opportunity."""

    COMPETITIVE = "competitive"
    QUALIFIED = "qualified"
    MARGINAL = "marginal"
    UNQUALIFIED = "unqualified"

    @property
    def is_qualified(self) -> bool:
        """True for qualified and competitive tiers."""
        return self in (QualificationTier.COMPETITIVE, QualificationTier.QUALIFIED)


# Insight thresholds
STRENGTH_THRESHOLD = 90.0
WEAKNESS_THRESHOLD = 60.0

# Fraction of the minimum square footage a property may fall short by
# before the shortfall is flagged as disqualifying
UNDERSIZE_TOLERANCE = 0.20


def calculate_overall_score(
    category_scores: dict[ScoreCategory, CategoryScore],
    policy: Optional[ScoringPolicy] = None,
) -> float:
    """
    Weighted sum of the five category scores.

    Raises:
        InvalidInput: If weights do not sum to 1.0 or a category is missing
    """
    active_policy = policy or DEFAULT_POLICY
    active_policy.weights.validate()
    weights = active_policy.weights.to_dict()

    total = 0.0
    for category in ScoreCategory:
        if category not in category_scores:
            raise InvalidInput("category_scores", f"Missing {category.value} score")
        total += category_scores[category].score * weights[category.value]

    return round(max(0.0, min(100.0, total)), 2)


def calculate_grade(score: float, policy: Optional[ScoringPolicy] = None) -> str:
    """Convert numeric score to letter grade."""
    active_policy = policy or DEFAULT_POLICY
    if score >= active_policy.grade_a_threshold:
        return "A"
    elif score >= active_policy.grade_b_threshold:
        return "B"
    elif score >= active_policy.grade_c_threshold:
        return "C"
    elif score >= active_policy.grade_d_threshold:
        return "D"
    else:
        return "F"


def classify_tier(score: float, policy: Optional[ScoringPolicy] = None) -> QualificationTier:
    """Map an overall score to its qualification tier (boundaries belong to the higher tier)."""
    active_policy = policy or DEFAULT_POLICY
    if score >= active_policy.competitive_threshold:
        return QualificationTier.COMPETITIVE
    elif score >= active_policy.qualified_threshold:
        return QualificationTier.QUALIFIED
    elif score >= active_policy.marginal_threshold:
        return QualificationTier.MARGINAL
    else:
        return QualificationTier.UNQUALIFIED


def build_insights(
    category_scores: dict[ScoreCategory, CategoryScore],
    policy: Optional[ScoringPolicy] = None,
) -> tuple[list[str], list[str], list[str]]:
    """
    Derive strengths, weaknesses and recommendations from category scores.

    Returns:
        Tuple of (strengths, weaknesses, recommendations)
    """
    active_policy = policy or DEFAULT_POLICY
    strengths: list[str] = []
    weaknesses: list[str] = []
    recommendations: list[str] = []

    location = category_scores.get(ScoreCategory.LOCATION)
    if location and not location.insufficient_data:
        if location.score >= STRENGTH_THRESHOLD:
            strengths.append("Excellent location - within delineated area")
        elif location.score < WEAKNESS_THRESHOLD:
            weaknesses.append("Location may be outside preferred area")
            recommendations.append("Verify property is within delineated area boundaries")

    space = category_scores.get(ScoreCategory.SPACE)
    if space and not space.insufficient_data:
        if space.score >= STRENGTH_THRESHOLD:
            strengths.append("Space requirements fully met")
        elif space.score < WEAKNESS_THRESHOLD:
            weaknesses.append("Available space is well outside the required range")
            recommendations.append(
                "Consider whether the agency might accept a different size or if expansion is possible"
            )

    building = category_scores.get(ScoreCategory.BUILDING)
    if building and not building.insufficient_data:
        if building.score >= STRENGTH_THRESHOLD:
            strengths.append("Building meets class requirements")
        elif building.score < WEAKNESS_THRESHOLD:
            weaknesses.append("Building class below requirement")
            recommendations.append("Evaluate cost of upgrades needed to meet the required class")

    timeline = category_scores.get(ScoreCategory.TIMELINE)
    if timeline and not timeline.insufficient_data:
        if timeline.score >= STRENGTH_THRESHOLD:
            strengths.append("Available before required occupancy date")
        elif timeline.score < WEAKNESS_THRESHOLD:
            weaknesses.append("Availability timeline is tight or delayed")
            recommendations.append("Communicate realistic timeline and any acceleration options")

    experience = category_scores.get(ScoreCategory.EXPERIENCE)
    if experience:
        if experience.score > active_policy.experience_baseline and not experience.insufficient_data:
            strengths.append("Prior government lease experience")
        else:
            recommendations.append(
                "Highlight any institutional lease experience, or consider partnering "
                "with an experienced prime contractor"
            )

    # Categories scored on insufficient data
    for category, result in category_scores.items():
        if result.insufficient_data:
            recommendations.append(f"Provide {category.value} details to enable a full score")

    return strengths, weaknesses, recommendations


def find_disqualifiers(
    category_scores: dict[ScoreCategory, CategoryScore],
    opportunity: Opportunity,
    prop: Property,
) -> list[str]:
    """
    List hard requirement failures for a pair.

    A property can still rank well with a disqualifier (one category
    is only part of the weighted score), so these are reported next
    to the tier for the reader to act on.
    """
    disqualifiers: list[str] = []

    location = category_scores.get(ScoreCategory.LOCATION)
    loc_req = opportunity.location
    if location and not location.insufficient_data and location.score == 0:
        if loc_req.center is not None:
            disqualifiers.append("Property far outside the delineated area")
        elif loc_req.state:
            disqualifiers.append("Property not in required state")

    min_sqft = opportunity.space.min_sqft
    available = prop.available_sqft
    if min_sqft and available is not None and available < min_sqft * (1 - UNDERSIZE_TOLERANCE):
        disqualifiers.append("Property significantly under minimum size requirement")

    building = opportunity.building
    if building.ada_compliant and not prop.ada_compliant:
        disqualifiers.append("ADA accessibility requirement not met")
    if BuildingFeature.SCIF_CAPABLE in building.features and BuildingFeature.SCIF_CAPABLE not in prop.features:
        disqualifiers.append("SCIF capability required but not available")

    return disqualifiers
