"""
Match orchestration.

Public entry point for scoring one property against an opportunity,
or a batch of properties ranked against one opportunity.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .aggregation import (
    QualificationTier,
    build_insights,
    calculate_grade,
    calculate_overall_score,
    classify_tier,
    find_disqualifiers,
)
from .listing import Property
from .opportunity import Opportunity
from .policy import DEFAULT_POLICY, ScoringPolicy
from .scoring import CategoryScore, ScoreCategory, score_categories
from .validation import validate_opportunity, validate_property


logger = logging.getLogger(__name__)

# Batches at least this large are scored on a worker pool
PARALLEL_THRESHOLD = 64


@dataclass
class Match:
    """
    Complete scoring result for a property against an opportunity.

    Derived and disposable: it can always be recomputed from its two
    source records. Any stored copy must be keyed on both versions.
    """

    opportunity_id: str
    property_id: str

    # Category breakdown
    location: CategoryScore
    space: CategoryScore
    building: CategoryScore
    timeline: CategoryScore
    experience: CategoryScore

    # Overall
    overall_score: float  # 0.0 to 100.0
    grade: str  # A, B, C, D, F
    tier: QualificationTier

    # Source versions for cache invalidation
    opportunity_version: int = 1
    property_version: int = 1

    # Presentation insights
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    # Hard requirement failures; informational, the tier is unaffected
    disqualifiers: list[str] = field(default_factory=list)

    @property
    def qualified(self) -> bool:
        """Tier is qualified or better."""
        return self.tier.is_qualified

    @property
    def competitive(self) -> bool:
        return self.tier == QualificationTier.COMPETITIVE

    @property
    def category_scores(self) -> dict[ScoreCategory, CategoryScore]:
        return {
            ScoreCategory.LOCATION: self.location,
            ScoreCategory.SPACE: self.space,
            ScoreCategory.BUILDING: self.building,
            ScoreCategory.TIMELINE: self.timeline,
            ScoreCategory.EXPERIENCE: self.experience,
        }

    @property
    def cache_key(self) -> tuple[str, int, str, int]:
        return (
            self.opportunity_id,
            self.opportunity_version,
            self.property_id,
            self.property_version,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "opportunity_id": self.opportunity_id,
            "property_id": self.property_id,
            "opportunity_version": self.opportunity_version,
            "property_version": self.property_version,
            "overall_score": round(self.overall_score, 2),
            "grade": self.grade,
            "tier": self.tier.value,
            "qualified": self.qualified,
            "competitive": self.competitive,
            "categories": {
                category.value: score.to_dict()
                for category, score in self.category_scores.items()
            },
            "strengths": self.strengths,
            "weaknesses": self.weaknesses,
            "recommendations": self.recommendations,
            "disqualifiers": self.disqualifiers,
        }

    def to_response(self) -> dict:
        """Convert to the camelCase shape served over HTTP."""
        return {
            "opportunityId": self.opportunity_id,
            "propertyId": self.property_id,
            "overallScore": round(self.overall_score, 2),
            "grade": self.grade,
            "tier": self.tier.value,
            "qualified": self.qualified,
            "competitive": self.competitive,
            "locationScore": self.location.score,
            "spaceScore": self.space.score,
            "buildingScore": self.building.score,
            "timelineScore": self.timeline.score,
            "experienceScore": self.experience.score,
            "reasons": {
                category.value: list(score.reasons)
                for category, score in self.category_scores.items()
            },
            "strengths": self.strengths,
            "weaknesses": self.weaknesses,
            "recommendations": self.recommendations,
            "disqualifiers": self.disqualifiers,
        }


def _build_match(opportunity: Opportunity, prop: Property, policy: ScoringPolicy) -> Match:
    """Score an already-validated pair."""
    scores = score_categories(opportunity, prop, policy)
    overall = calculate_overall_score(scores, policy)
    strengths, weaknesses, recommendations = build_insights(scores, policy)

    return Match(
        opportunity_id=opportunity.opportunity_id,
        property_id=prop.property_id,
        location=scores[ScoreCategory.LOCATION],
        space=scores[ScoreCategory.SPACE],
        building=scores[ScoreCategory.BUILDING],
        timeline=scores[ScoreCategory.TIMELINE],
        experience=scores[ScoreCategory.EXPERIENCE],
        overall_score=overall,
        grade=calculate_grade(overall, policy),
        tier=classify_tier(overall, policy),
        opportunity_version=opportunity.version,
        property_version=prop.version,
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=recommendations,
        disqualifiers=find_disqualifiers(scores, opportunity, prop),
    )


def score_pair(
    opportunity: Opportunity,
    prop: Property,
    policy: Optional[ScoringPolicy] = None,
) -> Match:
    """
    Score a property against an opportunity.

    Args:
        opportunity: The leasing requirement to score against
        prop: The broker listing to score
        policy: Optional scoring policy override (uses defaults if not provided)

    Returns:
        Match with category breakdown, overall score, grade and tier

    Raises:
        InvalidInput: If either record is structurally malformed
    """
    active_policy = policy or DEFAULT_POLICY
    active_policy.validate()

    validate_opportunity(opportunity).raise_for_errors()
    validate_property(prop).raise_for_errors()

    return _build_match(opportunity, prop, active_policy)


def rank_matches(matches: Iterable[Match]) -> list[Match]:
    """Sort by overall score descending, ties broken by property ID ascending."""
    return sorted(matches, key=lambda m: (-m.overall_score, m.property_id))


def score_batch(
    opportunity: Opportunity,
    properties: Iterable[Property],
    policy: Optional[ScoringPolicy] = None,
    max_workers: Optional[int] = None,
    min_score: Optional[float] = None,
) -> list[Match]:
    """
    Score multiple properties against one opportunity.

    Every record is validated before any scoring runs. Properties are
    scored independently, on a thread pool once the batch reaches
    PARALLEL_THRESHOLD.

    Args:
        opportunity: The leasing requirement to score against
        properties: Property listings to score
        policy: Optional scoring policy override
        max_workers: Worker pool size (defaults to available cores)
        min_score: Minimum overall score (results below are excluded)

    Returns:
        List of Match, sorted by score descending then property ID
    """
    active_policy = policy or DEFAULT_POLICY
    active_policy.validate()

    validate_opportunity(opportunity).raise_for_errors()
    props = list(properties)
    for prop in props:
        validate_property(prop).raise_for_errors()

    workers = max_workers or os.cpu_count() or 1

    if len(props) >= PARALLEL_THRESHOLD and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            matches = list(executor.map(
                lambda p: _build_match(opportunity, p, active_policy),
                props,
            ))
    else:
        matches = [_build_match(opportunity, p, active_policy) for p in props]

    if min_score is not None:
        matches = [m for m in matches if m.overall_score >= min_score]

    ranked = rank_matches(matches)

    logger.info(
        "Scored %d properties against %s (%d competitive, %d qualified)",
        len(props),
        opportunity.opportunity_id,
        sum(1 for m in ranked if m.competitive),
        sum(1 for m in ranked if m.qualified),
    )

    return ranked
