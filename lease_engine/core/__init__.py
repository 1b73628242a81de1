"""
Core modules for Lease Match Engine.

- geo: Coordinate validation, great-circle distance, radius checks
- errors: Engine exception hierarchy
- opportunity: Government leasing requirement data model
- listing: Broker property listing data model
- policy: Scoring weights, decay constants and thresholds
- validation: Structural validation of input records
- scoring: The five category scorers
- aggregation: Overall score, letter grade, qualification tier, insights
- matching: Pair and batch scoring entry points
"""

from .errors import (
    EngineError,
    InvalidInput,
    InvalidCoordinate,
    InvalidRadius,
    RecordNotFound,
)
from .geo import (
    GeoPoint,
    EARTH_RADIUS_KM,
    KM_PER_MILE,
    validate_point,
    validate_radius,
    distance,
    within_radius,
    miles_to_km,
    km_to_miles,
)
from .opportunity import (
    Opportunity,
    BuildingClass,
    BuildingFeature,
    LocationRequirement,
    SpaceRequirement,
    BuildingRequirement,
)
from .listing import Property, Address, BrokerContact, LeaseType, ListingStatus
from .policy import ScoringWeights, ScoringPolicy, DEFAULT_POLICY
from .validation import ValidationResult, validate_opportunity, validate_property
from .scoring import (
    ScoreCategory,
    CategoryScore,
    score_location,
    score_space,
    score_building,
    score_timeline,
    score_experience,
    score_categories,
)
from .aggregation import (
    QualificationTier,
    calculate_overall_score,
    calculate_grade,
    classify_tier,
    build_insights,
    find_disqualifiers,
)
from .matching import Match, score_pair, score_batch, rank_matches

__all__ = [
    # Errors
    "EngineError",
    "InvalidInput",
    "InvalidCoordinate",
    "InvalidRadius",
    "RecordNotFound",
    # Geo
    "GeoPoint",
    "EARTH_RADIUS_KM",
    "KM_PER_MILE",
    "validate_point",
    "validate_radius",
    "distance",
    "within_radius",
    "miles_to_km",
    "km_to_miles",
    # Data models
    "Opportunity",
    "BuildingClass",
    "BuildingFeature",
    "LocationRequirement",
    "SpaceRequirement",
    "BuildingRequirement",
    "Property",
    "Address",
    "BrokerContact",
    "LeaseType",
    "ListingStatus",
    # Configuration
    "ScoringWeights",
    "ScoringPolicy",
    "DEFAULT_POLICY",
    # Validation
    "ValidationResult",
    "validate_opportunity",
    "validate_property",
    # Scoring
    "ScoreCategory",
    "CategoryScore",
    "score_location",
    "score_space",
    "score_building",
    "score_timeline",
    "score_experience",
    "score_categories",
    # Aggregation
    "QualificationTier",
    "calculate_overall_score",
    "calculate_grade",
    "classify_tier",
    "build_insights",
    "find_disqualifiers",
    # Matching
    "Match",
    "score_pair",
    "score_batch",
    "rank_matches",
]
