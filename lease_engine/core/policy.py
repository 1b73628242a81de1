"""
Scoring policy.

Weights, decay constants, grade bands and tier thresholds used by the
category scorers and the aggregator. All values are configuration, not
fixed law: callers may load a policy from a dictionary or JSON file and
pass it to score_pair / score_batch.
"""

import hashlib
import json
from dataclasses import dataclass, field

from .errors import InvalidInput


WEIGHT_TOLERANCE = 1e-6

SCORE_FIELDS = (
    "insufficient_data_score",
    "city_mismatch_score",
    "oversize_floor",
    "divisible_score",
    "experience_baseline",
)


@dataclass
class ScoringWeights:
    """
    Per-category weights for the overall score.

    All weights must sum to 1.0.
    """

    location: float = 0.30
    space: float = 0.25
    building: float = 0.15
    timeline: float = 0.15
    experience: float = 0.15

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary keyed by category value."""
        return {
            "location": self.location,
            "space": self.space,
            "building": self.building,
            "timeline": self.timeline,
            "experience": self.experience,
        }

    @property
    def total_weight(self) -> float:
        """Calculate sum of all weights (should be 1.0)."""
        return sum(self.to_dict().values())

    def normalize(self) -> "ScoringWeights":
        """Return a normalized copy where weights sum to 1.0."""
        total = self.total_weight
        if total == 0:
            return self
        factor = 1.0 / total
        return ScoringWeights(
            location=self.location * factor,
            space=self.space * factor,
            building=self.building * factor,
            timeline=self.timeline * factor,
            experience=self.experience * factor,
        )

    def validate(self) -> None:
        """Raise InvalidInput unless weights are non-negative and sum to 1.0."""
        for name, weight in self.to_dict().items():
            if weight < 0:
                raise InvalidInput(f"weights.{name}", "Weight cannot be negative", weight)
        if abs(self.total_weight - 1.0) > WEIGHT_TOLERANCE:
            raise InvalidInput("weights", "Weights must sum to 1.0", round(self.total_weight, 6))


def _default_building_table() -> dict[int, float]:
    # Grade gap (required rank - offered rank) -> score; gaps at or below
    # zero mean the offered building meets or exceeds the requirement.
    return {0: 100.0, 1: 60.0, 2: 20.0}


@dataclass
class ScoringPolicy:
    """
    Tunable parameters for category scoring, grading and qualification.
    """

    weights: ScoringWeights = field(default_factory=ScoringWeights)

    # Default when a dimension cannot be evaluated
    insufficient_data_score: float = 50.0

    # Location
    max_location_distance_km: float = 50.0
    city_mismatch_score: float = 60.0

    # Space
    oversize_penalty: float = 0.5  # Score lost per unit of fractional excess
    oversize_floor: float = 25.0
    divisible_score: float = 90.0

    # Building
    building_class_table: dict[int, float] = field(default_factory=_default_building_table)
    security_level_penalty: float = 20.0  # Per missing Facility Security Level
    ada_penalty: float = 30.0
    transit_penalty: float = 5.0
    certification_points: float = 5.0  # Half (rounded up) is lost when missing

    # Timeline
    max_delay_days: int = 180

    # Experience
    experience_baseline: float = 50.0
    experience_scale: float = 3.0  # Transactions per e-fold toward 100

    # Grade bands (closed lower bounds)
    grade_a_threshold: float = 90.0
    grade_b_threshold: float = 80.0
    grade_c_threshold: float = 70.0
    grade_d_threshold: float = 60.0

    # Qualification tiers (closed lower bounds)
    competitive_threshold: float = 85.0
    qualified_threshold: float = 70.0
    marginal_threshold: float = 55.0

    def building_score_for_gap(self, gap: int) -> float:
        """
        Look up the building class score for a grade gap.

        Uses the largest gap defined in the table that does not exceed
        the actual gap, so sparse tables such as {0: 100, 2: 20} score
        a one-grade gap like gap 0.
        """
        table = self.building_class_table
        defined = [k for k in table if k <= max(gap, 0)]
        if not defined:
            return table[min(table)]
        return table[max(defined)]

    def fingerprint(self) -> str:
        """Stable digest of every setting, for keying cached results."""
        payload = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]

    def validate(self) -> None:
        """Raise InvalidInput if the policy is internally inconsistent."""
        self.weights.validate()

        # Values used directly as a 0-100 category score
        for name in SCORE_FIELDS:
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise InvalidInput(name, "Must be between 0 and 100", value)
        for gap, value in self.building_class_table.items():
            if gap < 0:
                raise InvalidInput("building_class_table", "Grade gaps cannot be negative", gap)
            if not 0.0 <= value <= 100.0:
                raise InvalidInput(f"building_class_table.{gap}", "Must be between 0 and 100", value)

        for name in ("oversize_penalty", "security_level_penalty", "ada_penalty",
                     "transit_penalty", "certification_points"):
            if getattr(self, name) < 0:
                raise InvalidInput(name, "Cannot be negative", getattr(self, name))

        if self.max_location_distance_km <= 0:
            raise InvalidInput(
                "max_location_distance_km", "Must be positive", self.max_location_distance_km
            )
        if self.max_delay_days <= 0:
            raise InvalidInput("max_delay_days", "Must be positive", self.max_delay_days)
        if self.experience_scale <= 0:
            raise InvalidInput("experience_scale", "Must be positive", self.experience_scale)
        if 0 not in self.building_class_table:
            raise InvalidInput(
                "building_class_table", "Table must define a score for gap 0", self.building_class_table
            )

        grades = [
            self.grade_a_threshold,
            self.grade_b_threshold,
            self.grade_c_threshold,
            self.grade_d_threshold,
        ]
        if grades != sorted(grades, reverse=True):
            raise InvalidInput("grade_thresholds", "Grade thresholds must descend from A to D", grades)

        tiers = [self.competitive_threshold, self.qualified_threshold, self.marginal_threshold]
        if tiers != sorted(tiers, reverse=True):
            raise InvalidInput("tier_thresholds", "Tier thresholds must descend", tiers)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "weights": self.weights.to_dict(),
            "insufficient_data_score": self.insufficient_data_score,
            "max_location_distance_km": self.max_location_distance_km,
            "city_mismatch_score": self.city_mismatch_score,
            "oversize_penalty": self.oversize_penalty,
            "oversize_floor": self.oversize_floor,
            "divisible_score": self.divisible_score,
            "building_class_table": {str(k): v for k, v in self.building_class_table.items()},
            "security_level_penalty": self.security_level_penalty,
            "ada_penalty": self.ada_penalty,
            "transit_penalty": self.transit_penalty,
            "certification_points": self.certification_points,
            "max_delay_days": self.max_delay_days,
            "experience_baseline": self.experience_baseline,
            "experience_scale": self.experience_scale,
            "grade_a_threshold": self.grade_a_threshold,
            "grade_b_threshold": self.grade_b_threshold,
            "grade_c_threshold": self.grade_c_threshold,
            "grade_d_threshold": self.grade_d_threshold,
            "competitive_threshold": self.competitive_threshold,
            "qualified_threshold": self.qualified_threshold,
            "marginal_threshold": self.marginal_threshold,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScoringPolicy":
        """Create policy from dictionary; missing keys keep their defaults."""
        defaults = cls()

        weight_data = data.get("weights", {})
        weights = ScoringWeights(
            location=weight_data.get("location", 0.30),
            space=weight_data.get("space", 0.25),
            building=weight_data.get("building", 0.15),
            timeline=weight_data.get("timeline", 0.15),
            experience=weight_data.get("experience", 0.15),
        )

        table_data = data.get("building_class_table")
        if table_data:
            table = {int(k): float(v) for k, v in table_data.items()}
        else:
            table = _default_building_table()

        scalars = {
            name: data.get(name, getattr(defaults, name))
            for name in defaults.to_dict()
            if name not in ("weights", "building_class_table")
        }

        return cls(weights=weights, building_class_table=table, **scalars)


DEFAULT_POLICY = ScoringPolicy()
