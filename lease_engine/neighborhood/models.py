"""
Neighborhood Scorer - Data Models.

Defines the reference inventory of federally-associated properties and
the structured result of a neighborhood query.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from lease_engine.core.geo import GeoPoint, km_to_miles
from lease_engine.core.opportunity import format_date, parse_date


class Ownership(Enum):
    """Whether the government owns or leases the property."""

    OWNED = "owned"
    LEASED = "leased"


class NeighborhoodLabel(Enum):
    """Federal presence labels."""

    EXCEPTIONAL = "exceptional"  # 80-100: Dense federal presence
    STRONG = "strong"  # 60-79: Established federal presence
    MODERATE = "moderate"  # 40-59: Some federal presence
    LOW = "low"  # 0-39: Little or none


@dataclass
class ReferenceProperty:
    """
    A federally owned or leased building in the reference inventory.

    The inventory is supplied by the caller as a snapshot; the engine
    never fetches or mutates it.
    """

    property_id: str
    latitude: float
    longitude: float

    ownership: Ownership = Ownership.LEASED
    rsf: int = 0  # Rentable square feet
    vacant_rsf: int = 0
    lease_expiration: Optional[date] = None
    year_constructed: Optional[int] = None

    agency: str = ""
    city: str = ""
    state: str = ""

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "property_id": self.property_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "ownership": self.ownership.value,
            "rsf": self.rsf,
            "vacant_rsf": self.vacant_rsf,
            "lease_expiration": format_date(self.lease_expiration),
            "year_constructed": self.year_constructed,
            "agency": self.agency,
            "city": self.city,
            "state": self.state,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReferenceProperty":
        """Create from dictionary representation."""
        return cls(
            property_id=data["property_id"],
            latitude=data["latitude"],
            longitude=data["longitude"],
            ownership=Ownership(data.get("ownership", "leased")),
            rsf=data.get("rsf") or 0,
            vacant_rsf=data.get("vacant_rsf") or 0,
            lease_expiration=parse_date(data.get("lease_expiration")),
            year_constructed=data.get("year_constructed"),
            agency=data.get("agency", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
        )


@dataclass
class NearbyProperty:
    """A reference property inside the query radius."""

    reference: ReferenceProperty
    distance_km: float

    @property
    def property_id(self) -> str:
        return self.reference.property_id

    def to_dict(self) -> dict:
        data = self.reference.to_dict()
        data["distance_km"] = round(self.distance_km, 3)
        data["distance_miles"] = round(km_to_miles(self.distance_km), 3)
        return data


@dataclass
class NeighborhoodMetrics:
    """Descriptive statistics for the properties within the radius."""

    leased_properties: int = 0
    owned_properties: int = 0
    total_rsf: int = 0
    vacant_rsf: int = 0
    expiring_leases: int = 0  # Expiring within the lookahead window
    expiring_rsf: int = 0
    recent_construction: int = 0

    @property
    def vacancy_rate(self) -> float:
        if self.total_rsf <= 0:
            return 0.0
        return self.vacant_rsf / self.total_rsf

    def to_dict(self) -> dict:
        return {
            "leased_properties": self.leased_properties,
            "owned_properties": self.owned_properties,
            "total_rsf": self.total_rsf,
            "vacant_rsf": self.vacant_rsf,
            "vacancy_rate": round(self.vacancy_rate, 4),
            "expiring_leases": self.expiring_leases,
            "expiring_rsf": self.expiring_rsf,
            "recent_construction": self.recent_construction,
        }


# Factor weights for the informational composite (sum to 100)
FACTOR_WEIGHTS = {
    "density": 25,
    "lease_activity": 25,
    "expiring_leases": 20,
    "demand": 15,
    "vacancy": 10,
    "growth": 5,
}


@dataclass
class NeighborhoodFactors:
    """
    Per-factor breakdown of a neighborhood (each 0-100).

    Explains the market behind the density score. The composite is
    reported alongside the score and never replaces it.
    """

    density: float = 0.0  # Properties per square mile
    lease_activity: float = 0.0  # Leased share of the federal footprint
    expiring_leases: float = 0.0  # Near-term re-procurement opportunities
    demand: float = 0.0  # Total federal rentable square feet
    vacancy: float = 0.0  # Lower vacancy scores higher
    growth: float = 0.0  # Share of recently built properties

    def to_dict(self) -> dict[str, float]:
        return {
            "density": self.density,
            "lease_activity": self.lease_activity,
            "expiring_leases": self.expiring_leases,
            "demand": self.demand,
            "vacancy": self.vacancy,
            "growth": self.growth,
        }

    @property
    def composite(self) -> float:
        """Weighted blend of the six factors."""
        values = self.to_dict()
        total = sum(values[name] * weight for name, weight in FACTOR_WEIGHTS.items())
        return round(total / sum(FACTOR_WEIGHTS.values()), 1)


@dataclass
class NeighborhoodScore:
    """
    Federal presence around a query point.

    Computed fresh per request from the current inventory snapshot.
    """

    center: GeoPoint
    radius_km: float

    count: int
    density: float  # Properties per square kilometer
    score: float  # 0.0 to 100.0
    label: NeighborhoodLabel

    contributors: list[NearbyProperty] = field(default_factory=list)  # Nearest first
    metrics: NeighborhoodMetrics = field(default_factory=NeighborhoodMetrics)
    factors: NeighborhoodFactors = field(default_factory=NeighborhoodFactors)

    @property
    def contributor_ids(self) -> list[str]:
        return [c.property_id for c in self.contributors]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "center": self.center.to_dict(),
            "radius_km": self.radius_km,
            "count": self.count,
            "density": round(self.density, 4),
            "score": self.score,
            "label": self.label.value,
            "contributors": [c.to_dict() for c in self.contributors],
            "metrics": self.metrics.to_dict(),
            "factors": self.factors.to_dict(),
            "factor_composite": self.factors.composite,
        }
