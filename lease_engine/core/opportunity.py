"""
Opportunity data model.

Defines the structure for government leasing requirements including:
- Location constraints (state, city, delineated radius)
- Space requirements (square footage range)
- Building class, security, accessibility and feature requirements
- Occupancy timeline
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .geo import GeoPoint


class BuildingClass(Enum):
    """Commercial building quality grade."""

    A = "A"
    B = "B"
    C = "C"

    @property
    def rank(self) -> int:
        """Higher rank means higher quality (A=3, C=1)."""
        return {"A": 3, "B": 2, "C": 1}[self.value]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["BuildingClass"]:
        """Parse a class label, treating premium 'A+' as A."""
        if value is None or value == "":
            return None
        if isinstance(value, BuildingClass):
            return value
        return cls(str(value).strip().upper().replace("+", ""))


class BuildingFeature(Enum):
    """Building amenity or capability a solicitation can ask for."""

    FIBER = "fiber"
    BACKUP_POWER = "backup_power"
    LOADING_DOCK = "loading_dock"
    SECURITY_24X7 = "security_24x7"
    SECURE_ACCESS = "secure_access"
    SCIF_CAPABLE = "scif_capable"
    DATA_CENTER = "data_center"
    CAFETERIA = "cafeteria"
    FITNESS_CENTER = "fitness_center"
    CONFERENCE_CENTER = "conference_center"

    @property
    def points(self) -> int:
        """Building score points a required feature is worth."""
        return FEATURE_POINTS[self]

    @classmethod
    def parse_all(cls, values) -> set["BuildingFeature"]:
        return {v if isinstance(v, BuildingFeature) else cls(str(v).strip().lower()) for v in values or []}


FEATURE_POINTS = {
    BuildingFeature.FIBER: 5,
    BuildingFeature.BACKUP_POWER: 5,
    BuildingFeature.LOADING_DOCK: 5,
    BuildingFeature.SECURITY_24X7: 5,
    BuildingFeature.SECURE_ACCESS: 5,
    BuildingFeature.SCIF_CAPABLE: 10,
    BuildingFeature.DATA_CENTER: 10,
    BuildingFeature.CAFETERIA: 2,
    BuildingFeature.FITNESS_CENTER: 2,
    BuildingFeature.CONFERENCE_CENTER: 3,
}


@dataclass
class LocationRequirement:
    """Where the space must be."""

    state: str = ""  # Two-letter code, e.g. "DC"
    city: str = ""
    center: Optional[GeoPoint] = None  # Delineated area center
    radius_km: Optional[float] = None  # Delineated area radius

    @property
    def has_point_constraint(self) -> bool:
        return self.center is not None


@dataclass
class SpaceRequirement:
    """Required square footage band."""

    min_sqft: Optional[int] = None
    max_sqft: Optional[int] = None

    @property
    def is_specified(self) -> bool:
        return self.min_sqft is not None or self.max_sqft is not None


@dataclass
class BuildingRequirement:
    """Building quality and security requirements."""

    building_class: Optional[BuildingClass] = None
    security_level: Optional[int] = None  # Facility Security Level 1-5
    ada_compliant: bool = False  # ADA accessibility required
    public_transit: bool = False  # Public transit access required
    features: set[BuildingFeature] = field(default_factory=set)
    certifications: list[str] = field(default_factory=list)  # e.g. "LEED Gold"

    @property
    def has_extra_requirements(self) -> bool:
        """True when anything beyond class and security level is required."""
        return bool(self.ada_compliant or self.public_transit or self.features or self.certifications)


def parse_date(value) -> Optional[date]:
    """Parse an ISO date or datetime string into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if "T" in text or " " in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Opportunity:
    """
    Government leasing opportunity.

    Represents a solicitation for leased space that broker listings
    are scored against. Owned by the procurement ingestion pipeline;
    the engine only reads it.
    """

    # Identification
    opportunity_id: str
    solicitation_number: str = ""
    agency: str = ""
    title: str = ""

    # Requirements
    location: LocationRequirement = field(default_factory=LocationRequirement)
    space: SpaceRequirement = field(default_factory=SpaceRequirement)
    building: BuildingRequirement = field(default_factory=BuildingRequirement)

    # Timeline
    occupancy_date: Optional[date] = None
    response_deadline: Optional[date] = None

    # Content version, bumped whenever the record changes
    version: int = 1

    def to_dict(self) -> dict:
        """Convert opportunity to dictionary representation."""
        return {
            "opportunity_id": self.opportunity_id,
            "solicitation_number": self.solicitation_number,
            "agency": self.agency,
            "title": self.title,
            "location": {
                "state": self.location.state,
                "city": self.location.city,
                "center": self.location.center.to_dict() if self.location.center else None,
                "radius_km": self.location.radius_km,
            },
            "space": {
                "min_sqft": self.space.min_sqft,
                "max_sqft": self.space.max_sqft,
            },
            "building": {
                "building_class": self.building.building_class.value if self.building.building_class else None,
                "security_level": self.building.security_level,
                "ada_compliant": self.building.ada_compliant,
                "public_transit": self.building.public_transit,
                "features": sorted(f.value for f in self.building.features),
                "certifications": list(self.building.certifications),
            },
            "occupancy_date": format_date(self.occupancy_date),
            "response_deadline": format_date(self.response_deadline),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Opportunity":
        """Create opportunity from dictionary representation."""
        loc_data = data.get("location") or {}
        center = loc_data.get("center")
        location = LocationRequirement(
            state=loc_data.get("state", ""),
            city=loc_data.get("city", ""),
            center=GeoPoint.from_dict(center) if center else None,
            radius_km=loc_data.get("radius_km"),
        )

        space_data = data.get("space") or {}
        space = SpaceRequirement(
            min_sqft=space_data.get("min_sqft"),
            max_sqft=space_data.get("max_sqft"),
        )

        bldg_data = data.get("building") or {}
        building = BuildingRequirement(
            building_class=BuildingClass.parse(bldg_data.get("building_class")),
            security_level=bldg_data.get("security_level"),
            ada_compliant=bldg_data.get("ada_compliant", False),
            public_transit=bldg_data.get("public_transit", False),
            features=BuildingFeature.parse_all(bldg_data.get("features")),
            certifications=list(bldg_data.get("certifications") or []),
        )

        return cls(
            opportunity_id=data["opportunity_id"],
            solicitation_number=data.get("solicitation_number", ""),
            agency=data.get("agency", ""),
            title=data.get("title", ""),
            location=location,
            space=space,
            building=building,
            occupancy_date=parse_date(data.get("occupancy_date")),
            response_deadline=parse_date(data.get("response_deadline")),
            version=data.get("version", 1),
        )
