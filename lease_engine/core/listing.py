"""
Property listing data model.

Defines the structure for broker-submitted properties that will be
matched against government leasing opportunities.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from .geo import GeoPoint
from .opportunity import BuildingClass, BuildingFeature, format_date, parse_date


class LeaseType(Enum):
    """Lease structure offered by the landlord."""

    FULL_SERVICE = "full_service"
    MODIFIED_GROSS = "modified_gross"
    NET = "net"
    TRIPLE_NET = "triple_net"
    UNKNOWN = "unknown"


class ListingStatus(Enum):
    """Current status of the listing."""

    ACTIVE = "active"
    WITHDRAWN = "withdrawn"
    LEASED = "leased"


@dataclass
class Address:
    """Property address details."""

    street: str = ""
    city: str = ""
    state: str = ""  # Two-letter code
    zip_code: str = ""


@dataclass
class BrokerContact:
    """Listing broker and their government leasing track record."""

    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    closed_transactions: Optional[int] = None  # Prior closed government leases


@dataclass
class Property:
    """
    Broker property listing.

    Represents commercially available space that can be matched
    against government leasing opportunities.
    """

    # Identification
    property_id: str
    name: str = ""

    # Location
    address: Address = field(default_factory=Address)
    location: Optional[GeoPoint] = None

    # Space
    available_sqft: Optional[int] = None
    min_divisible_sqft: Optional[int] = None

    # Building
    building_class: Optional[BuildingClass] = None
    security_level: Optional[int] = None
    ada_compliant: Optional[bool] = None  # None when not reported
    public_transit_access: bool = False
    features: set[BuildingFeature] = field(default_factory=set)
    certifications: list[str] = field(default_factory=list)

    # Terms
    available_date: Optional[date] = None
    lease_type: LeaseType = LeaseType.UNKNOWN

    # Broker
    broker: BrokerContact = field(default_factory=BrokerContact)

    # Status
    status: ListingStatus = ListingStatus.ACTIVE
    version: int = 1

    @property
    def city(self) -> str:
        """Convenience accessor for city."""
        return self.address.city

    @property
    def state(self) -> str:
        """Convenience accessor for state."""
        return self.address.state

    @property
    def is_active(self) -> bool:
        return self.status == ListingStatus.ACTIVE

    def has_certification(self, name: str) -> bool:
        """Case-insensitive match, so "LEED" is satisfied by "LEED Gold"."""
        needle = name.strip().lower()
        return any(needle in cert.lower() for cert in self.certifications)

    def to_dict(self) -> dict:
        """Convert property to dictionary representation."""
        return {
            "property_id": self.property_id,
            "name": self.name,
            "address": {
                "street": self.address.street,
                "city": self.address.city,
                "state": self.address.state,
                "zip_code": self.address.zip_code,
            },
            "location": self.location.to_dict() if self.location else None,
            "available_sqft": self.available_sqft,
            "min_divisible_sqft": self.min_divisible_sqft,
            "building_class": self.building_class.value if self.building_class else None,
            "security_level": self.security_level,
            "ada_compliant": self.ada_compliant,
            "public_transit_access": self.public_transit_access,
            "features": sorted(f.value for f in self.features),
            "certifications": list(self.certifications),
            "available_date": format_date(self.available_date),
            "lease_type": self.lease_type.value,
            "broker": {
                "name": self.broker.name,
                "company": self.broker.company,
                "email": self.broker.email,
                "phone": self.broker.phone,
                "closed_transactions": self.broker.closed_transactions,
            },
            "status": self.status.value,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Property":
        """Create property from dictionary representation."""
        addr_data = data.get("address") or {}
        address = Address(
            street=addr_data.get("street", ""),
            city=addr_data.get("city", ""),
            state=addr_data.get("state", ""),
            zip_code=addr_data.get("zip_code", ""),
        )

        broker_data = data.get("broker") or {}
        broker = BrokerContact(
            name=broker_data.get("name", ""),
            company=broker_data.get("company", ""),
            email=broker_data.get("email", ""),
            phone=broker_data.get("phone", ""),
            closed_transactions=broker_data.get("closed_transactions"),
        )

        location = data.get("location")

        return cls(
            property_id=data["property_id"],
            name=data.get("name", ""),
            address=address,
            location=GeoPoint.from_dict(location) if location else None,
            available_sqft=data.get("available_sqft"),
            min_divisible_sqft=data.get("min_divisible_sqft"),
            building_class=BuildingClass.parse(data.get("building_class")),
            security_level=data.get("security_level"),
            ada_compliant=data.get("ada_compliant"),
            public_transit_access=data.get("public_transit_access", False),
            features=BuildingFeature.parse_all(data.get("features")),
            certifications=list(data.get("certifications") or []),
            available_date=parse_date(data.get("available_date")),
            lease_type=LeaseType(data.get("lease_type", "unknown")),
            broker=broker,
            status=ListingStatus(data.get("status", "active")),
            version=data.get("version", 1),
        )
