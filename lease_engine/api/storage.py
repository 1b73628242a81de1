"""
Record storage with in-memory and JSON file persistence.

Holds the opportunities, property listings and reference inventory the
engine reads. The engine itself persists nothing; this store stands in
for the upstream ingestion pipelines.
"""

import json
import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from lease_engine.core import (
    Address,
    BrokerContact,
    BuildingClass,
    BuildingFeature,
    BuildingRequirement,
    GeoPoint,
    LeaseType,
    ListingStatus,
    LocationRequirement,
    Opportunity,
    Property,
    RecordNotFound,
    SpaceRequirement,
    miles_to_km,
)
from lease_engine.neighborhood import Ownership, ReferenceProperty


logger = logging.getLogger(__name__)


class RecordStore:
    """
    In-memory record storage with optional JSON file persistence.

    Updating a record bumps its version so cached results computed from
    the previous content are no longer served.
    """

    def __init__(self, storage_path: Optional[str] = None):
        """
        Initialize storage.

        Args:
            storage_path: Optional path to JSON file for persistence.
                         If None, storage is in-memory only.
        """
        self._opportunities: dict[str, Opportunity] = {}
        self._properties: dict[str, Property] = {}
        self._references: dict[str, ReferenceProperty] = {}
        self._storage_path = storage_path
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        """Load records from JSON file if path is set."""
        if not self._storage_path:
            return

        path = Path(self._storage_path)
        if not path.exists():
            return

        try:
            with open(path, "r") as f:
                data = json.load(f)

            for item in data.get("opportunities", []):
                opportunity = Opportunity.from_dict(item)
                self._opportunities[opportunity.opportunity_id] = opportunity
            for item in data.get("properties", []):
                prop = Property.from_dict(item)
                self._properties[prop.property_id] = prop
            for item in data.get("reference_properties", []):
                ref = ReferenceProperty.from_dict(item)
                self._references[ref.property_id] = ref

        except (json.JSONDecodeError, KeyError, ValueError) as e:
            logger.warning("Could not load records from %s: %s", path, e)
            return

        logger.info(
            "Loaded %d opportunities, %d properties, %d reference properties from %s",
            len(self._opportunities), len(self._properties), len(self._references), path,
        )

    def _save(self) -> None:
        """Save records to JSON file if path is set."""
        if not self._storage_path:
            return

        path = Path(self._storage_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": "1.0",
            "updated_at": datetime.now().isoformat(),
            "opportunities": [o.to_dict() for o in self._opportunities.values()],
            "properties": [p.to_dict() for p in self._properties.values()],
            "reference_properties": [r.to_dict() for r in self._references.values()],
        }

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    # Opportunities

    def create_opportunity(self, opportunity: Opportunity) -> Opportunity:
        """
        Create a new opportunity.

        Raises:
            ValueError: If opportunity_id already exists
        """
        with self._lock:
            if opportunity.opportunity_id in self._opportunities:
                raise ValueError(f"Opportunity '{opportunity.opportunity_id}' already exists")
            self._opportunities[opportunity.opportunity_id] = opportunity
            self._save()
        return opportunity

    def update_opportunity(self, opportunity: Opportunity) -> Opportunity:
        """
        Replace an opportunity, bumping its version.

        Raises:
            RecordNotFound: If opportunity doesn't exist
        """
        with self._lock:
            existing = self._opportunities.get(opportunity.opportunity_id)
            if existing is None:
                raise RecordNotFound("opportunity", opportunity.opportunity_id)
            opportunity.version = existing.version + 1
            self._opportunities[opportunity.opportunity_id] = opportunity
            self._save()
        return opportunity

    def get_opportunity(self, opportunity_id: str) -> Opportunity:
        """
        Get an opportunity by ID.

        Raises:
            RecordNotFound: If opportunity_id is unknown
        """
        opportunity = self._opportunities.get(opportunity_id)
        if opportunity is None:
            raise RecordNotFound("opportunity", opportunity_id)
        return opportunity

    def get_opportunities(self) -> list[Opportunity]:
        """Get all opportunities."""
        return list(self._opportunities.values())

    # Properties

    def create_property(self, prop: Property) -> Property:
        """
        Create a new property listing.

        Raises:
            ValueError: If property_id already exists
        """
        with self._lock:
            if prop.property_id in self._properties:
                raise ValueError(f"Property '{prop.property_id}' already exists")
            self._properties[prop.property_id] = prop
            self._save()
        return prop

    def update_property(self, prop: Property) -> Property:
        """
        Replace a property listing, bumping its version.

        Raises:
            RecordNotFound: If property doesn't exist
        """
        with self._lock:
            existing = self._properties.get(prop.property_id)
            if existing is None:
                raise RecordNotFound("property", prop.property_id)
            prop.version = existing.version + 1
            self._properties[prop.property_id] = prop
            self._save()
        return prop

    def get_property(self, property_id: str) -> Property:
        """
        Get a property by ID.

        Raises:
            RecordNotFound: If property_id is unknown
        """
        prop = self._properties.get(property_id)
        if prop is None:
            raise RecordNotFound("property", property_id)
        return prop

    def get_properties(self, status: Optional[ListingStatus] = None) -> list[Property]:
        """Get all properties, optionally filtered by listing status."""
        props = list(self._properties.values())
        if status is not None:
            props = [p for p in props if p.status == status]
        return props

    def active_properties(
        self,
        state: Optional[str] = None,
        city: Optional[str] = None,
    ) -> list[Property]:
        """
        Get active listings, optionally narrowed by state and city.

        Args:
            state: Two-letter state code (case-insensitive)
            city: City name (case-insensitive)
        """
        results = []

        for prop in self._properties.values():
            if not prop.is_active:
                continue
            if state and prop.state.upper() != state.upper():
                continue
            if city and prop.city.lower() != city.lower():
                continue
            results.append(prop)

        return results

    def delete_property(self, property_id: str) -> bool:
        """
        Delete a property listing.

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            if property_id not in self._properties:
                return False
            del self._properties[property_id]
            self._save()
        return True

    # Reference inventory

    def add_reference_property(self, ref: ReferenceProperty) -> ReferenceProperty:
        """Add or replace a reference inventory entry."""
        with self._lock:
            self._references[ref.property_id] = ref
            self._save()
        return ref

    def get_reference_properties(self) -> list[ReferenceProperty]:
        """Get a snapshot of the reference inventory."""
        return list(self._references.values())

    # Counts

    def count_opportunities(self) -> int:
        return len(self._opportunities)

    def count_properties(self) -> int:
        return len(self._properties)

    def count_reference_properties(self) -> int:
        return len(self._references)

    def is_empty(self) -> bool:
        return not (self._opportunities or self._properties or self._references)


def create_sample_records(storage: RecordStore) -> None:
    """Create sample records for demo purposes."""

    # Sample opportunity: downtown DC office requirement
    opportunity = Opportunity(
        opportunity_id="OPP-DC-0001",
        solicitation_number="47PC0025R0001",
        agency="General Services Administration",
        title="Office space - Washington, DC",
        location=LocationRequirement(
            state="DC",
            city="Washington",
            center=GeoPoint(38.90, -77.03),
            radius_km=miles_to_km(10),
        ),
        space=SpaceRequirement(min_sqft=15000, max_sqft=25000),
        building=BuildingRequirement(
            building_class=BuildingClass.A,
            ada_compliant=True,
            public_transit=True,
            features={BuildingFeature.SECURE_ACCESS},
        ),
        occupancy_date=date(2025, 6, 1),
        response_deadline=date(2025, 3, 15),
    )

    # Sample opportunity: Baltimore, no point constraint
    opportunity2 = Opportunity(
        opportunity_id="OPP-MD-0002",
        solicitation_number="47PC0325R0007",
        agency="Social Security Administration",
        title="Field office - Baltimore, MD",
        location=LocationRequirement(state="MD", city="Baltimore"),
        space=SpaceRequirement(min_sqft=8000, max_sqft=12000),
        building=BuildingRequirement(building_class=BuildingClass.B, security_level=2),
        occupancy_date=date(2025, 9, 1),
    )

    properties = [
        Property(
            property_id="PROP-0001",
            name="1800 K Street",
            address=Address(street="1800 K St NW", city="Washington", state="DC", zip_code="20006"),
            location=GeoPoint(38.9024, -77.0419),
            available_sqft=18000,
            building_class=BuildingClass.A,
            security_level=3,
            ada_compliant=True,
            public_transit_access=True,
            features={BuildingFeature.SECURE_ACCESS, BuildingFeature.FIBER},
            certifications=["LEED Gold"],
            available_date=date(2025, 5, 1),
            lease_type=LeaseType.FULL_SERVICE,
            broker=BrokerContact(
                name="Dana Whitfield",
                company="Capitol Commercial",
                closed_transactions=6,
            ),
        ),
        Property(
            property_id="PROP-0002",
            name="Crystal City Tower",
            address=Address(street="2231 Crystal Dr", city="Arlington", state="VA", zip_code="22202"),
            location=GeoPoint(38.8545, -77.0495),
            available_sqft=32000,
            min_divisible_sqft=14000,
            building_class=BuildingClass.B,
            ada_compliant=True,
            public_transit_access=True,
            available_date=date(2025, 8, 15),
            lease_type=LeaseType.MODIFIED_GROSS,
            broker=BrokerContact(name="Ravi Patel", company="Potomac Realty", closed_transactions=1),
        ),
        Property(
            property_id="PROP-0003",
            name="Harbor East Center",
            address=Address(street="650 S Exeter St", city="Baltimore", state="MD", zip_code="21202"),
            location=GeoPoint(39.2825, -76.6005),
            available_sqft=10500,
            building_class=BuildingClass.B,
            security_level=2,
            available_date=date(2025, 7, 1),
            lease_type=LeaseType.NET,
            broker=BrokerContact(name="Morgan Lee", company="Chesapeake Partners"),
        ),
        Property(
            property_id="PROP-0004",
            name="Union Station Annex",
            address=Address(street="50 Massachusetts Ave NE", city="Washington", state="DC", zip_code="20002"),
            location=GeoPoint(38.8973, -77.0063),
            available_sqft=21000,
            building_class=BuildingClass.A,
            available_date=date(2025, 4, 1),
            lease_type=LeaseType.FULL_SERVICE,
            broker=BrokerContact(name="Sam Okafor", company="District Leasing Group", closed_transactions=0),
            status=ListingStatus.LEASED,
        ),
    ]

    references = [
        ReferenceProperty("REF-0001", 38.8951, -77.0364, Ownership.OWNED, rsf=420000,
                          year_constructed=1934, agency="Department of Commerce",
                          city="Washington", state="DC"),
        ReferenceProperty("REF-0002", 38.8868, -77.0257, Ownership.OWNED, rsf=310000,
                          year_constructed=1962, agency="Department of Agriculture",
                          city="Washington", state="DC"),
        ReferenceProperty("REF-0003", 38.9007, -77.0442, Ownership.LEASED, rsf=95000,
                          vacant_rsf=12000, lease_expiration=date(2026, 3, 31),
                          year_constructed=2008, agency="Federal Trade Commission",
                          city="Washington", state="DC"),
        ReferenceProperty("REF-0004", 38.8830, -77.0165, Ownership.LEASED, rsf=180000,
                          lease_expiration=date(2029, 9, 30), year_constructed=2021,
                          agency="Department of Transportation", city="Washington", state="DC"),
        ReferenceProperty("REF-0005", 38.8590, -77.0510, Ownership.LEASED, rsf=64000,
                          vacant_rsf=8000, lease_expiration=date(2027, 1, 31),
                          year_constructed=1988, agency="Department of Defense",
                          city="Arlington", state="VA"),
    ]

    for opp in [opportunity, opportunity2]:
        try:
            storage.create_opportunity(opp)
        except ValueError:
            logger.debug("Sample opportunity %s already exists", opp.opportunity_id)
    for prop in properties:
        try:
            storage.create_property(prop)
        except ValueError:
            logger.debug("Sample property %s already exists", prop.property_id)
    for ref in references:
        storage.add_reference_property(ref)
