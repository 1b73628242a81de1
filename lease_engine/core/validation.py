"""
Structural validation for opportunities and properties.

Runs before any scoring so that malformed records fail fast with
InvalidInput and no partially computed Match is ever produced.
Missing optional data is not an error here; the scorers degrade it
to a default score.
"""

import math
import re
from dataclasses import dataclass
from typing import Any

from .errors import InvalidCoordinate, InvalidInput
from .geo import validate_point, validate_radius
from .listing import Property, ListingStatus
from .opportunity import BuildingClass, BuildingFeature, Opportunity


@dataclass
class ValidationResult:
    """Result of validation operation."""

    is_valid: bool
    errors: list[InvalidInput]
    warnings: list[str]

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_for_errors(self) -> None:
        """Raise the first collected error, if any."""
        if self.errors:
            raise self.errors[0]


STATE_CODE_PATTERN = re.compile(r"^[A-Z]{2}$")

MIN_SECURITY_LEVEL = 1
MAX_SECURITY_LEVEL = 5


def _is_number(value: Any) -> bool:
    """Finite int or float; NaN and infinity never compare sensibly."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _check_non_negative(value: Any, field: str, errors: list[InvalidInput]) -> None:
    if value is None:
        return
    if not _is_number(value):
        errors.append(InvalidInput(field, "Must be a finite number", value))
    elif value < 0:
        errors.append(InvalidInput(field, "Cannot be negative", value))


def _check_security_level(value: Any, field: str, errors: list[InvalidInput]) -> None:
    if value is None:
        return
    if not isinstance(value, int) or isinstance(value, bool):
        errors.append(InvalidInput(field, "Security level must be an integer", value))
    elif not MIN_SECURITY_LEVEL <= value <= MAX_SECURITY_LEVEL:
        errors.append(InvalidInput(
            field,
            f"Security level must be between {MIN_SECURITY_LEVEL} and {MAX_SECURITY_LEVEL}",
            value
        ))


def _check_building_extras(features: Any, certifications: Any, prefix: str,
                           errors: list[InvalidInput]) -> None:
    for feature in features:
        if not isinstance(feature, BuildingFeature):
            errors.append(InvalidInput(f"{prefix}features", f"Unknown building feature: {feature}", feature))
    for cert in certifications:
        if not isinstance(cert, str) or not cert.strip():
            errors.append(InvalidInput(f"{prefix}certifications", "Certification must be a non-empty string", cert))


def validate_opportunity(opportunity: Opportunity) -> ValidationResult:
    """
    Validate an opportunity for structural correctness.

    Returns ValidationResult with any errors found.
    """
    errors: list[InvalidInput] = []
    warnings: list[str] = []

    # Required fields
    if not opportunity.opportunity_id:
        errors.append(InvalidInput("opportunity_id", "Opportunity ID is required"))

    # Location
    loc = opportunity.location
    if loc.center is not None:
        try:
            validate_point(loc.center, "location.center")
        except InvalidCoordinate as e:
            errors.append(e)

    if loc.radius_km is not None:
        try:
            validate_radius(loc.radius_km, "location.radius_km")
        except InvalidInput as e:
            errors.append(e)
        if loc.center is None:
            warnings.append("Radius given without a center point - radius will be ignored")

    if loc.state and not STATE_CODE_PATTERN.match(loc.state.upper()):
        warnings.append(f"State '{loc.state}' is not a two-letter code")

    if not loc.state and not loc.city and loc.center is None:
        warnings.append("No location constraint - location will score as insufficient data")

    # Space
    space = opportunity.space
    _check_non_negative(space.min_sqft, "space.min_sqft", errors)
    _check_non_negative(space.max_sqft, "space.max_sqft", errors)

    if _is_number(space.min_sqft) and _is_number(space.max_sqft):
        if space.min_sqft > space.max_sqft:
            errors.append(InvalidInput(
                "space",
                "Minimum square footage cannot exceed maximum",
                {"min": space.min_sqft, "max": space.max_sqft}
            ))

    if not space.is_specified:
        warnings.append("No space requirement - space will score as insufficient data")

    # Building
    bldg = opportunity.building
    if bldg.building_class is not None and not isinstance(bldg.building_class, BuildingClass):
        errors.append(InvalidInput(
            "building.building_class",
            f"Invalid building class: {bldg.building_class}"
        ))
    _check_security_level(bldg.security_level, "building.security_level", errors)
    _check_building_extras(bldg.features, bldg.certifications, "building.", errors)

    # Version
    if not isinstance(opportunity.version, int) or opportunity.version < 0:
        errors.append(InvalidInput("version", "Version must be a non-negative integer", opportunity.version))

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings
    )


def validate_property(prop: Property) -> ValidationResult:
    """
    Validate a property listing for structural correctness.

    Returns ValidationResult with any errors found.
    """
    errors: list[InvalidInput] = []
    warnings: list[str] = []

    # Required fields
    if not prop.property_id:
        errors.append(InvalidInput("property_id", "Property ID is required"))

    # Location
    if prop.location is not None:
        try:
            validate_point(prop.location, "location")
        except InvalidCoordinate as e:
            errors.append(e)
    else:
        warnings.append("No coordinates - distance-based location scoring unavailable")

    # Space
    _check_non_negative(prop.available_sqft, "available_sqft", errors)
    _check_non_negative(prop.min_divisible_sqft, "min_divisible_sqft", errors)

    if _is_number(prop.available_sqft) and _is_number(prop.min_divisible_sqft):
        if prop.min_divisible_sqft > prop.available_sqft:
            warnings.append("Minimum divisible block exceeds available square footage")

    # Building
    if prop.building_class is not None and not isinstance(prop.building_class, BuildingClass):
        errors.append(InvalidInput(
            "building_class",
            f"Invalid building class: {prop.building_class}"
        ))
    _check_security_level(prop.security_level, "security_level", errors)
    _check_building_extras(prop.features, prop.certifications, "", errors)

    # Broker track record
    closed = prop.broker.closed_transactions
    if closed is not None:
        if not isinstance(closed, int) or isinstance(closed, bool):
            errors.append(InvalidInput(
                "broker.closed_transactions",
                "Closed transactions must be an integer",
                closed
            ))
        elif closed < 0:
            errors.append(InvalidInput(
                "broker.closed_transactions",
                "Closed transactions cannot be negative",
                closed
            ))

    # Status
    if not isinstance(prop.status, ListingStatus):
        errors.append(InvalidInput("status", f"Invalid listing status: {prop.status}"))
    elif prop.status != ListingStatus.ACTIVE:
        warnings.append(f"Listing is {prop.status.value} - scoring it anyway")

    if not isinstance(prop.version, int) or prop.version < 0:
        errors.append(InvalidInput("version", "Version must be a non-negative integer", prop.version))

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings
    )
