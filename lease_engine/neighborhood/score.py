"""
Neighborhood Scorer - Score Calculation.

Rates a location by the density of federally-associated properties
within a radius. Density maps through a saturating curve so additional
nearby properties add less and less once the area is already dense.
"""

import logging
import math
from datetime import date, timedelta
from typing import Iterable, Optional

from lease_engine.core.errors import InvalidCoordinate, InvalidInput
from lease_engine.core.geo import KM_PER_MILE, GeoPoint, PointLike, distance, validate_point, validate_radius

from .factors import calculate_factors
from .models import (
    NearbyProperty,
    NeighborhoodLabel,
    NeighborhoodMetrics,
    NeighborhoodScore,
    Ownership,
    ReferenceProperty,
)


logger = logging.getLogger(__name__)

# Score thresholds for labels
EXCEPTIONAL_THRESHOLD = 80
STRONG_THRESHOLD = 60
MODERATE_THRESHOLD = 40

# Properties per square kilometer at which the score reaches ~63
DEFAULT_SATURATION_DENSITY = 2.0

EXPIRING_LEASE_WINDOW_DAYS = 730  # 24 months
RECENT_CONSTRUCTION_YEARS = 5


def density_to_score(density: float, saturation_density: float = DEFAULT_SATURATION_DENSITY) -> float:
    """
    Map density to a 0-100 desirability score.

    Uses 100 * (1 - e^(-density / saturation_density)): zero density is
    zero, the curve is monotonic and approaches 100 asymptotically.
    """
    if saturation_density <= 0:
        raise InvalidInput("saturation_density", "Saturation density must be positive", saturation_density)
    if density <= 0:
        return 0.0
    score = 100.0 * (1.0 - math.exp(-density / saturation_density))
    return round(min(100.0, score), 1)


def label_for_score(score: float) -> NeighborhoodLabel:
    """Determine label from score."""
    if score >= EXCEPTIONAL_THRESHOLD:
        return NeighborhoodLabel.EXCEPTIONAL
    elif score >= STRONG_THRESHOLD:
        return NeighborhoodLabel.STRONG
    elif score >= MODERATE_THRESHOLD:
        return NeighborhoodLabel.MODERATE
    else:
        return NeighborhoodLabel.LOW


def find_nearby(
    center: PointLike,
    radius_km: float,
    inventory: Iterable[ReferenceProperty],
) -> list[NearbyProperty]:
    """
    Filter the inventory to properties within radius of center.

    Inventory rows with invalid coordinates are skipped.

    Returns:
        Nearby properties sorted by distance, then property ID
    """
    radius = validate_radius(radius_km)
    origin = validate_point(center, "center")

    nearby = []
    for ref in inventory:
        try:
            dist_km = distance(origin, (ref.latitude, ref.longitude))
        except InvalidCoordinate as e:
            logger.warning("Skipping reference property %s: %s", ref.property_id, e)
            continue
        if dist_km <= radius:
            nearby.append(NearbyProperty(reference=ref, distance_km=dist_km))

    nearby.sort(key=lambda n: (n.distance_km, n.property_id))
    return nearby


def calculate_metrics(nearby: list[NearbyProperty], as_of: date) -> NeighborhoodMetrics:
    """Summarize ownership, space, expiring leases and recent construction."""
    metrics = NeighborhoodMetrics()
    window_end = as_of + timedelta(days=EXPIRING_LEASE_WINDOW_DAYS)
    recent_year = as_of.year - RECENT_CONSTRUCTION_YEARS

    for item in nearby:
        ref = item.reference

        if ref.ownership == Ownership.LEASED:
            metrics.leased_properties += 1
        else:
            metrics.owned_properties += 1

        metrics.total_rsf += ref.rsf or 0
        metrics.vacant_rsf += ref.vacant_rsf or 0

        if ref.lease_expiration and as_of <= ref.lease_expiration <= window_end:
            metrics.expiring_leases += 1
            metrics.expiring_rsf += ref.rsf or 0

        if ref.year_constructed and ref.year_constructed >= recent_year:
            metrics.recent_construction += 1

    return metrics


def score_neighborhood(
    center: PointLike,
    radius_km: float,
    inventory: Iterable[ReferenceProperty],
    saturation_density: float = DEFAULT_SATURATION_DENSITY,
    as_of: Optional[date] = None,
) -> NeighborhoodScore:
    """
    Score an area by federal property density.

    Args:
        center: Query point
        radius_km: Search radius in kilometers (must be positive)
        inventory: Snapshot of federally-associated properties
        saturation_density: Density (per km2) controlling curve saturation
        as_of: Reference date for expiring-lease metrics (defaults to today)

    Returns:
        NeighborhoodScore with an informational factor breakdown; an empty inventory or no properties in range
        scores 0 with no contributors

    Raises:
        InvalidCoordinate: If center is out of range
        InvalidRadius: If radius is not positive
    """
    lat, lng = validate_point(center, "center")
    radius = validate_radius(radius_km)

    nearby = find_nearby((lat, lng), radius, inventory)

    area_km2 = math.pi * radius * radius
    density = len(nearby) / area_km2
    score = density_to_score(density, saturation_density)

    metrics = calculate_metrics(nearby, as_of or date.today())
    factors = calculate_factors(len(nearby), density * KM_PER_MILE ** 2, metrics)

    logger.info(
        "Neighborhood score %.1f at (%.4f, %.4f) r=%.2f km: %d properties",
        score, lat, lng, radius, len(nearby),
    )

    return NeighborhoodScore(
        center=GeoPoint(lat, lng),
        radius_km=radius,
        count=len(nearby),
        density=density,
        score=score,
        label=label_for_score(score),
        contributors=nearby,
        metrics=metrics,
        factors=factors,
    )
