"""
Neighborhood Scorer for Lease Match Engine.

Rates how federal an area is by the density of nearby federally owned
or leased properties. Independent of per-pair matching; shares the
geo utilities in lease_engine.core.geo.

The reference inventory is always supplied by the caller. This module
does not fetch federal property data.
"""

from .models import (
    Ownership,
    NeighborhoodLabel,
    ReferenceProperty,
    NearbyProperty,
    NeighborhoodMetrics,
    NeighborhoodFactors,
    NeighborhoodScore,
)
from .factors import calculate_factors
from .score import (
    DEFAULT_SATURATION_DENSITY,
    density_to_score,
    label_for_score,
    find_nearby,
    calculate_metrics,
    score_neighborhood,
)

__all__ = [
    # Models
    "Ownership",
    "NeighborhoodLabel",
    "ReferenceProperty",
    "NearbyProperty",
    "NeighborhoodMetrics",
    "NeighborhoodFactors",
    "NeighborhoodScore",
    # Scoring
    "DEFAULT_SATURATION_DENSITY",
    "density_to_score",
    "label_for_score",
    "find_nearby",
    "calculate_metrics",
    "score_neighborhood",
    "calculate_factors",
]
