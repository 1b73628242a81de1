"""
Neighborhood Scorer - Factor Breakdown.

Scores six market factors around a query point from the nearby
inventory and its metrics. The breakdown explains the density score;
it is reported next to it and does not feed into it.
"""

from typing import Optional

from .models import NeighborhoodFactors, NeighborhoodMetrics


# (lower bound, score) bands, highest first
DENSITY_BANDS = [(20, 100), (15, 90), (10, 80), (7, 70), (5, 60), (3, 50), (2, 40), (1, 30)]
EXPIRING_LEASE_BANDS = [(30, 100), (20, 90), (15, 80), (10, 70), (5, 60), (3, 50), (1, 40)]
DEMAND_BANDS = [
    (10_000_000, 100),
    (5_000_000, 90),
    (2_000_000, 80),
    (1_000_000, 70),
    (500_000, 60),
    (250_000, 50),
    (100_000, 40),
]
GROWTH_BANDS = [(20, 100), (15, 90), (10, 80), (7, 70), (5, 60), (3, 50)]

# (upper bound, score) bands for vacancy percent, lowest first
VACANCY_BANDS = [(5, 100), (10, 90), (15, 80), (20, 70), (25, 60), (30, 50)]


def _band(value: float, bands: list[tuple[float, int]]) -> Optional[int]:
    for bound, score in bands:
        if value >= bound:
            return score
    return None


def density_factor(per_sq_mile: float) -> float:
    """Properties per square mile; a sparse area tops out at 30."""
    banded = _band(per_sq_mile, DENSITY_BANDS)
    if banded is not None:
        return float(banded)
    return min(30.0, max(0.0, per_sq_mile) * 30)


def lease_activity_factor(leased: int, total: int) -> float:
    """
    Score the leased share of the federal footprint.

    A balanced 40-60% leased mix scores highest: the area has both an
    established federal anchor and an active leasing market.
    """
    if total <= 0:
        return 0.0
    pct = leased / total * 100
    if 40 <= pct <= 60:
        return 100.0
    if 30 <= pct < 40:
        return 80 + (pct - 30) / 10 * 20
    if 60 < pct <= 70:
        return 80 + (70 - pct) / 10 * 20
    if 20 <= pct < 30:
        return 60 + (pct - 20) / 10 * 20
    if 70 < pct <= 80:
        return 60 + (80 - pct) / 10 * 20
    if pct < 20:
        return min(60.0, pct * 3)
    return max(40.0, 100 - pct)


def expiring_leases_factor(expiring: int) -> float:
    """Count of leases expiring inside the lookahead window."""
    return float(_band(expiring, EXPIRING_LEASE_BANDS) or 0)


def demand_factor(total_rsf: int) -> float:
    """Total federal rentable square feet in the radius."""
    banded = _band(total_rsf, DEMAND_BANDS)
    if banded is not None:
        return float(banded)
    return min(40.0, total_rsf / 100_000 * 40)


def vacancy_factor(vacancy_pct: float, total_rsf: int) -> float:
    """Lower vacancy means tighter supply and scores higher."""
    if total_rsf <= 0:
        return 0.0
    for bound, score in VACANCY_BANDS:
        if vacancy_pct <= bound:
            return float(score)
    return max(0.0, 100 - vacancy_pct * 2)


def growth_factor(recent: int, total: int) -> float:
    """Share of properties built within the recent-construction window."""
    if total <= 0:
        return 0.0
    pct = recent / total * 100
    banded = _band(pct, GROWTH_BANDS)
    if banded is not None:
        return float(banded)
    return min(50.0, pct * 16.67)


def calculate_factors(
    count: int,
    density_per_sq_mile: float,
    metrics: NeighborhoodMetrics,
) -> NeighborhoodFactors:
    """
    Score all six factors.

    Args:
        count: Properties within the radius
        density_per_sq_mile: Properties per square mile
        metrics: Descriptive metrics for the same properties

    Returns:
        NeighborhoodFactors, each rounded to one decimal
    """
    return NeighborhoodFactors(
        density=round(density_factor(density_per_sq_mile), 1),
        lease_activity=round(lease_activity_factor(metrics.leased_properties, count), 1),
        expiring_leases=round(expiring_leases_factor(metrics.expiring_leases), 1),
        demand=round(demand_factor(metrics.total_rsf), 1),
        vacancy=round(vacancy_factor(metrics.vacancy_rate * 100, metrics.total_rsf), 1),
        growth=round(growth_factor(metrics.recent_construction, count), 1),
    )
