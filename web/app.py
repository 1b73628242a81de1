"""
Lease Match Engine - FastAPI Web Application

Read access to stored opportunities and listings, property matching,
and neighborhood federal-presence scoring.
"""

import json
import logging
import math
import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from lease_engine import __version__
from lease_engine.core import (
    InvalidInput,
    KM_PER_MILE,
    ListingStatus,
    Match,
    RecordNotFound,
    ScoringPolicy,
    miles_to_km,
    rank_matches,
    score_batch,
    score_pair,
)
from lease_engine.neighborhood import score_neighborhood
from lease_engine.api import MatchCache, RecordStore, create_sample_records


logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Lease Match Engine",
    description="Government Lease Matching and Neighborhood Scoring API",
    version=__version__,
)

# Neighborhood query radius bounds (miles)
DEFAULT_RADIUS_MILES = 5.0
MIN_RADIUS_MILES = 0.1
MAX_RADIUS_MILES = 50.0

# Global instances
_storage: Optional[RecordStore] = None
_cache: Optional[MatchCache] = None
_policy: Optional[ScoringPolicy] = None


def get_storage() -> RecordStore:
    """Get or create the global storage instance."""
    global _storage
    if _storage is None:
        storage_path = os.environ.get(
            "LEASE_ENGINE_DATA_PATH",
            str(Path(__file__).parent.parent / "data" / "records.json")
        )
        _storage = RecordStore(storage_path or None)

        # Create sample records if storage is empty
        if _storage.is_empty():
            create_sample_records(_storage)

    return _storage


def get_cache() -> MatchCache:
    """Get or create the global match cache."""
    global _cache
    if _cache is None:
        _cache = MatchCache()
    return _cache


def get_policy() -> ScoringPolicy:
    """
    Get the scoring policy, loading an override from
    LEASE_ENGINE_POLICY_PATH if set.
    """
    global _policy
    if _policy is None:
        policy_path = os.environ.get("LEASE_ENGINE_POLICY_PATH")
        if policy_path:
            with open(policy_path, "r") as f:
                policy = ScoringPolicy.from_dict(json.load(f))
            logger.info("Loaded scoring policy from %s", policy_path)
        else:
            policy = ScoringPolicy()
        policy.validate()
        _policy = policy
    return _policy


def get_max_workers() -> Optional[int]:
    """Batch worker pool size from LEASE_ENGINE_MAX_WORKERS (defaults to core count)."""
    value = os.environ.get("LEASE_ENGINE_MAX_WORKERS")
    return int(value) if value else None


# Pydantic models for request/response
class MatchRequest(BaseModel):
    opportunity_id: str
    property_id: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    min_score: Optional[float] = None
    force_refresh: bool = False


# Routes

@app.get("/api/health")
async def health():
    """Health check endpoint."""
    storage = get_storage()
    return {
        "status": "ok",
        "opportunities": storage.count_opportunities(),
        "properties": storage.count_properties(),
        "reference_properties": storage.count_reference_properties(),
        "cached_matches": len(get_cache()),
    }


@app.get("/api/opportunities")
async def list_opportunities():
    """List all opportunities."""
    opportunities = get_storage().get_opportunities()
    return {
        "opportunities": [o.to_dict() for o in opportunities],
        "count": len(opportunities),
    }


@app.get("/api/opportunities/{opportunity_id}")
async def get_opportunity(opportunity_id: str):
    """Get a single opportunity by ID."""
    try:
        return get_storage().get_opportunity(opportunity_id).to_dict()
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/api/properties")
async def list_properties(status: Optional[str] = None):
    """List property listings with optional status filtering."""
    try:
        listing_status = ListingStatus(status) if status else None
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown listing status '{status}'")

    properties = get_storage().get_properties(listing_status)
    return {
        "properties": [p.to_dict() for p in properties],
        "count": len(properties),
    }


@app.post("/api/match")
def match_properties(data: MatchRequest):
    """
    Score properties against an opportunity.

    With property_id, scores that single pair. Otherwise scores every
    active listing passing the optional state/city filter and returns
    them ranked.
    """
    storage = get_storage()
    cache = get_cache()
    policy = get_policy()

    try:
        opportunity = storage.get_opportunity(data.opportunity_id)

        if data.property_id:
            prop = storage.get_property(data.property_id)
            match = cache.get_or_score(
                opportunity,
                prop,
                lambda o, p: score_pair(o, p, policy),
                force_refresh=data.force_refresh,
                policy=policy,
            )
            return match.to_response()

        properties = storage.active_properties(state=data.state, city=data.city)
        matches = _score_with_cache(opportunity, properties, cache, policy, data.force_refresh)

    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    if data.min_score is not None:
        matches = [m for m in matches if m.overall_score >= data.min_score]

    return {
        "opportunityId": opportunity.opportunity_id,
        "count": len(matches),
        "matches": [m.to_response() for m in matches],
    }


@app.get("/api/neighborhood-score")
def neighborhood_score(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radiusMiles: Optional[str] = None,
):
    """Score the federal presence around a point."""
    latitude = _parse_float_param("lat", lat)
    longitude = _parse_float_param("lng", lng)
    radius_miles = (
        _parse_float_param("radiusMiles", radiusMiles)
        if radiusMiles is not None else DEFAULT_RADIUS_MILES
    )

    if not MIN_RADIUS_MILES <= radius_miles <= MAX_RADIUS_MILES:
        raise HTTPException(
            status_code=400,
            detail=f"radiusMiles must be between {MIN_RADIUS_MILES} and {MAX_RADIUS_MILES}",
        )

    try:
        result = score_neighborhood(
            (latitude, longitude),
            miles_to_km(radius_miles),
            get_storage().get_reference_properties(),
        )
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "location": {"lat": latitude, "lng": longitude},
        "radiusMiles": radius_miles,
        "score": result.score,
        "label": result.label.value,
        "count": result.count,
        "density": round(result.density * KM_PER_MILE * KM_PER_MILE, 4),  # Per square mile
        "metrics": result.metrics.to_dict(),
        "factors": result.factors.to_dict(),
        "factorComposite": result.factors.composite,
        "properties": [
            {
                "propertyId": c.property_id,
                "agency": c.reference.agency,
                "ownership": c.reference.ownership.value,
                "city": c.reference.city,
                "state": c.reference.state,
                "rsf": c.reference.rsf,
                "distanceMiles": round(c.distance_km / KM_PER_MILE, 3),
            }
            for c in result.contributors
        ],
    }


def _score_with_cache(opportunity, properties, cache: MatchCache, policy: ScoringPolicy,
                      force_refresh: bool) -> list[Match]:
    """Serve current cached matches and batch-score the rest."""
    cached = []
    misses = []

    for prop in properties:
        match = None if force_refresh else cache.get_match(opportunity, prop, policy)
        if match is None:
            misses.append(prop)
        else:
            cached.append(match)

    fresh = score_batch(opportunity, misses, policy, max_workers=get_max_workers()) if misses else []
    for match in fresh:
        cache.put_match(match, policy)

    return rank_matches(cached + fresh)


def _parse_float_param(name: str, value: Optional[str]) -> float:
    """Parse a required numeric query parameter, raising 400 if missing or invalid."""
    if value is None or value.strip() == "":
        raise HTTPException(status_code=400, detail=f"Missing required parameter: {name}")
    try:
        parsed = float(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Parameter {name} must be numeric")
    if not math.isfinite(parsed):
        raise HTTPException(status_code=400, detail=f"Parameter {name} must be finite")
    return parsed


# Run with: uvicorn web.app:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
