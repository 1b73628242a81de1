"""
Lease Match Engine

Scores commercial property listings against government leasing
opportunities, and rates neighborhoods by federal property density.

Modules:
  core: Data models, category scoring, aggregation and matching
  neighborhood: Federal presence scoring around a point
  api: Record storage and versioned result cache

Usage:
    from lease_engine.core import Opportunity, Property, score_pair, score_batch
    from lease_engine.neighborhood import ReferenceProperty, score_neighborhood
"""

__version__ = "0.3.0"
