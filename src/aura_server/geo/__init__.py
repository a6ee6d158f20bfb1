"""
Geo Package

Static residence-hall tables, nearest-building lookup, building/community name
resolution and campus directions.
"""

from .models import CommunityInfo, DormBuilding, Destination, CommunityDirections, ResolvedLocation
from .reference import ReferenceData
from .resolver import GeoResolver, NearestBuilding, haversine_miles
from .directions import DirectionsResolver, DirectionsResult, is_directions_query

__all__ = [
    "CommunityInfo",
    "DormBuilding",
    "Destination",
    "CommunityDirections",
    "ResolvedLocation",
    "ReferenceData",
    "GeoResolver",
    "NearestBuilding",
    "haversine_miles",
    "DirectionsResolver",
    "DirectionsResult",
    "is_directions_query",
]
