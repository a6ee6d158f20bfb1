"""
Geo Reference Models

Canonical, immutable schemas for the static residence-hall tables:

- DormBuilding: a building with coordinates for nearest-building lookup
- CommunityInfo: a cluster of buildings sharing one front desk and policy set
- Destination / CommunityDirections: walking directions from a community
"""

from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


_FROZEN = ConfigDict(extra="forbid", frozen=True)


class DormBuilding(BaseModel):
    """A residence hall with its geographic position."""

    name: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    model_config = _FROZEN


class CommunityInfo(BaseModel):
    """
    Front desk, hours and amenities for one residential community.

    ``buildings`` keeps table order; it drives name-resolution tie-breaks.
    """

    community_name: str = Field(..., min_length=1)
    buildings: List[str] = Field(default_factory=list)
    front_desk: str = ""
    front_desk_phone: str = ""
    front_desk_location: str = ""
    quiet_hours: str = ""
    courtesy_hours: str = ""
    laundry: str = ""
    dining_nearby: List[str] = Field(default_factory=list)
    mailroom: str = ""
    parking: str = ""
    room_type: str = ""
    amenities: List[str] = Field(default_factory=list)
    policies: Dict[str, str] = Field(default_factory=dict)

    model_config = _FROZEN


class Destination(BaseModel):
    """Walking directions from a community to one campus destination."""

    name: str = Field(..., min_length=1)
    distance_miles: float = Field(..., ge=0.0)
    walk_minutes: int = Field(..., ge=0)
    route: str = ""
    landmarks: List[str] = Field(default_factory=list)
    transit: Optional[str] = None

    model_config = _FROZEN


class CommunityDirections(BaseModel):
    """Ordered destination table for one community."""

    community_name: str = Field(..., min_length=1)
    destinations: List[Destination] = Field(default_factory=list)

    model_config = _FROZEN


class ResolvedLocation(BaseModel):
    """Outcome of turning caller-supplied location hints into a community."""

    community: CommunityInfo
    label: str = Field(..., min_length=1, description="Building or community the caller is in.")
    via: str = Field(..., description="'name' or 'coordinates'.")
    distance_miles: Optional[float] = None

    model_config = _FROZEN
