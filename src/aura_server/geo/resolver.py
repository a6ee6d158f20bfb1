"""
Geo Resolver

Maps caller-supplied location hints to a residential community.

Two paths
---------
- Coordinates: great-circle (haversine) distance to every known building,
  minimum wins, ties go to the first building in table order.
- Name: an ordered cascade of matching rules, first rule with a hit wins:

    1. exact (case-insensitive) building, alias or community name
    2. substring containment in either direction; longest key wins,
       ties by table order
    3. whole-token match of a known name's parts against the input;
       generic parts ("hall", "house", ...) never match on their own

A miss is a normal outcome and returns ``None``.
"""

from __future__ import annotations

import math
import re
from typing import List, NamedTuple, Optional, Tuple

from .models import CommunityInfo, DormBuilding, ResolvedLocation
from .reference import ReferenceData

EARTH_RADIUS_MILES = 3959.0

GENERIC_NAME_TOKENS = frozenset({"hall", "house", "the", "community", "village", "building"})

# Inputs shorter than this only match exactly or by whole token.
MIN_SUBSTRING_INPUT = 3

_TOKEN_SPLIT = re.compile(r"[\s\-]+")


class NearestBuilding(NamedTuple):
    building: DormBuilding
    distance_miles: float


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def _normalize(text: str) -> str:
    return " ".join(text.strip().lower().split())


class GeoResolver:
    """Nearest-building and building/community name resolution."""

    def __init__(self, reference: ReferenceData) -> None:
        self._reference = reference

        # (lower-cased key, community name) in table order: buildings and
        # aliases first, then community names.
        keys: List[Tuple[str, str]] = list(reference.building_lookup.items())
        for info in reference.communities:
            keys.append((info.community_name.lower(), info.community_name))
        self._keys = keys

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    def nearest_building(self, latitude: float, longitude: float) -> Optional[NearestBuilding]:
        """
        Return the closest known building and its distance in miles.

        ``None`` only when the building table is empty.
        """
        best: Optional[NearestBuilding] = None
        for building in self._reference.buildings:
            dist = haversine_miles(latitude, longitude, building.latitude, building.longitude)
            # Strict comparison keeps the first building on ties.
            if best is None or dist < best.distance_miles:
                best = NearestBuilding(building, dist)
        return best

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def resolve_by_name(self, text: Optional[str]) -> Optional[CommunityInfo]:
        """
        Resolve free text (building, alias or community name) to a community.
        """
        community_name = self._match_name(text or "")
        if community_name is None:
            return None
        return self._reference.community(community_name)

    def _match_name(self, text: str) -> Optional[str]:
        query = _normalize(text)
        if not query:
            return None

        # 1. Exact key
        for key, community in self._keys:
            if key == query:
                return community

        if query in GENERIC_NAME_TOKENS:
            return None

        # 2. Substring either direction, most specific (longest) key first
        best: Optional[Tuple[str, str]] = None
        for key, community in self._keys:
            contains = key in query or (
                len(query) >= MIN_SUBSTRING_INPUT and query in key
            )
            if contains and (best is None or len(key) > len(best[0])):
                best = (key, community)
        if best is not None:
            return best[1]

        # 3. Whole token
        for key, community in self._keys:
            for token in _TOKEN_SPLIT.split(key):
                if token and token not in GENERIC_NAME_TOKENS and token == query:
                    return community

        return None

    # ------------------------------------------------------------------
    # Combined
    # ------------------------------------------------------------------

    def locate(
        self,
        location_text: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Optional[ResolvedLocation]:
        """
        Resolve the caller's community from a name, falling back to coordinates.

        Missing or denied geolocation is a normal input: pass ``None`` for
        the coordinates and only the name path is used.
        """
        if location_text and location_text.strip():
            community = self.resolve_by_name(location_text)
            if community is not None:
                return ResolvedLocation(
                    community=community,
                    label=location_text.strip(),
                    via="name",
                )

        if latitude is None or longitude is None:
            return None

        nearest = self.nearest_building(latitude, longitude)
        if nearest is None:
            return None

        community = self.resolve_by_name(nearest.building.name)
        if community is None:
            return None

        return ResolvedLocation(
            community=community,
            label=nearest.building.name,
            via="coordinates",
            distance_miles=nearest.distance_miles,
        )
