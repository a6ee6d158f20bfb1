"""
Directions Resolver

Answers "how do I get to X" style questions from the caller's community.

Destination identification is an ordered rule list, first hit wins:

1. full destination name contained in the query (longest name wins)
2. meaningful whole-word sub-tokens of destination names (most tokens,
   then longest name, then table order)
3. curated alias table (longest alias first)

Without a known location the resolver returns an empty result; the caller's
prompt is then responsible for asking where the user lives.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .models import CommunityDirections, Destination
from .reference import ReferenceData
from .resolver import GeoResolver

logger = logging.getLogger("aura.directions")


DIRECTIONS_QUERY_PHRASES: Tuple[str, ...] = (
    "how do i get to",
    "how to get to",
    "how can i get to",
    "directions to",
    "direction to",
    "nearest",
    "closest",
    "how far",
    "walk to",
    "route to",
)

DESTINATION_STOP_WORDS = frozenset({
    "hall", "the", "street", "center", "student", "building", "commons",
    "dining", "of", "and", "university", "campus", "house",
})

TRANSIT_TERMS: Tuple[str, ...] = ("bus", "transit", "shuttle", "ride", "drive")
SAFETY_TERMS: Tuple[str, ...] = ("night", "dark", "late", "safe", "safety", "escort", "alone")

# Walks at least this long always get the transit note.
LONG_WALK_MINUTES = 15

MIN_TOKEN_LENGTH = 3


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(phrase)}(?![a-z0-9])", text) is not None


def _mentions_any(text: str, terms: Sequence[str]) -> bool:
    return any(_contains_phrase(text, term) for term in terms)


def is_directions_query(query: str) -> bool:
    """Heuristic: does the query ask how to reach somewhere?"""
    return _mentions_any(query.lower(), DIRECTIONS_QUERY_PHRASES)


@dataclass
class DirectionsResult:
    text: str = ""
    sources: List[str] = field(default_factory=list)
    destination: Optional[str] = None


class DirectionsResolver:
    """Destination matching and distance/time lookup per community."""

    def __init__(self, reference: ReferenceData, geo: GeoResolver) -> None:
        self._reference = reference
        self._geo = geo

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, query: str, location: Optional[str]) -> DirectionsResult:
        """
        Build a directions block for ``query`` from the caller's location.

        Returns an empty result when the location is unknown or the community
        has no directions table.
        """
        if not location or not location.strip():
            return DirectionsResult()

        community = self._geo.resolve_by_name(location)
        if community is None:
            logger.debug("No community for location %r; skipping directions", location)
            return DirectionsResult()

        table = self._reference.directions_for(community.community_name)
        if table is None or not table.destinations:
            return DirectionsResult()

        source = f"Campus Directions ({community.community_name})"
        destination = self.match_destination(query, table)

        if destination is not None:
            return DirectionsResult(
                text=self._render_destination(query, location.strip(), destination),
                sources=[source],
                destination=destination.name,
            )

        if is_directions_query(query):
            return DirectionsResult(
                text=self._render_listing(location.strip(), table),
                sources=[source],
            )

        return DirectionsResult()

    def match_destination(
        self,
        query: str,
        table: CommunityDirections,
    ) -> Optional[Destination]:
        """Apply the name, sub-token and alias rules in order."""
        q = query.lower()
        destinations = table.destinations

        # 1. Full name
        named = [d for d in destinations if d.name.lower() in q]
        if named:
            return max(named, key=lambda d: len(d.name))

        # 2. Meaningful sub-tokens
        best: Optional[Tuple[int, int, int, Destination]] = None
        for position, dest in enumerate(destinations):
            tokens = {
                t for t in re.split(r"[\s\-]+", dest.name.lower())
                if len(t) >= MIN_TOKEN_LENGTH and t not in DESTINATION_STOP_WORDS
            }
            hits = sum(1 for t in tokens if _contains_phrase(q, t))
            if not hits:
                continue
            # Higher hits, longer name, earlier position
            rank = (hits, len(dest.name), -position, dest)
            if best is None or rank[:3] > best[:3]:
                best = rank
        if best is not None:
            return best[3]

        # 3. Aliases
        by_name = {d.name: d for d in destinations}
        for alias in sorted(self._reference.destination_aliases, key=len, reverse=True):
            if _contains_phrase(q, alias):
                target = by_name.get(self._reference.destination_aliases[alias])
                if target is not None:
                    return target

        return None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_destination(self, query: str, origin: str, dest: Destination) -> str:
        q = query.lower()
        lines = [
            f"Directions from {origin} to {dest.name}:",
            f"Distance: {dest.distance_miles:.1f} miles",
            f"Estimated walking time: about {dest.walk_minutes} minutes",
        ]
        if dest.route:
            lines.append(f"Route: {dest.route}")
        if dest.landmarks:
            lines.append(f"Landmarks: {', '.join(dest.landmarks)}")

        if dest.transit and (
            dest.walk_minutes >= LONG_WALK_MINUTES or _mentions_any(q, TRANSIT_TERMS)
        ):
            lines.append(f"Transit: {dest.transit}")

        if self._reference.safety_tips and _mentions_any(q, SAFETY_TERMS):
            lines.append("Safety tips:")
            lines.extend(f"- {tip}" for tip in self._reference.safety_tips)

        return "\n".join(lines)

    @staticmethod
    def _render_listing(origin: str, table: CommunityDirections) -> str:
        lines = [f"Known destinations from {origin} ({table.community_name}):"]
        for dest in table.destinations:
            lines.append(
                f"- {dest.name}: {dest.distance_miles:.1f} miles, "
                f"about {dest.walk_minutes} minutes walking"
            )
        return "\n".join(lines)
