"""
Static Reference Data

Loads the residence-hall tables (buildings, communities, directions) once at
startup into immutable in-memory structures.

Files
-----
- communities.json: communities, building coordinates, extra building aliases
- directions.json: per-community destination tables, destination aliases,
  safety tips

A missing file yields empty tables (the source then contributes nothing).
A present but malformed file raises ``ReferenceDataError``: it is a
deployment defect, not a runtime condition.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from .models import CommunityDirections, CommunityInfo, Destination, DormBuilding
from ..core.errors import ReferenceDataError

logger = logging.getLogger("aura.reference")

PACKAGED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

COMMUNITIES_FILE = "communities.json"
DIRECTIONS_FILE = "directions.json"


@dataclass(frozen=True)
class ReferenceData:
    """
    Immutable bundle of static tables.

    ``building_lookup`` maps lower-cased building names (and curated building
    aliases) to community names, in table order.
    """

    communities: Tuple[CommunityInfo, ...] = ()
    buildings: Tuple[DormBuilding, ...] = ()
    building_lookup: Dict[str, str] = field(default_factory=dict)
    directions: Dict[str, CommunityDirections] = field(default_factory=dict)
    destination_aliases: Dict[str, str] = field(default_factory=dict)
    safety_tips: Tuple[str, ...] = ()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def community(self, name: str) -> Optional[CommunityInfo]:
        key = name.strip().lower()
        for info in self.communities:
            if info.community_name.lower() == key:
                return info
        return None

    def directions_for(self, community_name: str) -> Optional[CommunityDirections]:
        return self.directions.get(community_name)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, directory: Optional[str] = None) -> "ReferenceData":
        """
        Load the tables from ``directory`` (defaults to the packaged data).
        """
        root = Path(directory) if directory else PACKAGED_DATA_DIR

        communities_raw = _read_json(root / COMMUNITIES_FILE)
        directions_raw = _read_json(root / DIRECTIONS_FILE)

        try:
            communities = tuple(
                CommunityInfo(**item)
                for item in communities_raw.get("communities", [])
            )
            buildings = tuple(
                DormBuilding(**item)
                for item in communities_raw.get("buildings", [])
            )
            directions = {
                name: CommunityDirections(
                    community_name=name,
                    destinations=[Destination(**d) for d in items],
                )
                for name, items in directions_raw.get("communities", {}).items()
            }
        except (TypeError, ValidationError) as exc:
            raise ReferenceDataError(
                f"Invalid reference data under {root}: {type(exc).__name__}"
            ) from exc

        lookup = _build_lookup(communities, communities_raw.get("building_aliases", {}))

        aliases = {
            str(alias).strip().lower(): str(target)
            for alias, target in directions_raw.get("aliases", {}).items()
        }

        logger.info(
            "Loaded reference data: %d communities, %d buildings, %d direction tables",
            len(communities),
            len(buildings),
            len(directions),
        )

        return cls(
            communities=communities,
            buildings=buildings,
            building_lookup=lookup,
            directions=directions,
            destination_aliases=aliases,
            safety_tips=tuple(directions_raw.get("safety_tips", [])),
        )


def _read_json(path: Path) -> dict:
    if not path.exists():
        logger.warning("Reference table %s not found; continuing without it.", path)
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ReferenceDataError(
            f"Failed to read reference table {path.name}: {type(exc).__name__}"
        ) from exc

    if not isinstance(data, dict):
        raise ReferenceDataError(f"Reference table {path.name} must be a JSON object.")
    return data


def _build_lookup(
    communities: Tuple[CommunityInfo, ...],
    aliases: Dict[str, str],
) -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for info in communities:
        for building in info.buildings:
            lookup.setdefault(building.strip().lower(), info.community_name)

    known: List[str] = [c.community_name for c in communities]
    for alias, community_name in aliases.items():
        if community_name not in known:
            logger.warning("Building alias %r points at unknown community %r", alias, community_name)
            continue
        lookup.setdefault(alias.strip().lower(), community_name)

    return lookup
