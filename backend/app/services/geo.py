"""
Nearest-substation resolution.

LOGIC:
1. Haversine distance (Earth radius 6371 km) from the device to every station
2. Rank ascending by distance
3. Nearest station within 2 km is "detected"
4. "Nearby" = stations within 10 km, or the 3 closest when none qualify

Without a device position the catalog is returned in its original order and
no station is detected.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from app.core.substations import SUBSTATIONS, Substation

EARTH_RADIUS_KM = 6371.0
DETECTED_RADIUS_KM = 2.0
NEARBY_RADIUS_KM = 10.0
NEARBY_FALLBACK_COUNT = 3


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


@dataclass(frozen=True)
class RankedStation:
    station: Substation
    distance_km: Optional[float] = None


@dataclass
class StationResolution:
    ranked: list[RankedStation]
    nearby: list[RankedStation]
    detected: Optional[RankedStation] = None


def resolve_stations(
    lat: Optional[float],
    lng: Optional[float],
    catalog: Sequence[Substation] = SUBSTATIONS,
) -> StationResolution:
    """Rank the catalog around (lat, lng); degrade gracefully without a fix."""
    if lat is None or lng is None:
        unranked = [RankedStation(station=s) for s in catalog]
        return StationResolution(ranked=unranked, nearby=list(unranked))

    ranked = sorted(
        (RankedStation(station=s, distance_km=haversine_km(lat, lng, s.lat, s.lng)) for s in catalog),
        key=lambda r: r.distance_km,
    )

    detected = None
    if ranked and ranked[0].distance_km <= DETECTED_RADIUS_KM:
        detected = ranked[0]

    nearby = [r for r in ranked if r.distance_km <= NEARBY_RADIUS_KM]
    if not nearby:
        nearby = ranked[:NEARBY_FALLBACK_COUNT]

    return StationResolution(ranked=ranked, nearby=nearby, detected=detected)
