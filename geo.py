"""
Distance and compatibility helpers used by discovery and matching.

Everything here is pure so it can be unit tested without a database.
Callers load the candidate givers and pass them in.
"""
import math
from typing import Any, Iterable, List, Optional

EARTH_RADIUS_KM = 6371

MAX_NEARBY_RESULTS = 50


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two lat/lng points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def rank_nearby(
    latitude: float,
    longitude: float,
    givers: Iterable[Any],
    max_distance_km: float,
    limit: int = MAX_NEARBY_RESULTS,
) -> List[tuple]:
    """
    Return (giver, distance_km) pairs within max_distance_km,
    closest first, capped at `limit`.

    Givers without coordinates are skipped.
    """
    ranked = []
    for giver in givers:
        if giver.latitude is None or giver.longitude is None:
            continue
        distance = haversine_km(latitude, longitude, giver.latitude, giver.longitude)
        if distance <= max_distance_km:
            ranked.append((giver, distance))

    ranked.sort(key=lambda pair: pair[1])
    return ranked[:limit]


def match_score(
    giver: Any,
    emotional_tempo: Optional[str] = None,
    energy_level: Optional[str] = None,
    silence_comfort: Optional[int] = None,
) -> int:
    """
    Compatibility score in [0, 100].

    Base score comes from rating and experience, the rest from how close
    the giver's preferences are to what the seeker asked for.
    """
    score = 0.0
    score += (giver.presence_rating or 0) * 20
    score += min((giver.total_sessions or 0) * 2, 30)

    if emotional_tempo and giver.emotional_tempo == emotional_tempo:
        score += 15
    if energy_level and giver.energy_level == energy_level:
        score += 15
    if silence_comfort and giver.silence_comfort:
        comfort_diff = abs(silence_comfort - giver.silence_comfort)
        score += max(0, 20 - comfort_diff * 5)

    return int(min(100, round(score)))
