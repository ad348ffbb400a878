import logging

from fastapi import APIRouter, HTTPException
from sqlmodel import func, or_, select

from db import SessionDep
from geo import rank_nearby, match_score
from models import User
from schemas import MatchPreferences, NearbyQuery, SearchQuery
from .auth import GIVER_ROLES, CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["discover"])

MAX_MATCHES = 10
MAX_SEARCH_RESULTS = 20
MAX_POPULAR_CITIES = 20


def giver_card(giver: User) -> dict:
    return {
        "id": giver.id,
        "name": giver.name,
        "avatar": giver.avatar,
        "bio": giver.bio,
        "presence_rating": giver.presence_rating,
        "total_sessions": giver.total_sessions,
        "emotional_tempo": giver.emotional_tempo,
        "silence_comfort": giver.silence_comfort,
        "energy_level": giver.energy_level,
        "voice_tone_preference": giver.voice_tone_preference,
        "hourly_rate": giver.hourly_rate,
    }


def _available_givers(exclude_id=None):
    stmt = select(User).where(
        User.role.in_(GIVER_ROLES),
        User.is_available == True,  # noqa: E712
        User.is_disabled == False,  # noqa: E712
    )
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return stmt


@router.post("/discover/nearby")
def find_nearby_givers(query: NearbyQuery, session: SessionDep, current: CurrentUserDep):
    """
    Givers with a public location within `max_distance` km of the seeker,
    closest first. Every eligible giver is scanned per request.
    """
    if query.latitude is None or query.longitude is None:
        raise HTTPException(status_code=400, detail="Location coordinates are required")

    stmt = _available_givers(exclude_id=current.id).where(
        User.is_location_public == True,  # noqa: E712
        User.latitude.is_not(None),
        User.longitude.is_not(None),
    )
    if query.filters.max_distance is not None:
        stmt = stmt.where(User.max_distance <= query.filters.max_distance)

    givers = session.exec(stmt).all()
    ranked = rank_nearby(query.latitude, query.longitude, givers, query.max_distance)

    results = []
    for giver, distance in ranked:
        card = giver_card(giver)
        card.update(
            {
                "latitude": giver.latitude,
                "longitude": giver.longitude,
                "city": giver.city,
                "state": giver.state,
                "country": giver.country,
                "max_distance": giver.max_distance,
                "distance": round(distance, 2),
            }
        )
        results.append(card)

    return {
        "success": True,
        "givers": results,
        "center": {"latitude": query.latitude, "longitude": query.longitude},
        "search_radius": query.max_distance,
        "total_found": len(results),
    }


@router.get("/discover/locations")
def popular_locations(session: SessionDep):
    """Cities with the most public givers."""
    giver_count = func.count(User.id).label("giver_count")
    stmt = (
        select(User.city, User.state, User.country, giver_count)
        .where(
            User.role.in_(GIVER_ROLES),
            User.is_location_public == True,  # noqa: E712
            User.city.is_not(None),
        )
        .group_by(User.city, User.state, User.country)
        .order_by(giver_count.desc())
        .limit(MAX_POPULAR_CITIES)
    )
    rows = session.exec(stmt).all()
    return {
        "success": True,
        "cities": [
            {"city": city, "state": state, "country": country, "giver_count": count}
            for city, state, country, count in rows
        ],
    }


@router.post("/discover/search")
def search_givers(query: SearchQuery, session: SessionDep):
    """Free-text search over name, bio and city, optionally narrowed by location."""
    stmt = _available_givers().where(User.is_location_public == True)  # noqa: E712

    if query.query:
        pattern = f"%{query.query.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(User.name).like(pattern),
                func.lower(User.bio).like(pattern),
                func.lower(User.city).like(pattern),
            )
        )

    if query.location:
        pattern = f"%{query.location.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(User.city).like(pattern),
                func.lower(User.state).like(pattern),
                func.lower(User.country).like(pattern),
            )
        )

    stmt = stmt.order_by(
        User.presence_rating.desc(), User.total_sessions.desc()
    ).limit(MAX_SEARCH_RESULTS)

    givers = session.exec(stmt).all()
    return {
        "success": True,
        "givers": [
            {**giver_card(g), "city": g.city, "state": g.state, "country": g.country}
            for g in givers
        ],
        "query": query.query,
        "location": query.location,
    }


@router.post("/match")
def match_givers(prefs: MatchPreferences, session: SessionDep, current: CurrentUserDep):
    """
    Top givers for the seeker's preferences, scored for compatibility.
    Silence comfort matches within two points either way.
    """
    stmt = _available_givers(exclude_id=current.id)
    if prefs.emotional_tempo:
        stmt = stmt.where(User.emotional_tempo == prefs.emotional_tempo)
    if prefs.energy_level:
        stmt = stmt.where(User.energy_level == prefs.energy_level)
    if prefs.silence_comfort:
        stmt = stmt.where(
            User.silence_comfort >= max(1, prefs.silence_comfort - 2),
            User.silence_comfort <= min(10, prefs.silence_comfort + 2),
        )

    stmt = stmt.order_by(
        User.presence_rating.desc(), User.total_sessions.desc()
    ).limit(MAX_MATCHES)

    scored = []
    for giver in session.exec(stmt).all():
        card = giver_card(giver)
        card["match_score"] = match_score(
            giver,
            emotional_tempo=prefs.emotional_tempo,
            energy_level=prefs.energy_level,
            silence_comfort=prefs.silence_comfort,
        )
        scored.append(card)

    scored.sort(key=lambda g: g["match_score"], reverse=True)
    return {"givers": scored, "total": len(scored)}
