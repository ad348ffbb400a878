import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from sqlmodel import func, select

from db import SessionDep
from models import PresenceRating, TimeSession, User
from schemas import RatingCreate
from .auth import CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ratings"])


def refresh_presence_rating(session: SessionDep, giver_id: int) -> float:
    """Recompute the giver's Presence Rating as the mean of all ratings on their sessions."""
    average = session.exec(
        select(func.avg(PresenceRating.rating))
        .join(TimeSession, TimeSession.id == PresenceRating.session_id)
        .where(TimeSession.giver_id == giver_id)
    ).one()
    return float(average or 0)


@router.post("/", response_model=PresenceRating)
def create_rating(rating_in: RatingCreate, session: SessionDep, current: CurrentUserDep):
    ts = session.get(TimeSession, rating_in.session_id)
    if (
        ts is None
        or current.id not in (ts.seeker_id, ts.giver_id)
        or ts.status != "COMPLETED"
    ):
        raise HTTPException(status_code=404, detail="Session not found or not completed")

    existing = session.exec(
        select(PresenceRating).where(
            PresenceRating.session_id == ts.id,
            PresenceRating.user_id == current.id,
        )
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="Rating already submitted")

    rating = PresenceRating(
        session_id=ts.id,
        user_id=current.id,
        rating=rating_in.rating,
        felt_less_alone=rating_in.felt_less_alone,
        time_felt_heavy=rating_in.time_felt_heavy,
        would_sit_again=rating_in.would_sit_again,
        feedback=rating_in.feedback,
    )
    session.add(rating)
    session.flush()

    giver = session.get(User, ts.giver_id)
    giver.presence_rating = refresh_presence_rating(session, ts.giver_id)
    # count each session once, on the seeker's rating
    if current.id == ts.seeker_id:
        giver.total_sessions += 1
    session.add(giver)

    session.commit()
    session.refresh(rating)
    return rating


@router.get("/", response_model=List[PresenceRating])
def list_ratings(
    session: SessionDep,
    current: CurrentUserDep,
    session_id: Optional[int] = None,
):
    """Ratings for one session, or every rating the caller has written."""
    if session_id is not None:
        query = select(PresenceRating).where(PresenceRating.session_id == session_id)
    else:
        query = (
            select(PresenceRating)
            .where(PresenceRating.user_id == current.id)
            .order_by(PresenceRating.created_at.desc())
        )
    return session.exec(query).all()
