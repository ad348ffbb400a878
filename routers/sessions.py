import logging
import uuid
from typing import List

from fastapi import APIRouter, HTTPException
from sqlmodel import or_, select

from config import MEETING_BASE_URL
from db import SessionDep
from models import TimeSession, User
from schemas import SessionCreate, SessionRead, SessionUpdate, UserPublic
from .auth import GIVER_ROLES, CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions"])

# duration in minutes -> price in rupees
SESSION_PRICES = {10: 99, 30: 249}
DEFAULT_SESSION_PRICE = 399


def price_for_duration(duration: int) -> int:
    return SESSION_PRICES.get(duration, DEFAULT_SESSION_PRICE)


def meeting_link() -> str:
    return f"{MEETING_BASE_URL}/TimeRent-{uuid.uuid4().hex[:12]}"


def _to_read(session: SessionDep, ts: TimeSession) -> SessionRead:
    seeker = session.get(User, ts.seeker_id)
    giver = session.get(User, ts.giver_id)
    data = SessionRead.model_validate(ts)
    data.seeker = UserPublic.model_validate(seeker) if seeker else None
    data.giver = UserPublic.model_validate(giver) if giver else None
    return data


def get_participant_session(session: SessionDep, session_id: int, user: User) -> TimeSession:
    """Load a session the user takes part in, 404 otherwise."""
    ts = session.get(TimeSession, session_id)
    if ts is None or user.id not in (ts.seeker_id, ts.giver_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return ts


@router.get("/", response_model=List[SessionRead])
def list_sessions(session: SessionDep, current: CurrentUserDep):
    """
    Sessions where the caller is either the seeker or the giver,
    latest scheduled first.
    """
    query = (
        select(TimeSession)
        .where(
            or_(
                TimeSession.seeker_id == current.id,
                TimeSession.giver_id == current.id,
            )
        )
        .order_by(TimeSession.scheduled_for.desc())
    )
    return [_to_read(session, ts) for ts in session.exec(query).all()]


@router.post("/", response_model=SessionRead)
def create_session(session_in: SessionCreate, session: SessionDep, current: CurrentUserDep):
    """
    Book a session with a giver. The price is fixed by duration and
    payment starts out pending.
    """
    giver = session.get(User, session_in.giver_id)
    if (
        giver is None
        or giver.role not in GIVER_ROLES
        or not giver.is_available
        or giver.is_disabled
    ):
        raise HTTPException(status_code=400, detail="Giver not available")

    if giver.id == current.id:
        raise HTTPException(status_code=400, detail="You cannot book a session with yourself")

    ts = TimeSession(
        seeker_id=current.id,
        giver_id=giver.id,
        session_type=session_in.session_type,
        duration=session_in.duration,
        scheduled_for=session_in.scheduled_for,
        status="SCHEDULED",
        meeting_link=meeting_link(),
        payment_status="PENDING",
        amount=price_for_duration(session_in.duration),
    )
    session.add(ts)
    session.commit()
    session.refresh(ts)

    logger.info(f"Session {ts.id} booked by seeker {current.id} with giver {giver.id}")
    return _to_read(session, ts)


@router.get("/{session_id}", response_model=SessionRead)
def get_session_detail(session_id: int, session: SessionDep, current: CurrentUserDep):
    ts = get_participant_session(session, session_id, current)
    return _to_read(session, ts)


@router.patch("/{session_id}", response_model=SessionRead)
def update_session(
    session_id: int,
    update: SessionUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    """
    Update status and timestamps. Either participant may set any status;
    transitions are not enforced.
    """
    ts = get_participant_session(session, session_id, current)

    for field, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(ts, field, value)

    session.add(ts)
    session.commit()
    session.refresh(ts)
    return _to_read(session, ts)
