import logging

from fastapi import APIRouter, HTTPException, Response

from db import SessionDep
from models import User
from schemas import UserProfile, UserRead, UserUpdate
from .auth import CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get("/{user_id}", response_model=UserProfile)
def get_user(user_id: int, session: SessionDep):
    """
    Get a single user's public profile by ID. Contact details are not exposed.
    """
    user = session.get(User, user_id)
    if user is None or user.is_disabled:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/me", response_model=UserRead)
def update_own_profile(update: UserUpdate, session: SessionDep, current: CurrentUserDep):
    """
    Self-service profile, matching preference and location update.
    Only fields present in the body are changed.
    """
    for field, value in update.model_dump(exclude_none=True).items():
        setattr(current, field, value)

    session.add(current)
    session.commit()
    session.refresh(current)
    return current


@router.delete("/me", status_code=204)
def disable_own_account(session: SessionDep, current: CurrentUserDep):
    """
    Users are never hard deleted; the account is flagged as disabled
    and taken out of discovery.
    """
    current.is_disabled = True
    current.is_available = False
    session.add(current)
    session.commit()

    logger.info(f"User {current.id} disabled their account")
    return Response(status_code=204)
