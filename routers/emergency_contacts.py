import logging
from typing import List

from fastapi import APIRouter, HTTPException, Response
from sqlalchemy import update
from sqlmodel import select

from db import SessionDep
from models import EmergencyContact, User
from schemas import EmergencyContactCreate, EmergencyContactUpdate
from .auth import CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["emergency-contacts"])


def _clear_primary(session: SessionDep, user_id: int, keep_id=None) -> None:
    stmt = update(EmergencyContact).where(EmergencyContact.user_id == user_id)
    if keep_id is not None:
        stmt = stmt.where(EmergencyContact.id != keep_id)
    session.exec(stmt.values(is_primary=False))


def _own_contact(session: SessionDep, contact_id: int, user: User) -> EmergencyContact:
    contact = session.get(EmergencyContact, contact_id)
    if contact is None or not contact.is_active or contact.user_id != user.id:
        raise HTTPException(status_code=404, detail="Emergency contact not found")
    return contact


@router.post("/", response_model=EmergencyContact)
def create_contact(contact_in: EmergencyContactCreate, session: SessionDep, current: CurrentUserDep):
    """A new primary contact demotes any existing primary."""
    if contact_in.is_primary:
        _clear_primary(session, current.id)

    contact = EmergencyContact(
        user_id=current.id,
        name=contact_in.name,
        relationship=contact_in.relationship,
        phone=contact_in.phone,
        email=contact_in.email,
        is_primary=contact_in.is_primary,
        priority=1 if contact_in.is_primary else 2,
    )
    session.add(contact)
    session.commit()
    session.refresh(contact)

    logger.info(f"User {current.id} added emergency contact {contact.id}")
    return contact


@router.get("/", response_model=List[EmergencyContact])
def list_contacts(session: SessionDep, current: CurrentUserDep):
    return session.exec(
        select(EmergencyContact)
        .where(
            EmergencyContact.user_id == current.id,
            EmergencyContact.is_active == True,  # noqa: E712
        )
        .order_by(
            EmergencyContact.is_primary.desc(),
            EmergencyContact.priority,
            EmergencyContact.created_at.desc(),
        )
    ).all()


@router.put("/{contact_id}", response_model=EmergencyContact)
def update_contact(
    contact_id: int,
    update_in: EmergencyContactUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    contact = _own_contact(session, contact_id, current)

    if update_in.is_primary and not contact.is_primary:
        _clear_primary(session, current.id, keep_id=contact.id)

    for field, value in update_in.model_dump(exclude_none=True).items():
        setattr(contact, field, value)

    session.add(contact)
    session.commit()
    session.refresh(contact)
    return contact


@router.delete("/{contact_id}", status_code=204)
def delete_contact(contact_id: int, session: SessionDep, current: CurrentUserDep):
    """Soft delete: the contact is deactivated, not removed."""
    contact = _own_contact(session, contact_id, current)
    contact.is_active = False
    session.add(contact)
    session.commit()

    logger.info(f"User {current.id} removed emergency contact {contact.id}")
    return Response(status_code=204)
