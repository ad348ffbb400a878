import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Response
from sqlmodel import func, select

from db import SessionDep
from models import ProfessionalBackup
from schemas import ProfessionalBackupCreate, ProfessionalBackupUpdate
from .auth import AdminDep, CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["professional-backups"])


def _active_backup(session: SessionDep, backup_id: int) -> ProfessionalBackup:
    backup = session.get(ProfessionalBackup, backup_id)
    if backup is None or not backup.is_active:
        raise HTTPException(status_code=404, detail="Professional backup not found")
    return backup


@router.post("/", response_model=ProfessionalBackup)
def create_backup(backup_in: ProfessionalBackupCreate, session: SessionDep, admin: AdminDep):
    backup = ProfessionalBackup(**backup_in.model_dump())
    session.add(backup)
    session.commit()
    session.refresh(backup)

    logger.info(f"Admin {admin.id} added professional backup {backup.id}")
    return backup


@router.get("/", response_model=List[ProfessionalBackup])
def list_backups(
    session: SessionDep,
    current: CurrentUserDep,
    specialization: Optional[str] = None,
    available: Optional[bool] = None,
    limit: int = Query(default=10, ge=1, le=100),
):
    """
    Active professionals, optionally filtered by specialization (substring,
    case-insensitive) and availability. Lowest priority number first, then
    fastest response.
    """
    query = select(ProfessionalBackup).where(
        ProfessionalBackup.is_active == True  # noqa: E712
    )

    if specialization:
        query = query.where(
            func.lower(ProfessionalBackup.specialization).like(f"%{specialization.lower()}%")
        )

    if available:
        query = query.where(ProfessionalBackup.is_available == True)  # noqa: E712

    query = query.order_by(
        ProfessionalBackup.priority, ProfessionalBackup.response_time
    ).limit(limit)
    return session.exec(query).all()


@router.put("/{backup_id}", response_model=ProfessionalBackup)
def update_backup(
    backup_id: int,
    update: ProfessionalBackupUpdate,
    session: SessionDep,
    admin: AdminDep,
):
    backup = _active_backup(session, backup_id)
    for field, value in update.model_dump(exclude_none=True).items():
        setattr(backup, field, value)

    session.add(backup)
    session.commit()
    session.refresh(backup)
    return backup


@router.delete("/{backup_id}", status_code=204)
def delete_backup(backup_id: int, session: SessionDep, admin: AdminDep):
    backup = _active_backup(session, backup_id)
    backup.is_active = False
    session.add(backup)
    session.commit()
    return Response(status_code=204)
