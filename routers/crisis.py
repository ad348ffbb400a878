import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from sqlmodel import select

from crisis_protocol import (
    CRISIS_PROTOCOLS,
    EMERGENCY_RESOURCES,
    MAX_CONTACTS_NOTIFIED,
    MAX_PROFESSIONALS_NOTIFIED,
    execute_protocol,
    protocol_name,
    protocol_steps,
)
from db import SessionDep
from models import CrisisReport, EmergencyContact, ProfessionalBackup, TimeSession, utcnow
from schemas import CrisisCreate, CrisisStatusUpdate
from .auth import ADMIN_ROLES, CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["crisis"])


@router.post("/intervention")
def start_intervention(report_in: CrisisCreate, session: SessionDep, current: CurrentUserDep):
    """
    Open a crisis report and run the protocol for its severity.

    Each step runs once, in order, as soon as the contact and professional
    lookups return. What was done is stored on the report's metadata.
    """
    if report_in.session_id is not None:
        ts = session.get(TimeSession, report_in.session_id)
        if ts is None or current.id not in (ts.seeker_id, ts.giver_id):
            raise HTTPException(status_code=404, detail="Session not found")

    report = CrisisReport(
        user_id=current.id,
        session_id=report_in.session_id,
        severity=report_in.severity,
        type=report_in.type,
        description=report_in.description,
        status="ACTIVE",
        protocol_used=protocol_name(report_in.severity),
    )
    session.add(report)
    session.flush()

    contacts = session.exec(
        select(EmergencyContact)
        .where(
            EmergencyContact.user_id == current.id,
            EmergencyContact.is_active == True,  # noqa: E712
        )
        .order_by(EmergencyContact.priority)
        .limit(MAX_CONTACTS_NOTIFIED)
    ).all()

    professionals = session.exec(
        select(ProfessionalBackup)
        .where(ProfessionalBackup.is_active == True)  # noqa: E712
        .order_by(ProfessionalBackup.priority)
        .limit(MAX_PROFESSIONALS_NOTIFIED)
    ).all()

    actions_taken = execute_protocol(report.severity, contacts, professionals, utcnow())

    report.meta = {
        "actions_taken": actions_taken,
        "protocol_steps": protocol_steps(report.severity),
        "emergency_contacts_notified": len(contacts),
        "professionals_notified": len(professionals),
    }
    session.add(report)
    session.commit()
    session.refresh(report)

    logger.warning(
        f"Crisis report {report.id} ({report.severity}/{report.type}) opened by user {current.id}, "
        f"{len(actions_taken)} protocol actions taken"
    )

    return {
        "success": True,
        "crisis_report": {
            "id": report.id,
            "severity": report.severity,
            "type": report.type,
            "status": report.status,
            "created_at": report.created_at,
        },
        "protocol_activated": report.protocol_used,
        "actions_taken": actions_taken,
        "emergency_resources": EMERGENCY_RESOURCES,
        "emergency_contacts": [
            {
                "id": c.id,
                "name": c.name,
                "relationship": c.relationship,
                "is_primary": c.is_primary,
            }
            for c in contacts
        ],
        "professional_support": [
            {
                "id": p.id,
                "name": p.name,
                "profession": p.profession,
                "specialization": p.specialization,
                "response_time": p.response_time,
            }
            for p in professionals
        ],
    }


@router.get("/intervention")
def get_active_crises(
    session: SessionDep,
    current: CurrentUserDep,
    user_id: Optional[int] = None,
):
    """Active and escalated reports for the caller (admins may ask about any user)."""
    target_id = current.id
    if user_id is not None and user_id != current.id:
        if current.role not in ADMIN_ROLES:
            raise HTTPException(status_code=403, detail="Not allowed to view these reports")
        target_id = user_id

    active = session.exec(
        select(CrisisReport)
        .where(
            CrisisReport.user_id == target_id,
            CrisisReport.status.in_(("ACTIVE", "ESCALATED")),
        )
        .order_by(CrisisReport.created_at.desc(), CrisisReport.id.desc())
    ).all()

    return {
        "active_crises": active,
        "available_protocols": {
            severity: protocol_name(severity) for severity in CRISIS_PROTOCOLS
        },
        "emergency_resources": EMERGENCY_RESOURCES,
    }


@router.patch("/{report_id}", response_model=CrisisReport)
def update_crisis_status(
    report_id: int,
    update: CrisisStatusUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    report = session.get(CrisisReport, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Crisis report not found")
    if report.user_id != current.id and current.role not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Not allowed to update this report")

    report.status = update.status
    report.resolved_at = utcnow() if update.status == "RESOLVED" else None
    session.add(report)
    session.commit()
    session.refresh(report)

    logger.info(f"Crisis report {report.id} marked {report.status} by user {current.id}")
    return report
