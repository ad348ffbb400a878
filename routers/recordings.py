import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, HTTPException, Response
from sqlalchemy import update
from sqlmodel import or_, select

from config import RECORDING_RETENTION_DAYS
from db import SessionDep
from models import RecordingAccess, SessionRecording, TimeSession, utcnow
from recording_crypto import ENCRYPTION_ALGORITHM, generate_encryption_key
from schemas import RecordingCreate, RecordingUpdate
from .auth import CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recordings"])


def can_view_recording(
    recording: SessionRecording,
    ts: TimeSession,
    user_id: int,
    has_access: bool,
) -> bool:
    """Apply the recording's consent mode, then require an access grant or authorship."""
    is_participant = user_id in (ts.seeker_id, ts.giver_id)

    if recording.consent == "BOTH_CONSENT" and not is_participant:
        return False
    if recording.consent == "SEEKER_ONLY" and ts.seeker_id != user_id:
        return False
    if recording.consent == "GIVER_ONLY" and ts.giver_id != user_id:
        return False

    return has_access or recording.user_id == user_id


def _active_access(session: SessionDep, recording_id: int, user_id: int):
    return session.exec(
        select(RecordingAccess).where(
            RecordingAccess.recording_id == recording_id,
            RecordingAccess.user_id == user_id,
            RecordingAccess.is_active == True,  # noqa: E712
        )
    ).first()


@router.post("/")
def start_recording(recording_in: RecordingCreate, session: SessionDep, current: CurrentUserDep):
    """
    Prepare an encrypted recording for a session. Both participants get
    view access; only one pending or running recording per session.
    """
    ts = session.get(TimeSession, recording_in.session_id)
    if ts is None:
        raise HTTPException(status_code=404, detail="Session not found")
    if current.id not in (ts.seeker_id, ts.giver_id):
        raise HTTPException(status_code=403, detail="User is not a participant in this session")

    in_progress = session.exec(
        select(SessionRecording).where(
            SessionRecording.session_id == ts.id,
            SessionRecording.status.in_(("PENDING", "RECORDING")),
        )
    ).first()
    if in_progress:
        raise HTTPException(
            status_code=409,
            detail="Recording already exists or in progress for this session",
        )

    retention_days = recording_in.retention_days or RECORDING_RETENTION_DAYS
    expires_at = utcnow() + timedelta(days=retention_days) if recording_in.auto_delete else None

    recording = SessionRecording(
        session_id=ts.id,
        user_id=current.id,
        recording_type=recording_in.recording_type,
        consent=recording_in.consent,
        encryption_key=generate_encryption_key(),
        status="PENDING",
        expires_at=expires_at,
        meta={
            "auto_delete": recording_in.auto_delete,
            "retention_days": retention_days,
            "encryption_algorithm": ENCRYPTION_ALGORITHM,
        },
        access_control={
            "allow_download": False,
            "allow_share": False,
            "require_auth": True,
        },
    )
    session.add(recording)
    session.flush()

    for participant_id in {ts.seeker_id, ts.giver_id}:
        session.add(
            RecordingAccess(
                recording_id=recording.id,
                user_id=participant_id,
                access_level="VIEW",
                granted_by=current.id,
            )
        )

    session.commit()
    session.refresh(recording)

    logger.info(f"Recording {recording.id} initialised for session {ts.id}")
    return {
        "success": True,
        "recording": {
            "id": recording.id,
            "session_id": recording.session_id,
            "recording_type": recording.recording_type,
            "status": recording.status,
            "consent": recording.consent,
            "encryption_enabled": True,
            "expires_at": recording.expires_at,
        },
        "message": "Recording session initialized. Ready to start recording.",
    }


@router.get("/")
def list_recordings(
    session: SessionDep,
    current: CurrentUserDep,
    session_id: Optional[int] = None,
):
    query = (
        select(SessionRecording, TimeSession)
        .join(TimeSession, TimeSession.id == SessionRecording.session_id)
        .where(
            SessionRecording.is_deleted == False,  # noqa: E712
            or_(
                SessionRecording.user_id == current.id,
                TimeSession.seeker_id == current.id,
                TimeSession.giver_id == current.id,
            ),
        )
        .order_by(SessionRecording.created_at.desc(), SessionRecording.id.desc())
    )
    if session_id is not None:
        query = query.where(SessionRecording.session_id == session_id)

    results = []
    for recording, ts in session.exec(query).all():
        access = _active_access(session, recording.id, current.id)
        if not can_view_recording(recording, ts, current.id, access is not None):
            continue
        results.append(
            {
                "id": recording.id,
                "session_id": recording.session_id,
                "session_type": ts.session_type,
                "recording_type": recording.recording_type,
                "status": recording.status,
                "consent": recording.consent,
                "duration": recording.duration,
                "file_size": recording.file_size,
                "created_at": recording.created_at,
                "expires_at": recording.expires_at,
                "access_level": access.access_level if access else None,
                "has_thumbnail": bool(recording.thumbnail_path),
            }
        )

    return {"recordings": results}


@router.put("/{recording_id}")
def update_recording(
    recording_id: int,
    update_in: RecordingUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    recording = session.get(SessionRecording, recording_id)
    if recording is None or recording.is_deleted:
        raise HTTPException(status_code=404, detail="Recording not found")

    ts = session.get(TimeSession, recording.session_id)
    access = _active_access(session, recording.id, current.id)
    is_participant = current.id in (ts.seeker_id, ts.giver_id)
    if not is_participant and access is None:
        raise HTTPException(status_code=403, detail="Access denied to this recording")

    if update_in.status:
        recording.status = update_in.status
    if update_in.duration is not None:
        recording.duration = update_in.duration
    if update_in.file_size is not None:
        recording.file_size = update_in.file_size
    session.add(recording)

    if update_in.access_level and access is not None:
        access.access_level = update_in.access_level
        session.add(access)

    session.commit()
    session.refresh(recording)
    return {"success": True, "recording": recording.model_dump(exclude={"encryption_key"})}


@router.delete("/{recording_id}", status_code=204)
def delete_recording(recording_id: int, session: SessionDep, current: CurrentUserDep):
    """Only the creator may delete; every access grant is revoked with it."""
    recording = session.get(SessionRecording, recording_id)
    if recording is None or recording.is_deleted:
        raise HTTPException(status_code=404, detail="Recording not found")
    if recording.user_id != current.id:
        raise HTTPException(status_code=403, detail="Only the recording creator can delete it")

    recording.is_deleted = True
    recording.deleted_at = utcnow()
    recording.status = "DELETED"
    session.add(recording)

    session.exec(
        update(RecordingAccess)
        .where(RecordingAccess.recording_id == recording.id)
        .values(is_active=False)
    )
    session.commit()

    logger.info(f"Recording {recording.id} deleted by user {current.id}")
    return Response(status_code=204)
