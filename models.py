from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def json_column(name: str = "metadata") -> Column:
    return Column(name, JSON, nullable=True)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    password_hash: str
    role: str = "TIME_SEEKER"  # TIME_SEEKER | TIME_GIVER | BOTH | ADMIN | MODERATOR

    bio: Optional[str] = None
    avatar: Optional[str] = None
    phone: Optional[str] = None

    is_available: bool = True
    is_disabled: bool = False

    presence_rating: float = 0.0
    total_sessions: int = 0
    hourly_rate: Optional[int] = None

    # matching preferences
    emotional_tempo: Optional[str] = None
    silence_comfort: Optional[int] = None
    energy_level: Optional[str] = None
    voice_tone_preference: Optional[str] = None

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    is_location_public: bool = False
    max_distance: Optional[float] = None

    created_at: datetime = Field(default_factory=utcnow)
    last_login: Optional[datetime] = None


class TimeSession(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    seeker_id: int = Field(foreign_key="user.id", index=True)
    giver_id: int = Field(foreign_key="user.id", index=True)

    session_type: str
    duration: int  # minutes
    scheduled_for: datetime
    status: str = "SCHEDULED"  # SCHEDULED | IN_PROGRESS | COMPLETED | CANCELLED
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    meeting_link: Optional[str] = None

    payment_status: str = "PENDING"  # PENDING | PAID | REFUNDED
    payment_id: Optional[str] = None
    amount: int = 0
    platform_fee: int = 0
    giver_earnings: int = 0

    created_at: datetime = Field(default_factory=utcnow)


class Wallet(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True)
    balance: float = 0
    total_earned: float = 0
    total_withdrawn: float = 0
    last_updated: datetime = Field(default_factory=utcnow)


class Transaction(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    session_id: Optional[int] = Field(default=None, foreign_key="timesession.id")

    type: str  # SESSION_PAYMENT | EARNINGS_CREDIT | WITHDRAWAL | REFUND
    amount: float
    status: str = "PENDING"
    payment_method: Optional[str] = None
    payment_id: Optional[str] = None
    description: Optional[str] = None
    meta: Optional[dict] = Field(default=None, sa_column=json_column())

    created_at: datetime = Field(default_factory=utcnow)


class PresenceRating(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="timesession.id", index=True)
    user_id: int = Field(foreign_key="user.id")

    rating: int
    felt_less_alone: bool
    time_felt_heavy: bool
    would_sit_again: bool
    feedback: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)


class EmergencyContact(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    name: str
    relationship: str
    phone: str
    email: Optional[str] = None
    is_primary: bool = False
    priority: int = 2
    is_active: bool = True

    created_at: datetime = Field(default_factory=utcnow)


class ProfessionalBackup(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    profession: str
    organization: Optional[str] = None
    phone: str
    email: Optional[str] = None
    specialization: Optional[str] = None
    response_time: Optional[int] = None  # minutes
    timezone: Optional[str] = None
    priority: int = 1
    is_available: bool = True
    is_active: bool = True

    created_at: datetime = Field(default_factory=utcnow)


class CrisisReport(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    session_id: Optional[int] = Field(default=None, foreign_key="timesession.id")

    severity: str  # LOW | MEDIUM | HIGH | CRITICAL
    type: str
    description: str
    status: str = "ACTIVE"  # ACTIVE | ESCALATED | RESOLVED
    protocol_used: Optional[str] = None
    meta: Optional[dict] = Field(default=None, sa_column=json_column())

    created_at: datetime = Field(default_factory=utcnow)
    resolved_at: Optional[datetime] = None


class ForumPost(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="user.id", index=True)

    title: str
    content: str
    category: str
    is_anonymous: bool = True
    tags: Optional[str] = None  # comma separated

    is_pinned: bool = False
    is_locked: bool = False
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    view_count: int = 0
    like_count: int = 0
    reply_count: int = 0
    meta: Optional[dict] = Field(default=None, sa_column=json_column())

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class SessionRecording(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="timesession.id", index=True)
    user_id: int = Field(foreign_key="user.id")

    recording_type: str = "AUDIO_VIDEO"
    consent: str = "BOTH_CONSENT"
    encryption_key: str
    status: str = "PENDING"  # PENDING | RECORDING | COMPLETED | FAILED | DELETED
    duration: Optional[int] = None  # seconds
    file_size: Optional[int] = None  # bytes
    thumbnail_path: Optional[str] = None
    expires_at: Optional[datetime] = None
    meta: Optional[dict] = Field(default=None, sa_column=json_column())
    access_control: Optional[dict] = Field(
        default=None, sa_column=json_column("access_control")
    )

    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


class RecordingAccess(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    recording_id: int = Field(foreign_key="sessionrecording.id", index=True)
    user_id: int = Field(foreign_key="user.id")

    access_level: str = "VIEW"  # VIEW | DOWNLOAD | SHARE
    granted_by: int
    granted_at: datetime = Field(default_factory=utcnow)
    is_active: bool = True


class ContentModeration(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("content_type", "content_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    content_type: str  # FORUM_POST
    content_id: int
    status: str = "PENDING"  # PENDING | APPROVED | REJECTED
    moderator_id: Optional[int] = Field(default=None, foreign_key="user.id")
    reason: Optional[str] = None
    admin_notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AdminAction(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    admin_id: int = Field(foreign_key="user.id")
    action_type: str
    target_id: Optional[str] = None
    target_type: Optional[str] = None
    description: str
    meta: Optional[dict] = Field(default=None, sa_column=json_column())

    created_at: datetime = Field(default_factory=utcnow)


class SystemLog(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    event: str
    message: str
    user_id: Optional[int] = Field(default=None, foreign_key="user.id")
    meta: Optional[dict] = Field(default=None, sa_column=json_column())

    created_at: datetime = Field(default_factory=utcnow)


class SystemSetting(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(unique=True)
    value: str
    description: Optional[str] = None
    category: str
    is_public: bool = False
    updated_by: Optional[int] = Field(default=None, foreign_key="user.id")

    updated_at: datetime = Field(default_factory=utcnow)
