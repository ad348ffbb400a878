from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["TIME_SEEKER", "TIME_GIVER", "BOTH", "ADMIN", "MODERATOR"]
SessionType = Literal[
    "SILENT_PRESENCE", "THINKING_ROOM", "OPEN_TALK", "MIRROR_MODE", "FOCUS_COMPANION"
]
SessionStatus = Literal["SCHEDULED", "IN_PROGRESS", "COMPLETED", "CANCELLED"]
Severity = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
CrisisType = Literal[
    "SELF_HARM",
    "SUICIDAL_IDEATION",
    "PANIC_ATTACK",
    "SEVERE_ANXIETY",
    "DEPRESSION",
    "TRAUMA_TRIGGER",
    "SUBSTANCE_CRISIS",
    "DOMESTIC_VIOLENCE",
    "OTHER",
]
ForumCategory = Literal[
    "GENERAL",
    "ANXIETY",
    "DEPRESSION",
    "RELATIONSHIPS",
    "TRAUMA",
    "RECOVERY",
    "SELF_CARE",
    "MINDFULNESS",
    "SUCCESS_STORIES",
]
RecordingType = Literal[
    "AUDIO_ONLY", "VIDEO_ONLY", "AUDIO_VIDEO", "SCREEN_SHARE", "TRANSCRIPT_ONLY"
]
RecordingConsent = Literal["SEEKER_ONLY", "GIVER_ONLY", "BOTH_CONSENT", "AUTO_CONSENT"]
RecordingStatus = Literal["PENDING", "RECORDING", "COMPLETED", "FAILED", "DELETED"]
AccessLevel = Literal["VIEW", "DOWNLOAD", "SHARE"]


# --- users / auth ---


class UserCreate(BaseModel):
    email: EmailStr
    name: str
    password: str = Field(min_length=6)
    role: Literal["TIME_SEEKER", "TIME_GIVER", "BOTH"] = "TIME_SEEKER"
    phone: Optional[str] = None
    bio: Optional[str] = None
    hourly_rate: Optional[int] = Field(default=None, ge=0)


class LoginData(BaseModel):
    email: EmailStr
    password: str


class UserRead(BaseModel):
    id: int
    email: EmailStr
    name: str
    role: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    is_available: bool
    presence_rating: float
    total_sessions: int
    hourly_rate: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserPublic(BaseModel):
    id: int
    name: str
    avatar: Optional[str] = None
    presence_rating: float

    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserPublic):
    role: str
    bio: Optional[str] = None
    is_available: bool
    total_sessions: int
    hourly_rate: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class UserUpdate(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    phone: Optional[str] = None
    is_available: Optional[bool] = None
    hourly_rate: Optional[int] = Field(default=None, ge=0)
    emotional_tempo: Optional[str] = None
    silence_comfort: Optional[int] = Field(default=None, ge=1, le=10)
    energy_level: Optional[str] = None
    voice_tone_preference: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    is_location_public: Optional[bool] = None
    max_distance: Optional[float] = Field(default=None, gt=0)


# --- sessions ---


class SessionCreate(BaseModel):
    giver_id: int
    session_type: SessionType
    duration: int = Field(gt=0)
    scheduled_for: datetime


class SessionUpdate(BaseModel):
    status: Optional[SessionStatus] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class SessionRead(BaseModel):
    id: int
    seeker_id: int
    giver_id: int
    session_type: str
    duration: int
    scheduled_for: datetime
    status: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    meeting_link: Optional[str] = None
    payment_status: str
    amount: int
    platform_fee: int
    giver_earnings: int
    seeker: Optional[UserPublic] = None
    giver: Optional[UserPublic] = None

    model_config = ConfigDict(from_attributes=True)


# --- discovery / matching ---


class NearbyFilters(BaseModel):
    max_distance: Optional[float] = Field(default=None, gt=0)


class NearbyQuery(BaseModel):
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    max_distance: float = Field(default=50, gt=0)
    filters: NearbyFilters = Field(default_factory=NearbyFilters)


class SearchQuery(BaseModel):
    query: Optional[str] = None
    location: Optional[str] = None


class MatchPreferences(BaseModel):
    session_type: Optional[SessionType] = None
    emotional_tempo: Optional[str] = None
    silence_comfort: Optional[int] = Field(default=None, ge=1, le=10)
    energy_level: Optional[str] = None


# --- payments / wallet ---


class CreateOrderRequest(BaseModel):
    session_id: int
    amount: int = Field(gt=0)


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    session_id: int


class RefundRequest(BaseModel):
    session_id: int
    amount: Optional[int] = Field(default=None, gt=0)


class WithdrawRequest(BaseModel):
    amount: float
    bank_details: Optional[dict] = None


# --- ratings ---


class RatingCreate(BaseModel):
    session_id: int
    rating: int = Field(ge=1, le=5)
    felt_less_alone: bool
    time_felt_heavy: bool
    would_sit_again: bool
    feedback: Optional[str] = None


# --- crisis ---


class CrisisCreate(BaseModel):
    session_id: Optional[int] = None
    severity: Severity
    type: CrisisType
    description: str = Field(min_length=1)


class CrisisStatusUpdate(BaseModel):
    status: str = Field(pattern="^(ACTIVE|ESCALATED|RESOLVED)$")


class EmergencyContactCreate(BaseModel):
    name: str
    relationship: str
    phone: str
    email: Optional[EmailStr] = None
    is_primary: bool = False


class EmergencyContactUpdate(BaseModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    is_primary: Optional[bool] = None
    priority: Optional[int] = Field(default=None, ge=1)


class ProfessionalBackupCreate(BaseModel):
    name: str
    profession: str
    phone: str
    organization: Optional[str] = None
    email: Optional[EmailStr] = None
    specialization: Optional[str] = None
    response_time: Optional[int] = Field(default=None, ge=0)
    timezone: Optional[str] = None
    priority: int = Field(default=1, ge=1)


class ProfessionalBackupUpdate(BaseModel):
    name: Optional[str] = None
    profession: Optional[str] = None
    phone: Optional[str] = None
    organization: Optional[str] = None
    email: Optional[EmailStr] = None
    specialization: Optional[str] = None
    is_available: Optional[bool] = None
    response_time: Optional[int] = Field(default=None, ge=0)
    timezone: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=1)


# --- forums ---


class ForumPostCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: ForumCategory
    is_anonymous: bool = True
    tags: Optional[List[str]] = None


class ForumPostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    is_anonymous: Optional[bool] = None
    tags: Optional[List[str]] = None


# --- recordings ---


class RecordingCreate(BaseModel):
    session_id: int
    recording_type: RecordingType = "AUDIO_VIDEO"
    consent: RecordingConsent = "BOTH_CONSENT"
    auto_delete: bool = True
    retention_days: Optional[int] = Field(default=None, gt=0)


class RecordingUpdate(BaseModel):
    status: Optional[RecordingStatus] = None
    duration: Optional[int] = Field(default=None, ge=0)
    file_size: Optional[int] = Field(default=None, ge=0)
    access_level: Optional[AccessLevel] = None


# --- admin ---


class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = ""
    role: Role = "TIME_SEEKER"
    hourly_rate: Optional[int] = Field(default=None, ge=0)


class AdminUserEdit(BaseModel):
    """Profile fields an admin may change through the 'update' user action."""

    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None
    hourly_rate: Optional[int] = Field(default=None, ge=0)
    is_available: Optional[bool] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class AdminUserAction(BaseModel):
    user_id: int
    action: str = Field(pattern="^(ban|suspend|verify|update)$")
    data: Optional[dict[str, Any]] = None


class ModerationAction(BaseModel):
    content_id: int
    content_type: str = Field(pattern="^(FORUM_POST)$")
    action: str = Field(pattern="^(approve|reject)$")
    reason: Optional[str] = None
    admin_notes: Optional[str] = None


class SettingCreate(BaseModel):
    key: str
    value: str
    category: str
    description: Optional[str] = None
    is_public: bool = False


class SettingUpdate(BaseModel):
    value: str
    description: Optional[str] = None
    is_public: Optional[bool] = None
