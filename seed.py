"""
Sample data for local development.

    python seed.py

Every account uses the password ``password123``. Users that already exist
(matched by email) are left alone, so the script can be run repeatedly.
"""
import logging
from datetime import timedelta

from sqlmodel import Session, select

from db import create_db_and_tables, engine
from models import ProfessionalBackup, TimeSession, User, Wallet, utcnow
from routers.auth import hash_password

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "password123"

SAMPLE_GIVERS = [
    {
        "email": "sarah@example.com",
        "name": "Sarah Chen",
        "bio": "Calm presence for those who need to think. I specialize in silent companionship.",
        "emotional_tempo": "slow",
        "silence_comfort": 9,
        "energy_level": "calm",
        "voice_tone_preference": "medium",
        "presence_rating": 4.8,
        "total_sessions": 42,
        "latitude": 19.0760,
        "longitude": 72.8777,
        "city": "Mumbai",
        "state": "Maharashtra",
        "country": "India",
        "max_distance": 25,
        "wallet": {"balance": 12567.80, "total_earned": 15678.50, "total_withdrawn": 3110.70},
    },
    {
        "email": "michael@example.com",
        "name": "Michael Rodriguez",
        "bio": "Here to sit with you while you process your thoughts. No judgment, just presence.",
        "emotional_tempo": "slow",
        "silence_comfort": 8,
        "energy_level": "calm",
        "voice_tone_preference": "deep",
        "presence_rating": 4.6,
        "total_sessions": 28,
        "latitude": 28.6139,
        "longitude": 77.2090,
        "city": "Delhi",
        "state": "Delhi",
        "country": "India",
        "max_distance": 30,
        "wallet": {"balance": 8234.20, "total_earned": 9722.40, "total_withdrawn": 1488.20},
    },
    {
        "email": "priya@example.com",
        "name": "Priya Sharma",
        "bio": "Quiet companion for your thinking time. Sometimes we just need someone to be there.",
        "emotional_tempo": "slow",
        "silence_comfort": 10,
        "energy_level": "calm",
        "voice_tone_preference": "medium",
        "presence_rating": 4.9,
        "total_sessions": 15,
        "latitude": 12.9716,
        "longitude": 77.5946,
        "city": "Bangalore",
        "state": "Karnataka",
        "country": "India",
        "max_distance": 20,
        "wallet": {"balance": 4485.00, "total_earned": 4485.00, "total_withdrawn": 0},
    },
]

SAMPLE_SEEKERS = [
    {
        "email": "alex@example.com",
        "name": "Alex Johnson",
        "bio": "Founder looking for presence while making important decisions",
    },
    {
        "email": "jordan@example.com",
        "name": "Jordan Lee",
        "bio": "Sometimes I just need someone to sit with me while I think",
    },
]

SAMPLE_PROFESSIONALS = [
    {
        "name": "Dr. Meera Iyer",
        "profession": "Clinical Psychologist",
        "specialization": "Crisis intervention, anxiety",
        "phone": "+91-9000000001",
        "email": "meera.iyer@example.com",
        "response_time": 15,
        "priority": 1,
    },
    {
        "name": "Rahul Verma",
        "profession": "Licensed Counselor",
        "specialization": "Grief, depression",
        "phone": "+91-9000000002",
        "email": "rahul.verma@example.com",
        "response_time": 30,
        "priority": 2,
    },
]


def _get_or_create_user(session: Session, data: dict, role: str) -> User:
    user = session.exec(select(User).where(User.email == data["email"])).first()
    if user:
        return user

    user = User(
        **data,
        role=role,
        password_hash=hash_password(SAMPLE_PASSWORD),
        is_location_public=data.get("latitude") is not None,
    )
    session.add(user)
    session.flush()
    logger.info(f"Created {role} {user.email}")
    return user


def seed(session: Session) -> None:
    givers = []
    for giver_data in SAMPLE_GIVERS:
        data = dict(giver_data)
        wallet_data = data.pop("wallet")
        giver = _get_or_create_user(session, data, "TIME_GIVER")
        givers.append(giver)

        if session.exec(select(Wallet).where(Wallet.user_id == giver.id)).first() is None:
            session.add(Wallet(user_id=giver.id, **wallet_data))

    seekers = [_get_or_create_user(session, data, "TIME_SEEKER") for data in SAMPLE_SEEKERS]

    existing_sessions = session.exec(
        select(TimeSession).where(TimeSession.seeker_id == seekers[0].id)
    ).first()
    if existing_sessions is None:
        now = utcnow()
        session.add(
            TimeSession(
                seeker_id=seekers[0].id,
                giver_id=givers[0].id,
                session_type="SILENT_PRESENCE",
                duration=30,
                scheduled_for=now + timedelta(days=1),
                amount=249,
            )
        )
        session.add(
            TimeSession(
                seeker_id=seekers[1].id,
                giver_id=givers[2].id,
                session_type="THINKING_ROOM",
                duration=10,
                scheduled_for=now - timedelta(days=2),
                status="COMPLETED",
                payment_status="PAID",
                amount=99,
                platform_fee=20,
                giver_earnings=79,
            )
        )

    if session.exec(select(ProfessionalBackup)).first() is None:
        for professional in SAMPLE_PROFESSIONALS:
            session.add(ProfessionalBackup(**professional))

    session.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    create_db_and_tables()
    with Session(engine) as session:
        seed(session)
    logger.info(f"Sample data ready. Every account uses the password {SAMPLE_PASSWORD}")
