import os

# must be set before the app modules build their engine
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

import models  # noqa: E402,F401
from db import get_session  # noqa: E402
from main import app  # noqa: E402
from models import TimeSession, User  # noqa: E402
from payments import PaymentGatewayError, get_payment_gateway  # noqa: E402
from routers.auth import create_access_token, hash_password  # noqa: E402

TEST_PASSWORD = "password123"


class FakeGateway:
    """Stands in for the Razorpay client; records calls instead of making them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, args))
        if self.fail:
            raise PaymentGatewayError("gateway unavailable")

    def create_order(self, amount, receipt, currency="INR", notes=None):
        self._record("create_order", amount, receipt)
        return {
            "id": "order_test_1",
            "amount": amount * 100,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }

    def fetch_payment(self, payment_id):
        self._record("fetch_payment", payment_id)
        return {"id": payment_id, "status": "captured"}

    def refund_payment(self, payment_id, amount=None):
        self._record("refund_payment", payment_id, amount)
        return {"id": "rfnd_test_1", "payment_id": payment_id, "amount": amount}


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture(name="gateway")
def gateway_fixture():
    return FakeGateway()


@pytest.fixture(name="client")
def client_fixture(session: Session, gateway: FakeGateway):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: Session):
    counter = {"n": 0}

    def _make_user(role: str = "TIME_SEEKER", **kwargs) -> User:
        counter["n"] += 1
        data = {
            "email": f"user{counter['n']}@example.com",
            "name": f"User {counter['n']}",
            "password_hash": hash_password(TEST_PASSWORD),
            "role": role,
        }
        data.update(kwargs)
        user = User(**data)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_session(session: Session):
    def _make_session(seeker: User, giver: User, **kwargs) -> TimeSession:
        data = {
            "seeker_id": seeker.id,
            "giver_id": giver.id,
            "session_type": "SILENT_PRESENCE",
            "duration": 30,
            "scheduled_for": datetime.now(timezone.utc) + timedelta(days=1),
            "amount": 249,
        }
        data.update(kwargs)
        ts = TimeSession(**data)
        session.add(ts)
        session.commit()
        session.refresh(ts)
        return ts

    return _make_session


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def seeker(make_user):
    return make_user("TIME_SEEKER", name="Alex Johnson")


@pytest.fixture
def giver(make_user):
    return make_user(
        "TIME_GIVER",
        name="Sarah Chen",
        presence_rating=4.8,
        total_sessions=42,
        emotional_tempo="slow",
        energy_level="calm",
        silence_comfort=9,
        latitude=19.0760,
        longitude=72.8777,
        city="Mumbai",
        state="Maharashtra",
        country="India",
        is_location_public=True,
        max_distance=25,
    )


@pytest.fixture
def admin(make_user):
    return make_user("ADMIN", name="Admin")


@pytest.fixture
def moderator(make_user):
    return make_user("MODERATOR", name="Moderator")


@pytest.fixture(name="headers")
def headers_fixture():
    return auth_headers
