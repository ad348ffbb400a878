import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Request, Response
from itsdangerous import BadData, URLSafeTimedSerializer
from passlib.context import CryptContext
from sqlmodel import select

from config import SECRET_KEY, TOKEN_MAX_AGE_SECONDS
from db import SessionDep
from models import SystemLog, User, utcnow
from schemas import LoginData, TokenResponse, UserCreate, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

serializer = URLSafeTimedSerializer(SECRET_KEY)

GIVER_ROLES = ("TIME_GIVER", "BOTH")
ADMIN_ROLES = ("ADMIN", "MODERATOR")

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, role: str) -> str:
    """
    Store user_id + role in the signed token.
    Example data:
        {"user_id": 3, "role": "TIME_GIVER"}
    """
    return serializer.dumps({"user_id": user_id, "role": role})


def verify_access_token(token: str, max_age_seconds: int = TOKEN_MAX_AGE_SECONDS):
    """
    Returns dict {'user_id': ..., 'role': ...} if valid,
    or None if token is invalid/expired.
    """
    try:
        return serializer.loads(token, max_age=max_age_seconds)
    except BadData:
        return None


def _extract_token(authorization: Optional[str], cookie_token: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):]
    return cookie_token


def _load_user(session: SessionDep, token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    data = verify_access_token(token)
    if not data:
        return None
    user = session.get(User, data["user_id"])
    if user is None or user.is_disabled:
        return None
    return user


def get_current_user(
    session: SessionDep,
    authorization: Optional[str] = Header(default=None),
    session_token: Optional[str] = Cookie(default=None, alias="session"),
) -> User:
    """
    Reads the bearer token (or the 'session' cookie used by the HTML pages),
    verifies it and looks up the user. Raises 401 if missing or invalid.
    """
    token = _extract_token(authorization, session_token)
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = _load_user(session, token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_optional_user(
    session: SessionDep,
    authorization: Optional[str] = Header(default=None),
    session_token: Optional[str] = Cookie(default=None, alias="session"),
) -> Optional[User]:
    """Like get_current_user, but returns None instead of raising 401."""
    return _load_user(session, _extract_token(authorization, session_token))


OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]


def require_admin(user: CurrentUserDep) -> User:
    if user.role not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


AdminDep = Annotated[User, Depends(require_admin)]


def require_super_admin(user: CurrentUserDep) -> User:
    if user.role != "ADMIN":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


SuperAdminDep = Annotated[User, Depends(require_super_admin)]


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key="session",
        value=token,
        httponly=True,
        secure=False,
        samesite="lax",
        max_age=TOKEN_MAX_AGE_SECONDS,
    )


@router.post("/auth/register", response_model=TokenResponse)
def register(user_in: UserCreate, session: SessionDep, response: Response):
    """Register a new seeker or giver with a hashed password."""
    existing = session.exec(select(User).where(User.email == user_in.email)).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=user_in.email,
        name=user_in.name,
        password_hash=hash_password(user_in.password),
        role=user_in.role,
        phone=user_in.phone,
        bio=user_in.bio,
        hourly_rate=user_in.hourly_rate,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    if user.id is None:
        raise HTTPException(status_code=500, detail="User was not created successfully")

    logger.info(f"Registered user {user.id} as {user.role}")

    token = create_access_token(user.id, user.role)
    _set_session_cookie(response, token)
    return TokenResponse(access_token=token, user=UserRead.model_validate(user))


@router.post("/auth/login", response_model=TokenResponse)
def login(payload: LoginData, session: SessionDep, request: Request, response: Response):
    """Log in with email + password and return a bearer token."""
    user = session.exec(select(User).where(User.email == payload.email)).first()

    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if user.is_disabled:
        raise HTTPException(status_code=403, detail="Account has been disabled")

    user.last_login = utcnow()
    session.add(user)

    if user.role in ADMIN_ROLES:
        session.add(
            SystemLog(
                event="admin_login",
                message=f"Admin {user.email} logged in",
                user_id=user.id,
                meta={
                    "role": user.role,
                    "user_agent": request.headers.get("user-agent"),
                    "ip_address": request.client.host if request.client else "unknown",
                },
            )
        )

    session.commit()
    session.refresh(user)

    token = create_access_token(user.id, user.role)
    _set_session_cookie(response, token)
    return TokenResponse(access_token=token, user=UserRead.model_validate(user))


@router.post("/auth/logout")
def logout(response: Response):
    response.delete_cookie("session")
    return {"message": "Logged out"}


@router.get("/auth/me", response_model=UserRead)
def read_me(current: CurrentUserDep):
    """Get info about the currently logged-in user."""
    return current
