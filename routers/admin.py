import logging
import math
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError
from sqlmodel import func, or_, select

from db import SessionDep
from models import (
    AdminAction,
    ContentModeration,
    CrisisReport,
    ForumPost,
    SystemLog,
    SystemSetting,
    TimeSession,
    Transaction,
    User,
    utcnow,
)
from schemas import (
    AdminUserAction,
    AdminUserCreate,
    AdminUserEdit,
    ModerationAction,
    SettingCreate,
    SettingUpdate,
    UserRead,
)
from .auth import AdminDep, SuperAdminDep, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])

EDITABLE_USER_FIELDS = set(AdminUserEdit.model_fields)

USER_ACTION_TYPES = {
    "ban": "USER_BAN",
    "suspend": "USER_SUSPEND",
    "verify": "USER_VERIFICATION",
    "update": "USER_VERIFICATION",
}


def log_admin_action(
    session: SessionDep,
    admin: User,
    action_type: str,
    target_id,
    target_type: str,
    description: str,
    meta: Optional[dict] = None,
) -> None:
    session.add(
        AdminAction(
            admin_id=admin.id,
            action_type=action_type,
            target_id=str(target_id),
            target_type=target_type,
            description=description,
            meta={**(meta or {}), "performed_by": admin.email},
        )
    )
    logger.info(f"Admin {admin.id}: {description}")


def _pagination(page: int, limit: int, total: int) -> dict:
    return {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)}


@router.get("/dashboard")
def dashboard(session: SessionDep, admin: AdminDep):
    total_revenue = session.exec(
        select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.status == "COMPLETED"
        )
    ).one()

    session_stats = session.exec(
        select(TimeSession.status, func.count(TimeSession.id)).group_by(TimeSession.status)
    ).all()

    recent_logs = session.exec(
        select(SystemLog).order_by(SystemLog.created_at.desc(), SystemLog.id.desc()).limit(10)
    ).all()

    return {
        "overview": {
            "total_users": session.exec(select(func.count(User.id))).one(),
            "total_sessions": session.exec(select(func.count(TimeSession.id))).one(),
            "active_users": session.exec(
                select(func.count(User.id)).where(User.is_available == True)  # noqa: E712
            ).one(),
            "total_revenue": total_revenue,
            "pending_moderation": session.exec(
                select(func.count(ContentModeration.id)).where(
                    ContentModeration.status == "PENDING"
                )
            ).one(),
            "active_crisis_reports": session.exec(
                select(func.count(CrisisReport.id)).where(CrisisReport.status == "ACTIVE")
            ).one(),
        },
        "session_stats": {status: count for status, count in session_stats},
        "recent_logs": recent_logs,
        "admin_info": {
            "id": admin.id,
            "name": admin.name,
            "email": admin.email,
            "role": admin.role,
        },
    }


@router.get("/users")
def list_users(
    session: SessionDep,
    admin: AdminDep,
    search: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[str] = Query(default=None, pattern="^(active|inactive)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    conditions = []
    if search:
        pattern = f"%{search.lower()}%"
        conditions.append(
            or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern))
        )
    if role:
        conditions.append(User.role == role)
    if status == "active":
        conditions.append(User.is_available == True)  # noqa: E712
    elif status == "inactive":
        conditions.append(User.is_available == False)  # noqa: E712

    total = session.exec(select(func.count(User.id)).where(*conditions)).one()
    users = session.exec(
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "users": [UserRead.model_validate(u) for u in users],
        "pagination": _pagination(page, limit, total),
    }


@router.post("/users", response_model=UserRead)
def create_user(user_in: AdminUserCreate, session: SessionDep, admin: SuperAdminDep):
    existing = session.exec(select(User).where(User.email == user_in.email)).first()
    if existing:
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(
        email=user_in.email,
        name=user_in.name,
        password_hash=hash_password(user_in.password),
        role=user_in.role,
        hourly_rate=user_in.hourly_rate,
    )
    session.add(user)
    session.flush()

    log_admin_action(
        session,
        admin,
        "USER_VERIFICATION",
        user.id,
        "user",
        f"Created user {user.email} with role {user.role}",
    )
    session.commit()
    session.refresh(user)
    return user


@router.put("/users", response_model=UserRead)
def update_user(action_in: AdminUserAction, session: SessionDep, admin: SuperAdminDep):
    """
    ban / suspend disable the account, verify re-enables it, update
    applies whitelisted profile fields from `data`.
    """
    user = session.get(User, action_in.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    if action_in.action in ("ban", "suspend"):
        if user.id == admin.id:
            raise HTTPException(status_code=400, detail="Cannot disable your own account")
        changes = {"is_disabled": True, "is_available": False}
    elif action_in.action == "verify":
        changes = {"is_disabled": False, "is_available": True}
    else:
        data = action_in.data or {}
        unknown = set(data) - EDITABLE_USER_FIELDS
        if unknown:
            raise HTTPException(
                status_code=400,
                detail=f"Fields cannot be updated: {', '.join(sorted(unknown))}",
            )
        try:
            edit = AdminUserEdit.model_validate(data)
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors()})
            raise HTTPException(
                status_code=400,
                detail=f"Invalid values for: {', '.join(fields)}",
            )
        changes = edit.model_dump(exclude_none=True)

    for field, value in changes.items():
        setattr(user, field, value)
    session.add(user)

    log_admin_action(
        session,
        admin,
        USER_ACTION_TYPES[action_in.action],
        user.id,
        "user",
        f"{action_in.action} user {user.email}",
        {"action": action_in.action, "data": changes},
    )
    session.commit()
    session.refresh(user)
    return user


@router.get("/content")
def list_moderation(
    session: SessionDep,
    admin: AdminDep,
    status: Optional[str] = None,
    content_type: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    conditions = []
    if status:
        conditions.append(ContentModeration.status == status)
    if content_type:
        conditions.append(ContentModeration.content_type == content_type)

    total = session.exec(select(func.count(ContentModeration.id)).where(*conditions)).one()
    items = session.exec(
        select(ContentModeration)
        .where(*conditions)
        .order_by(ContentModeration.created_at.desc(), ContentModeration.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    content = []
    for item in items:
        details = None
        if item.content_type == "FORUM_POST":
            post = session.get(ForumPost, item.content_id)
            if post is not None:
                details = {
                    "id": post.id,
                    "title": post.title,
                    "content": post.content,
                    "author_id": post.author_id,
                    "is_deleted": post.is_deleted,
                }
        content.append({**item.model_dump(), "content_details": details})

    return {"content": content, "pagination": _pagination(page, limit, total)}


@router.post("/content", response_model=ContentModeration)
def moderate_content(action_in: ModerationAction, session: SessionDep, admin: AdminDep):
    """Approve or reject a piece of content; rejected forum posts are soft deleted."""
    post = session.get(ForumPost, action_in.content_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Content not found")

    status = "APPROVED" if action_in.action == "approve" else "REJECTED"

    moderation = session.exec(
        select(ContentModeration).where(
            ContentModeration.content_type == action_in.content_type,
            ContentModeration.content_id == action_in.content_id,
        )
    ).first()
    if moderation is None:
        moderation = ContentModeration(
            content_type=action_in.content_type,
            content_id=action_in.content_id,
        )

    moderation.status = status
    moderation.moderator_id = admin.id
    moderation.reason = action_in.reason
    moderation.admin_notes = action_in.admin_notes
    moderation.updated_at = utcnow()
    session.add(moderation)

    if action_in.action == "reject" and not post.is_deleted:
        post.is_deleted = True
        post.deleted_at = utcnow()
        session.add(post)

    log_admin_action(
        session,
        admin,
        "CONTENT_APPROVE" if action_in.action == "approve" else "CONTENT_DELETE",
        action_in.content_id,
        action_in.content_type.lower(),
        f"{action_in.action}d {action_in.content_type.lower()} {action_in.content_id}",
        {
            "action": action_in.action,
            "reason": action_in.reason,
            "admin_notes": action_in.admin_notes,
        },
    )
    session.commit()
    session.refresh(moderation)
    return moderation


@router.get("/settings")
def list_settings(session: SessionDep, admin: AdminDep, category: Optional[str] = None):
    query = select(SystemSetting).order_by(SystemSetting.category, SystemSetting.key)
    if category:
        query = query.where(SystemSetting.category == category)
    settings = session.exec(query).all()

    grouped = {}
    for setting in settings:
        grouped.setdefault(setting.category, []).append(setting)

    return {"settings": grouped, "flat": settings}


@router.post("/settings", response_model=SystemSetting)
def create_setting(setting_in: SettingCreate, session: SessionDep, admin: SuperAdminDep):
    existing = session.exec(select(SystemSetting).where(SystemSetting.key == setting_in.key)).first()
    if existing:
        raise HTTPException(status_code=409, detail="Setting already exists")

    setting = SystemSetting(**setting_in.model_dump(), updated_by=admin.id)
    session.add(setting)
    session.flush()

    log_admin_action(
        session,
        admin,
        "SYSTEM_SETTING_UPDATE",
        setting.id,
        "setting",
        f"Created setting {setting.key}",
        {"key": setting.key, "value": setting.value, "category": setting.category},
    )
    session.commit()
    session.refresh(setting)
    return setting


@router.put("/settings/{setting_id}", response_model=SystemSetting)
def update_setting(
    setting_id: int,
    update: SettingUpdate,
    session: SessionDep,
    admin: SuperAdminDep,
):
    setting = session.get(SystemSetting, setting_id)
    if setting is None:
        raise HTTPException(status_code=404, detail="Setting not found")

    for field, value in update.model_dump(exclude_none=True).items():
        setattr(setting, field, value)
    setting.updated_by = admin.id
    setting.updated_at = utcnow()
    session.add(setting)

    log_admin_action(
        session,
        admin,
        "SYSTEM_SETTING_UPDATE",
        setting.id,
        "setting",
        f"Updated setting {setting.key}",
        {"key": setting.key, "value": setting.value},
    )
    session.commit()
    session.refresh(setting)
    return setting
