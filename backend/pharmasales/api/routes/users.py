"""User administration (admin only). Passwords are stored as bcrypt hashes and never returned."""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmasales.api.deps import get_db, require_admin
from pharmasales.core.audit import AuditLog
from pharmasales.core.exceptions import BusinessError, duplicate_field_from_integrity_error
from pharmasales.core.filters import FilterSpec, build_conditions, contains_ci
from pharmasales.core.security import get_password_hash
from pharmasales.models.user import User
from pharmasales.schemas.common import dump, public_key, validate_payload
from pharmasales.schemas.user import UserCreate, UserResponse, UserUpdate

router = APIRouter()

USER_FILTERS = [
    FilterSpec("role", User.role),
    FilterSpec("isActive", User.is_active, "bool"),
]


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.not_found("User")
    return user


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        column = duplicate_field_from_integrity_error(exc)
        raise BusinessError.duplicate_key(public_key(UserCreate, column) if column else None)


@router.get("")
def list_users(request: Request, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    params = request.query_params
    query = db.query(User).filter(*build_conditions(USER_FILTERS, params))
    search = (params.get("search") or "").strip()
    if search:
        query = query.filter(or_(*[contains_ci(c, search) for c in (User.username, User.email, User.first_name, User.last_name)]))
    users = query.order_by(User.created_at.desc(), User.id.desc()).all()
    return {"success": True, "count": len(users), "data": [dump(UserResponse, u) for u in users]}


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return {"success": True, "data": dump(UserResponse, _get_user(db, user_id))}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    data = validate_payload(UserCreate, payload)
    values = data.model_dump(exclude={"password"})
    user = User(**values, hashed_password=get_password_hash(data.password))
    db.add(user)
    _commit(db)
    db.refresh(user)
    AuditLog.log_action("create", "user", user.id, current_user, changes={"role": user.role})
    return {"success": True, "data": dump(UserResponse, user)}


@router.put("/{user_id}")
def update_user(
    user_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = _get_user(db, user_id)
    data = validate_payload(UserUpdate, payload)
    values = data.model_dump(exclude_unset=True)

    password = values.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)
    for key, value in values.items():
        if value is None and key in ("username", "email", "first_name", "last_name", "role", "phone", "is_active"):
            continue
        setattr(user, key, value)
    _commit(db)
    db.refresh(user)
    changed = sorted(values) + (["password"] if password else [])
    AuditLog.log_action("update", "user", user.id, current_user, changes={"fields": changed})
    return {"success": True, "data": dump(UserResponse, user)}


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    user = _get_user(db, user_id)
    if user.id == current_user.id:
        raise BusinessError.bad_request("You cannot delete your own account")
    db.delete(user)
    db.commit()
    AuditLog.log_action("delete", "user", user_id, current_user)
    return {"success": True, "message": "User deleted successfully", "data": {}}
