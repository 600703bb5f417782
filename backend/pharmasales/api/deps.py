"""FastAPI dependencies: DB session, current user from JWT, role and page checks."""
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pharmasales.core.audit import AuditLog
from pharmasales.core.exceptions import BusinessError
from pharmasales.core.security import decode_access_token
from pharmasales.db.session import SessionLocal
from pharmasales.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> int:
    """Extract user ID from the Bearer token."""
    if not credentials or not credentials.credentials:
        raise BusinessError.unauthorized("Not authorized to access this route", reason="no token")

    sub = decode_access_token(credentials.credentials)
    if not sub:
        raise BusinessError.unauthorized("Not authorized, token failed", reason="invalid or expired token")

    try:
        return int(sub)
    except ValueError:
        raise BusinessError.unauthorized("Not authorized, token failed", reason=f"bad subject {sub!r}")


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Load current user from DB; deactivated accounts are rejected."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise BusinessError.unauthorized("User not found", reason=f"user {user_id} missing")
    if not user.is_active:
        raise BusinessError.unauthorized("User account is deactivated", reason=f"user {user_id} inactive")
    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory: the current user must hold one of `roles`.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    allowed = {r.value for r in roles}

    def checker(request: Request, current_user: User = Depends(get_current_user)) -> User:
        if (current_user.role or "").lower() not in allowed:
            AuditLog.log_access_denied(request.method, request.url.path, current_user.id, f"role {current_user.role}")
            raise BusinessError.forbidden(
                f"User role {current_user.role} is not authorized to access this route",
                reason=f"user {current_user.id} needs one of {sorted(allowed)}",
            )
        return current_user

    return checker


require_admin = require_roles(UserRole.ADMIN)
require_admin_or_supervisor = require_roles(UserRole.ADMIN, UserRole.SUPERVISOR)


def require_page_access(page: str):
    """Admins, or users whose allowedPages lists `page`."""

    def checker(request: Request, current_user: User = Depends(get_current_user)) -> User:
        if current_user.is_admin or page in (current_user.allowed_pages or []):
            return current_user
        AuditLog.log_access_denied(request.method, request.url.path, current_user.id, f"page {page} not allowed")
        raise BusinessError.forbidden(
            "Access denied. You do not have permission to view this page.",
            reason=f"user {current_user.id} lacks {page}",
        )

    return checker
