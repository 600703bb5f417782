"""Auth: login and current user.

SECURITY FEATURES:
- bcrypt password hashes, never plaintext
- Signed, expiring JWT (HS256) returned in the response body
- Per-IP login throttling
- Generic error message to prevent user enumeration
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from pharmasales.api.deps import get_current_user, get_db
from pharmasales.core.audit import AuditLog
from pharmasales.core.exceptions import BusinessError
from pharmasales.core.rate_limiter import limit_login_attempts
from pharmasales.core.security import create_access_token, verify_password
from pharmasales.models.user import User
from pharmasales.schemas.common import dump, validate_payload
from pharmasales.schemas.user import LoginRequest, LoginUser, UserResponse

router = APIRouter()


@router.post("/login", dependencies=[Depends(limit_login_attempts)])
def login(request: Request, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Exchange username and password for a bearer token."""
    data = validate_payload(LoginRequest, payload)
    username = (data.username or "").strip().lower()
    password = data.password or ""
    client_ip = request.client.host if request.client else "unknown"

    if not username or not password:
        raise BusinessError.bad_request("Please provide username and password")

    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.hashed_password):
        AuditLog.log_authentication("failed_login", username, client_ip, False, reason="Invalid credentials")
        raise BusinessError.unauthorized("Invalid credentials", reason=f"login {username}")

    if not user.is_active:
        AuditLog.log_authentication("failed_login", username, client_ip, False, reason="Account deactivated")
        raise BusinessError.unauthorized(
            "Your account has been deactivated. Please contact an administrator.",
            reason=f"inactive {username}",
        )

    token = create_access_token(subject=str(user.id), role=user.role)
    AuditLog.log_authentication("login", username, client_ip, True)
    return {"success": True, "data": {"user": dump(LoginUser, user), "token": token}}


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return {"success": True, "data": dump(UserResponse, current_user)}
