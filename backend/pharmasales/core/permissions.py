"""
Ownership checks for pharmacy supervisors.

Role checks live in api/deps.py as dependencies; these predicates cover the
cases that need the loaded row.
"""
from pharmasales.core.audit import AuditLog
from pharmasales.core.exceptions import BusinessError
from pharmasales.models.pharmacy import Pharmacy
from pharmasales.models.user import User


def supervises(pharmacy: Pharmacy, user: User) -> bool:
    """True when user is the recorded supervisor of pharmacy."""
    return pharmacy.supervisor_id is not None and str(pharmacy.supervisor_id) == str(user.id)


def ensure_supervises(pharmacy: Pharmacy, user: User, action: str = "access") -> None:
    """Admins pass; a supervisor must own the pharmacy; anyone else is refused."""
    if user.is_admin:
        return
    if user.is_supervisor and supervises(pharmacy, user):
        return
    AuditLog.log_access_denied(action, "pharmacy", user.id, "not assigned as supervisor", resource_id=pharmacy.id)
    raise BusinessError.forbidden(
        f"Not authorized to {action} this pharmacy",
        reason=f"user {user.id} does not supervise pharmacy {pharmacy.id}",
    )
