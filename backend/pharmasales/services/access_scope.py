"""
Row-level branch scoping for sales data.

Admins see every branch. A pharmacy supervisor sees only the branch codes of
pharmacies on which they are the recorded supervisor. Every other role is
refused outright. All sales listing and statistics endpoints resolve a
BranchScope first and apply it to their query before aggregating.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from pharmasales.core.audit import AuditLog
from pharmasales.core.exceptions import BusinessError
from pharmasales.models.pharmacy import Pharmacy
from pharmasales.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BranchScope:
    """
    branch_codes is None for unrestricted access. An empty tuple means the
    caller is a supervisor with no pharmacies; callers short-circuit to an
    empty result instead of querying.
    """

    branch_codes: Optional[Tuple[int, ...]]
    supervisor_id: Optional[int] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.branch_codes is None

    @property
    def is_empty(self) -> bool:
        return self.branch_codes is not None and len(self.branch_codes) == 0

    def condition(self, column):
        """SQL condition restricting `column` to the scope, or None."""
        if self.branch_codes is None:
            return None
        if len(self.branch_codes) == 1:
            return column == self.branch_codes[0]
        return column.in_(self.branch_codes)


def same_identity(left, right) -> bool:
    """Compare two user references by their canonical string form."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


def resolve_branch_scope(
    db: Session,
    user: User,
    requested_branch_code: Optional[int] = None,
) -> BranchScope:
    """
    Effective branch restriction for `user` on a sales query.

    Raises 403 for roles other than admin and pharmacy supervisor, 404 when a
    supervisor names a branch code with no pharmacy, and 403 when that
    pharmacy is supervised by someone else.
    """
    if user.is_admin:
        if requested_branch_code is None:
            return BranchScope(branch_codes=None)
        return BranchScope(branch_codes=(requested_branch_code,))

    if not user.is_supervisor:
        AuditLog.log_access_denied("read", "sales", user.id, f"role '{user.role}' cannot view sales")
        raise BusinessError.forbidden(
            "Access denied. Only administrators and pharmacy supervisors can view sales data.",
            reason=f"user {user.id} role {user.role}",
        )

    if requested_branch_code is not None:
        pharmacy = db.query(Pharmacy).filter(Pharmacy.branch_code == requested_branch_code).first()
        if not pharmacy:
            raise BusinessError.not_found(f"Pharmacy with branch code {requested_branch_code}")
        if not same_identity(pharmacy.supervisor_id, user.id):
            AuditLog.log_access_denied(
                "read", "sales", user.id, "not assigned as supervisor", resource_id=requested_branch_code
            )
            raise BusinessError.forbidden(
                "Access denied. You are not assigned as supervisor of this pharmacy.",
                reason=f"user {user.id} branch {requested_branch_code}",
            )
        return BranchScope(branch_codes=(requested_branch_code,), supervisor_id=user.id)

    codes = [
        code
        for (code,) in db.query(Pharmacy.branch_code)
        .filter(Pharmacy.supervisor_id == user.id)
        .order_by(Pharmacy.branch_code)
        .all()
    ]
    if not codes:
        logger.info(f"Supervisor {user.id} has no assigned pharmacies; returning empty result")
    return BranchScope(branch_codes=tuple(codes), supervisor_id=user.id)
