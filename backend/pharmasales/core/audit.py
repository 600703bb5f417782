"""
Audit logging for authentication and data-changing operations.

Entries are JSON lines on the "audit" logger so they can be shipped
separately from application logs. Passwords and tokens are never logged.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for security-relevant events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "failed_login"
        username: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Usage:
            AuditLog.log_authentication("login", "jdoe", "10.0.0.4", True)
            AuditLog.log_authentication("failed_login", "jdoe", "10.0.0.4", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "username": username,
            "ip_address": ip_address,
            "success": success,
        }
        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete", "bulk_create"
        resource_type: str,  # "pharmacy", "detailed_sale", "incentive_item", ...
        resource_id: Any,
        user: Any,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Usage:
            AuditLog.log_action("delete", "pharmacy", 12, current_user)
            AuditLog.log_action("bulk_create", "header_sale", None, current_user, changes={"inserted": 40})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "user_id": getattr(user, "id", None),
            "username": getattr(user, "username", None),
            "resource_id": resource_id,
        }
        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_access_denied(
        action: str,
        resource_type: str,
        user_id: Any,
        reason: str,
        resource_id: Any = None,
    ):
        """
        Usage:
            AuditLog.log_access_denied("read", "detailed_sales", 7, "not assigned as supervisor", resource_id=1021)
        """
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "user_id": user_id,
            "reason": reason,
        }
        audit_logger.warning(json.dumps(log_entry, default=str))
