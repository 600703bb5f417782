"""
Exception factories shared by services and routes.

Every failure is raised as an HTTPException built here and rendered by the
handlers registered in main.py as {"success": false, "message": ..., "error": ...}.
Routes never catch these; they surface directly to the caller.
"""
import logging
from typing import Any, Iterable, Optional

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """HTTPException carrying the optional `error` / `errors` fields of the JSON envelope."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error: Optional[str] = None,
        errors: Optional[list] = None,
        headers: Optional[dict] = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.error = error
        self.errors = errors

    def to_payload(self) -> dict:
        payload: dict[str, Any] = {"success": False, "message": self.detail}
        if self.error is not None:
            payload["error"] = self.error
        if self.errors is not None:
            payload["errors"] = self.errors
        return payload


class BusinessError:
    """Domain failures mapped onto HTTP status codes."""

    @staticmethod
    def validation(messages: Iterable[str]) -> APIError:
        """
        400 for input that fails model validation.

        Example:
            raise BusinessError.validation(["Price must be a positive number"])
        """
        messages = list(messages)
        logger.info(f"Validation error: {messages}")
        return APIError(status.HTTP_400_BAD_REQUEST, "Validation error", errors=messages)

    @staticmethod
    def bad_request(message: str, error: Optional[str] = None) -> APIError:
        logger.info(f"Bad request: {message}")
        return APIError(status.HTTP_400_BAD_REQUEST, message, error=error)

    @staticmethod
    def duplicate_key(field: Optional[str] = None) -> APIError:
        """400 derived from a unique-index violation."""
        field = field or "value"
        logger.info(f"Duplicate key on {field}")
        return APIError(
            status.HTTP_400_BAD_REQUEST,
            f"{field} already exists",
            error=f"Duplicate {field}",
        )

    @staticmethod
    def not_found(resource: str = "Resource") -> APIError:
        return APIError(status.HTTP_404_NOT_FOUND, f"{resource} not found")

    @staticmethod
    def unauthorized(message: str = "Not authorized to access this route", reason: str = "") -> APIError:
        """
        401 for every authentication failure: missing, malformed or expired
        token, unknown user, deactivated account, wrong password.
        """
        logger.warning(f"Unauthorized access attempt: {reason or message}")
        return APIError(
            status.HTTP_401_UNAUTHORIZED,
            message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def forbidden(message: str = "Access denied", reason: str = "") -> APIError:
        """403 for role or ownership mismatches."""
        logger.warning(f"Forbidden access: {reason or message}")
        return APIError(status.HTTP_403_FORBIDDEN, message)

    @staticmethod
    def rate_limit_exceeded(message: str = "Too many requests") -> APIError:
        logger.warning(f"Rate limit exceeded: {message}")
        return APIError(status.HTTP_429_TOO_MANY_REQUESTS, message)

    @staticmethod
    def server_error(message: str, original_error: Optional[Exception] = None) -> APIError:
        """
        500 catch-all. The raw error string is passed through to the client
        in `error`; the traceback stays in the log.
        """
        if original_error is not None:
            logger.error(
                f"{message}: {type(original_error).__name__}: {original_error}",
                exc_info=original_error,
            )
        return APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            message,
            error=str(original_error) if original_error is not None else None,
        )


def duplicate_field_from_integrity_error(exc: Exception) -> Optional[str]:
    """
    Best-effort column name from a unique violation message.

    SQLite:   "UNIQUE constraint failed: incentive_items.sap_code"
    Postgres: 'duplicate key value violates unique constraint ... Key (sap_code)=(1)'
    """
    text = str(getattr(exc, "orig", exc))
    if "UNIQUE constraint failed:" in text:
        column = text.split("UNIQUE constraint failed:", 1)[1].strip().split(",")[0]
        return column.split(".")[-1].strip()
    if "Key (" in text:
        return text.split("Key (", 1)[1].split(")", 1)[0]
    return None
