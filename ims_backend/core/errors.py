"""Structured API errors and database error classification."""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

# SQLSTATE codes surfaced to clients in {"detail": {"code": ..., "message": ...}}
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
INSUFFICIENT_PRIVILEGE = "42501"
UNDEFINED_COLUMN = "42703"
NO_DATA_FOUND = "P0002"
INTERNAL_ERROR = "XX000"

STATUS_BY_CODE: Dict[str, int] = {
    NOT_NULL_VIOLATION: status.HTTP_409_CONFLICT,
    FOREIGN_KEY_VIOLATION: status.HTTP_409_CONFLICT,
    UNIQUE_VIOLATION: status.HTTP_409_CONFLICT,
    CHECK_VIOLATION: status.HTTP_409_CONFLICT,
    INSUFFICIENT_PRIVILEGE: status.HTTP_403_FORBIDDEN,
    UNDEFINED_COLUMN: status.HTTP_400_BAD_REQUEST,
    NO_DATA_FOUND: status.HTTP_404_NOT_FOUND,
}

DEFAULT_MESSAGES: Dict[str, str] = {
    NOT_NULL_VIOLATION: "A required value is missing",
    FOREIGN_KEY_VIOLATION: "The referenced record does not exist",
    UNIQUE_VIOLATION: "A record with this value already exists",
    CHECK_VIOLATION: "The value violates a table constraint",
    INSUFFICIENT_PRIVILEGE: "Permission denied",
}

# SQLite has no SQLSTATE; its constraint failures are only told apart by message.
_SQLITE_MESSAGES = (
    ("UNIQUE constraint failed", UNIQUE_VIOLATION),
    ("FOREIGN KEY constraint failed", FOREIGN_KEY_VIOLATION),
    ("CHECK constraint failed", CHECK_VIOLATION),
    ("NOT NULL constraint failed", NOT_NULL_VIOLATION),
)


def api_error(
    code: str,
    message: str,
    status_code: Optional[int] = None,
    details: Any = None,
) -> HTTPException:
    return HTTPException(
        status_code=status_code or STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST),
        detail={"code": code, "message": message, "details": details},
    )


def sqlstate_of(exc: DBAPIError) -> Optional[str]:
    """SQLSTATE reported by the driver (asyncpg/psycopg), or inferred from SQLite's message."""
    orig = getattr(exc, "orig", None)
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)

    text = str(orig if orig is not None else exc)
    for needle, code in _SQLITE_MESSAGES:
        if needle in text:
            return code
    return None


def db_error(exc: DBAPIError, messages: Optional[Dict[str, str]] = None) -> HTTPException:
    """Translate a driver error into an HTTPException carrying its SQLSTATE."""
    code = sqlstate_of(exc)
    if code not in STATUS_BY_CODE:
        logger.error("Unclassified database error (sqlstate=%s): %r", code, exc)
        return api_error(
            code or INTERNAL_ERROR,
            "Unexpected database error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    message = (messages or {}).get(code) or DEFAULT_MESSAGES.get(code, "Database error")
    return api_error(code, message, details=str(getattr(exc, "orig", None) or exc))
