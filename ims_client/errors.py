"""
Error taxonomy of the IMS client.

Every failure reaching a caller is one of:
- ValidationError: rejected locally, nothing was sent
- PermissionDeniedError: backend refused under the current credentials
- ConstraintError: backend rejected the record (unique, foreign key, check...)
- NotFoundError: the addressed row does not exist
- PartialFailureError: a workflow persisted its first step only
- TransportError: backend unreachable or the answer could not be classified
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Type

PERMISSION_DENIED_MESSAGE = "Permission denied. Please check your database permissions."
NOT_AUTHENTICATED_MESSAGE = "Not signed in. Please log in first."


class IMSError(Exception):
    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class ValidationError(IMSError):
    pass


class PermissionDeniedError(IMSError):
    pass


class ConstraintError(IMSError):
    pass


class NotFoundError(IMSError):
    pass


class TransportError(IMSError):
    pass


class PartialFailureError(IMSError):
    """The sale row exists but the stock decrement that should follow it failed."""

    def __init__(self, message: str, *, sale: Any, product_id: int, quantity: int, cause: IMSError):
        super().__init__(message, code=cause.code, status_code=cause.status_code)
        self.sale = sale
        self.product_id = product_id
        self.quantity = quantity
        self.cause = cause


# Messages that depend on the collection the error came from.
COLLECTION_MESSAGES: Dict[Tuple[str, str], str] = {
    ("inventory", "23505"): "An item with this name already exists. Please use a unique name.",
}

# fastapi-users reports auth failures with these detail codes.
AUTH_ERRORS: Dict[str, Tuple[Type[IMSError], str]] = {
    "LOGIN_BAD_CREDENTIALS": (PermissionDeniedError, "Invalid email or password."),
    "LOGIN_USER_NOT_VERIFIED": (PermissionDeniedError, "This account has not been verified yet."),
    "REGISTER_USER_ALREADY_EXISTS": (ConstraintError, "An account with this email already exists."),
    "REGISTER_INVALID_PASSWORD": (ConstraintError, "The password was rejected."),
}


def _detail_parts(body: Any) -> Tuple[Optional[str], Optional[str]]:
    """Extract (code, message) from a FastAPI error body."""
    if not isinstance(body, dict):
        return None, None
    detail = body.get("detail")

    if isinstance(detail, dict):
        code = detail.get("code")
        message = detail.get("message") or detail.get("reason")
        return (str(code) if code else None), message
    if isinstance(detail, str):
        if detail in AUTH_ERRORS:
            return detail, None
        return None, detail
    if isinstance(detail, list):
        # request validation errors: [{"loc": [...], "msg": "..."}]
        messages = []
        for entry in detail:
            if isinstance(entry, dict) and entry.get("msg"):
                loc = [str(p) for p in entry.get("loc", []) if p != "body"]
                messages.append(f"{'.'.join(loc)}: {entry['msg']}" if loc else entry["msg"])
        return None, "; ".join(messages) or None
    return None, None


def classify_response(status_code: int, body: Any, collection: Optional[str] = None) -> IMSError:
    """Map an error response of the record store backend to the client taxonomy."""
    code, message = _detail_parts(body)

    if code in AUTH_ERRORS:
        cls, default = AUTH_ERRORS[code]
        text = f"{default} {message}" if message else default
        return cls(text, code=code, status_code=status_code)

    if code is not None:
        if code == "42501":
            return PermissionDeniedError(PERMISSION_DENIED_MESSAGE, code=code, status_code=status_code)
        if code.startswith("23"):
            text = COLLECTION_MESSAGES.get((collection or "", code)) or message or "The record was rejected by the database."
            return ConstraintError(text, code=code, status_code=status_code)
        if code == "P0002":
            return NotFoundError(message or "Record not found.", code=code, status_code=status_code)
        return TransportError(
            f"Backend error {code} (HTTP {status_code}): {message or 'no details'}",
            code=code,
            status_code=status_code,
        )

    if status_code == 401:
        return PermissionDeniedError(NOT_AUTHENTICATED_MESSAGE, status_code=status_code)
    if status_code == 403:
        return PermissionDeniedError(PERMISSION_DENIED_MESSAGE, status_code=status_code)
    if status_code == 404:
        return NotFoundError(message or "Record not found.", status_code=status_code)
    if status_code in (400, 409, 422):
        return ConstraintError(message or "The record was rejected by the backend.", status_code=status_code)
    return TransportError(
        f"Backend returned HTTP {status_code}: {message or 'no details'}",
        status_code=status_code,
    )
