"""Client for the IMS inventory and sales record store."""

from .auth import AuthClient, AuthState, Session
from .errors import (
    ConstraintError,
    IMSError,
    NotFoundError,
    PartialFailureError,
    PermissionDeniedError,
    TransportError,
    ValidationError,
)
from .inventory import InventoryView
from .models import InventoryItem, Sale
from .sales import SalesWorkflow
from .store import RecordStoreClient

__all__ = [
    "AuthClient",
    "AuthState",
    "ConstraintError",
    "IMSError",
    "InventoryItem",
    "InventoryView",
    "NotFoundError",
    "PartialFailureError",
    "PermissionDeniedError",
    "RecordStoreClient",
    "Sale",
    "SalesWorkflow",
    "Session",
    "TransportError",
    "ValidationError",
]
