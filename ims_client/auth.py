"""Sign up / sign in / sign out against the backend's fastapi-users routes."""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .errors import IMSError, TransportError, ValidationError
from .store import RecordStoreClient
from .validators import is_blank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthState:
    user: Optional[Dict[str, Any]] = None
    loading: bool = False


@dataclass
class Session:
    access_token: str
    user: Dict[str, Any]
    token_type: str = "bearer"


Listener = Callable[[AuthState], None]


def _require_credentials(email: Any, password: Any) -> Tuple[str, str]:
    if is_blank(email) or is_blank(password):
        raise ValidationError("Email and password are required.")
    email = str(email).strip()
    if "@" not in email:
        raise ValidationError("Please enter a valid email address.")
    return email, str(password)


class AuthClient:
    """
    Authentication provider for the client.

    ``state`` holds the current user and a loading flag; listeners added with
    ``subscribe`` are called with the new state on every change.
    """

    def __init__(self, store: RecordStoreClient):
        self.store = store
        self.state = AuthState()
        self._listeners: List[Listener] = []

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self.state.user

    @property
    def loading(self) -> bool:
        return self.state.loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes: Any) -> None:
        self.state = replace(self.state, **changes)
        for listener in list(self._listeners):
            listener(self.state)

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self._set_state(loading=True)
        try:
            yield
        finally:
            self._set_state(loading=False)

    def sign_up(self, email: Any, password: Any) -> Session:
        """
        Calls: POST /auth/register, then signs in.
        """
        email, password = _require_credentials(email, password)
        with self._busy():
            self.store.request("POST", "/auth/register", json={"email": email, "password": password})
            logger.info("Registered %s", email)
            return self._sign_in(email, password)

    def sign_in(self, email: Any, password: Any) -> Session:
        email, password = _require_credentials(email, password)
        with self._busy():
            return self._sign_in(email, password)

    def _sign_in(self, email: str, password: str) -> Session:
        # FastAPI-Users JWT login takes form fields: username, password
        data = self.store.request("POST", "/auth/jwt/login", data={"username": email, "password": password})
        token = (data or {}).get("access_token")
        if not token:
            raise TransportError(f"Login response missing access_token: {data}")
        self.store.token = token
        try:
            user = self.store.request("GET", "/users/me")
        except IMSError:
            self.store.token = None
            raise
        self._set_state(user=user)
        return Session(access_token=token, user=user, token_type=(data or {}).get("token_type", "bearer"))

    def restore(self, token: str) -> Dict[str, Any]:
        """Reuse a saved token; raises PermissionDeniedError if it is no longer valid."""
        self.store.token = token
        with self._busy():
            try:
                user = self.store.request("GET", "/users/me")
            except IMSError:
                self.store.token = None
                raise
            self._set_state(user=user)
        return user

    def sign_out(self) -> None:
        """
        Calls: POST /auth/jwt/logout

        The local session is dropped even if the backend call fails.
        """
        if not self.store.token:
            self._set_state(user=None)
            return
        try:
            with self._busy():
                self.store.request("POST", "/auth/jwt/logout")
        finally:
            self.store.token = None
            self._set_state(user=None)


def save_session(path: Path, session: Session) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"access_token": session.access_token, "email": session.user.get("email")}
    path.write_text(json.dumps(payload), encoding="utf-8")
    os.chmod(path, 0o600)


def load_session(path: Path) -> Optional[str]:
    path = Path(path)
    if not path.exists():
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable session file %s: %s", path, e)
        return None
    if not isinstance(payload, dict):
        logger.warning("Ignoring session file %s: not a JSON object", path)
        return None
    token = payload.get("access_token")
    return token if isinstance(token, str) and token else None


def clear_session(path: Path) -> None:
    path = Path(path)
    if path.exists():
        path.unlink()
