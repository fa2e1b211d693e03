"""Record store client: CRUD over the backend's named collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import requests

from .errors import TransportError, ValidationError, classify_response

logger = logging.getLogger(__name__)


@dataclass
class RecordStoreClient:
    """
    Thin wrapper around the backend's collection endpoints.

    Every call is a single blocking request. Failures are raised as the
    classified errors of ``ims_client.errors``; nothing is retried.

    ``session`` only needs a requests-style ``request(method, url, ...)``,
    so a ``requests.Session`` or a FastAPI ``TestClient`` both work.
    """

    base_url: str
    token: Optional[str] = None
    timeout: float = 30
    session: Any = field(default_factory=requests.Session)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        collection: Optional[str] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                params=params,
                data=data,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %r", method, url, e)
            raise TransportError(f"Could not reach the backend: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            error = classify_response(resp.status_code, body, collection)
            logger.warning(
                "%s %s -> HTTP %s (%s): %s",
                method, path, resp.status_code, type(error).__name__, error.message,
            )
            raise error

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(
                f"Backend returned a non-JSON response for {method} {path}",
                status_code=resp.status_code,
            ) from e

    # ----------------------------
    # Collection operations
    # ----------------------------

    @staticmethod
    def _collection_path(collection: str, *parts: Any) -> str:
        name = (collection or "").strip().strip("/")
        if not name:
            raise ValidationError("A collection name is required.")
        suffix = "/".join(str(p) for p in parts)
        return f"/{name}/{suffix}" if suffix else f"/{name}/"

    def list(
        self,
        collection: str,
        order_by: str = "id",
        ascending: bool = True,
        columns: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Calls: GET /{collection}/?order=...&ascending=...&columns=..."""
        params: Dict[str, Any] = {"order": order_by, "ascending": "true" if ascending else "false"}
        if columns:
            params["columns"] = ",".join(columns)
        rows = self.request("GET", self._collection_path(collection), collection=collection, params=params)
        return rows or []

    def insert(self, collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Calls: POST /{collection}/ and returns the row with its backend-assigned id."""
        return self.request("POST", self._collection_path(collection), collection=collection, json=record)

    def update(self, collection: str, record_id: int, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Calls: PATCH /{collection}/{id}"""
        return self.request("PATCH", self._collection_path(collection, record_id), collection=collection, json=partial)

    def delete(self, collection: str, record_id: int) -> None:
        """Calls: DELETE /{collection}/{id}"""
        self.request("DELETE", self._collection_path(collection, record_id), collection=collection)

    def adjust(self, collection: str, record_id: int, field_name: str, delta: int) -> Dict[str, Any]:
        """
        Calls: POST /{collection}/{id}/adjust

        The backend applies ``field = field + delta`` itself, so concurrent
        writers are not overwritten with a value computed from a stale read.
        """
        return self.request(
            "POST",
            self._collection_path(collection, record_id, "adjust"),
            collection=collection,
            json={"field": field_name, "delta": delta},
        )

    def call(self, collection: str, procedure: str, payload: Dict[str, Any]) -> Any:
        """Calls: POST /{collection}/{procedure} (server-side procedure on a collection)."""
        return self.request("POST", self._collection_path(collection, procedure), collection=collection, json=payload)

    def close(self) -> None:
        close = getattr(self.session, "close", None)
        if callable(close):
            close()
