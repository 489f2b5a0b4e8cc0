from __future__ import annotations

from typing import Any

import requests


class CouchDBError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class CouchDBClient:
    """Reads transaction documents out of the legacy CouchDB database."""

    def __init__(
        self,
        *,
        base_url: str,
        database: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            msg = "base_url must be provided"
            raise ValueError(msg)
        if not database:
            msg = "database must be provided"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.database = database
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_all_docs(self) -> dict[str, Any]:
        url = f"{self.base_url}/{self.database}/_all_docs"
        try:
            response = self._session.get(url, params={"include_docs": "true"}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CouchDBError(f"CouchDB request to {url} failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise CouchDBError(
                "CouchDB returned invalid JSON", status_code=response.status_code, payload=response.text
            ) from exc

        if not response.ok:
            # error bodies look like {"error": "not_found", "reason": "Database does not exist."}
            reason = payload.get("reason") if isinstance(payload, dict) else None
            raise CouchDBError(
                f"CouchDB request failed: {reason or response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )
        if not isinstance(payload, dict):
            raise CouchDBError(
                "CouchDB returned unexpected payload type", status_code=response.status_code, payload=payload
            )
        return payload


__all__ = ["CouchDBClient", "CouchDBError"]
