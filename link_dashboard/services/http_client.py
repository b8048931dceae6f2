"""
HTTP backends for the link, log and auth services.

This module talks to the short-link service's REST API with httpx and adheres
to the contracts in `base.py`, so the manager and the dashboard API can swap
it for the in-memory doubles without changes.

Endpoints
---------
- GET    /links                      -> {"links": [...]}
- POST   /links                      -> {"link": {...}, "message": "..."}
- DELETE /links/{slug}               -> {"message": "...", "slug": "..."}
- GET    /logs?link_id=&limit=       -> {"logs": [...]}
- GET    /logs/user?user_id=&limit=  -> {"logs": [...]}
- POST   /login, /signup             -> {"token": "..."}

Error mapping
-------------
- Transport failures (refused connection, timeout) -> ServiceError with a
  connection message.
- 401 -> the session token is cleared, UnauthorizedError is raised.
- Any other 4xx/5xx -> ServiceError with the body's "error" (or "message")
  field, else a per-call default such as "Failed to fetch links".
- Records that fail validation are skipped with a warning instead of
  failing the whole listing.

Example
-------
>>> session = Session(token)
>>> links = HTTPLinkService(base_url="http://localhost:8080").list_links(session)
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..auth.session import Session
from ..config import settings
from ..schemas import AccessLogEntry, CreateLinkRequest, Link
from .base import BaseLinkService, BaseLogService, ServiceError, UnauthorizedError

__all__ = ["HTTPLinkService", "HTTPLogService", "HTTPAuthService"]

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

CONNECTION_ERROR = "Unable to connect to server. Please check your connection."


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or default
    return default


def _parse_all(model: Type[M], records: Any) -> List[M]:
    """Validate each record, skipping (and logging) the malformed ones."""
    parsed: List[M] = []
    for record in records or []:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as exc:
            log.warning("Skipping malformed %s record: %s", model.__name__, exc.errors())
    return parsed


class _HTTPService:
    """Shared httpx plumbing: base URL, timeout, bearer header, error mapping."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url or settings.API_URL,
            timeout=timeout if timeout is not None else settings.TIMEOUT,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self, session: Session, method: str, path: str, default_error: str, **kwargs
    ) -> Dict[str, Any]:
        try:
            response = self._client.request(
                method, path, headers=session.auth_headers(), **kwargs
            )
        except httpx.HTTPError as exc:
            log.warning("%s %s failed: %s", method, path, exc)
            raise ServiceError(CONNECTION_ERROR) from exc

        if response.status_code == 401:
            # Stale or revoked token: forget it so the caller can re-authenticate
            session.clear()
            raise UnauthorizedError(_error_message(response, "Unauthorized"))
        if response.is_error:
            message = _error_message(response, default_error)
            log.warning("%s %s -> %s: %s", method, path, response.status_code, message)
            raise ServiceError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}


class HTTPLinkService(_HTTPService, BaseLinkService):
    """Link-storage service over HTTP."""

    def list_links(self, session: Session) -> List[Link]:
        body = self._request(session, "GET", "/links", "Failed to fetch links")
        return _parse_all(Link, body.get("links"))

    def create_link(
        self,
        session: Session,
        target_url: str,
        expires_at: Optional[datetime] = None,
        click_limit: Optional[int] = None,
    ) -> Link:
        request = CreateLinkRequest(
            target_url=target_url, expires_at=expires_at, click_limit=click_limit
        )
        body = self._request(
            session, "POST", "/links", "Failed to create link", json=request.payload()
        )
        try:
            return Link.model_validate(body.get("link"))
        except ValidationError as exc:
            log.warning("Create returned an unusable link: %s", exc.errors())
            raise ServiceError("Failed to create link") from exc

    def delete_link(self, session: Session, slug: str) -> None:
        self._request(session, "DELETE", f"/links/{slug}", "Failed to delete link")


class HTTPLogService(_HTTPService, BaseLogService):
    """Log-storage service over HTTP."""

    def list_logs_by_user(
        self, session: Session, user_id: str, limit: Optional[int] = None
    ) -> List[AccessLogEntry]:
        params = {"user_id": str(user_id)}
        if limit:
            params["limit"] = str(limit)
        body = self._request(
            session, "GET", "/logs/user", "Failed to fetch user access logs", params=params
        )
        return _parse_all(AccessLogEntry, body.get("logs"))

    def list_logs(
        self, session: Session, link_id: Optional[int] = None, limit: Optional[int] = None
    ) -> List[AccessLogEntry]:
        params = {}
        if link_id is not None:
            params["link_id"] = str(link_id)
        if limit:
            params["limit"] = str(limit)
        body = self._request(
            session, "GET", "/logs", "Failed to fetch access logs", params=params
        )
        return _parse_all(AccessLogEntry, body.get("logs"))


class HTTPAuthService(_HTTPService):
    """Obtains bearer tokens; on success the token is stored in the session."""

    def _store_token(self, session: Session, body: Dict[str, Any]) -> str:
        token = body.get("token")
        if not token:
            raise ServiceError("No token received from server")
        session.set_token(token)
        return token

    def login(self, session: Session, email: str, password: str) -> str:
        body = self._request(
            session, "POST", "/login", "Failed to login",
            json={"email": email, "password": password},
        )
        return self._store_token(session, body)

    def signup(self, session: Session, username: str, email: str, password: str) -> str:
        body = self._request(
            session, "POST", "/signup", "Failed to register user",
            json={"username": username, "email": email, "password": password},
        )
        return self._store_token(session, body)

    def logout(self, session: Session) -> None:
        session.clear()
