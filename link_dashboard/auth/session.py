"""
Session (credential context) for service calls.

The bearer token is opaque to the dashboard: it is forwarded to the
services and only peeked at to scope log queries by user. The payload is
decoded WITHOUT signature verification (python-jose's unverified claims);
the services remain the authority on whether a token is valid.

Lifecycle:
    - set on login/signup (`set_token`)
    - cleared on logout or when a service answers 401 (`clear`)
"""

import logging
from typing import Any, Dict, Optional

from jose import jwt
from jose.exceptions import JWTError

from ..config import settings

log = logging.getLogger(__name__)

# Claim names that may carry the user id, in lookup order
USER_ID_CLAIMS = ("user_id", "id", "sub")


class Session:
    """Holds the bearer token for one dashboard user."""

    def __init__(self, token: Optional[str] = None, default_user_id: Optional[str] = None):
        self._token = token or None
        self.default_user_id = default_user_id or settings.DEFAULT_USER_ID

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_token(self, token: str) -> None:
        self._token = token or None

    def clear(self) -> None:
        self._token = None

    def auth_headers(self) -> Dict[str, str]:
        """Authorization header for outgoing requests, empty without a token."""
        if self._token is None:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def claims(self) -> Dict[str, Any]:
        """
        Token payload, decoded but not verified.

        Returns:
            dict: The claims, or {} when there is no token or it cannot be decoded.
        """
        if self._token is None:
            return {}
        try:
            return jwt.get_unverified_claims(self._token)
        except JWTError as exc:
            log.warning("Could not decode session token: %s", exc)
            return {}

    @property
    def user_id(self) -> str:
        """User id from the token, or the default id when none can be read."""
        claims = self.claims()
        for name in USER_ID_CLAIMS:
            value = claims.get(name)
            if value:
                return str(value)
        return self.default_user_id

    @property
    def username(self) -> Optional[str]:
        value = self.claims().get("username")
        return str(value) if value else None
