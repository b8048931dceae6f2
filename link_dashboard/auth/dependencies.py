"""
FastAPI dependency functions for the dashboard session.

These can be used in routes with Depends() to obtain a Session.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .session import Session

# Bearer scheme; a missing header is allowed and yields an anonymous session
security = HTTPBearer(auto_error=False)


def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Session:
    """
    Dependency that wraps the request's bearer token in a Session.

    Args:
        credentials (HTTPAuthorizationCredentials | None): Provided by FastAPI.

    Returns:
        Session: Session carrying the token, or an empty one.
    """
    return Session(credentials.credentials if credentials else None)
