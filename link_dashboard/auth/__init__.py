"""
Credential context for the Link Dashboard.

Provides the explicit Session object passed to every service call and the
FastAPI dependency that builds one from a bearer token.
"""

from .session import Session

__all__ = ["Session"]
