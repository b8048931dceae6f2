"""
Collaborator contracts for the Link Dashboard.

Purpose:
    Define the narrow request/response contracts of the two external
    services the dashboard reads from, so the manager and API never care
    whether they talk to HTTP endpoints or an in-process double.

Every call takes the caller's Session explicitly; implementations never
read credentials from anywhere else.

Errors:
    Failures surface as ServiceError carrying a human-readable message.
    UnauthorizedError marks a rejected credential (HTTP 401).

Testing & Coverage:
    Abstract methods are annotated with `# pragma: no cover`; their bodies
    are exercised by a subclass in tests/unit/test_services_base.py.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..auth.session import Session
from ..schemas import AccessLogEntry, Link

__all__ = ["ServiceError", "UnauthorizedError", "BaseLinkService", "BaseLogService"]


class ServiceError(Exception):
    """A service call failed; `message` is safe to show to the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(ServiceError):
    """The service rejected the session's credential."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class BaseLinkService(ABC):
    """Abstract link-storage service."""

    @abstractmethod  # pragma: no cover
    def list_links(self, session: Session) -> List[Link]:
        """
        Return the session user's links.

        Raises:
            ServiceError: If the links cannot be fetched.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def create_link(
        self,
        session: Session,
        target_url: str,
        expires_at: Optional[datetime] = None,
        click_limit: Optional[int] = None,
    ) -> Link:
        """
        Create a link and return it as stored.

        Raises:
            ValueError: If the input fails validation.
            ServiceError: If the service refuses or cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_link(self, session: Session, slug: str) -> None:
        """Soft-delete the link with `slug`."""
        raise NotImplementedError


class BaseLogService(ABC):
    """Abstract log-storage service."""

    @abstractmethod  # pragma: no cover
    def list_logs_by_user(
        self, session: Session, user_id: str, limit: Optional[int] = None
    ) -> List[AccessLogEntry]:
        """Access logs for every link owned by `user_id`, newest first."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_logs(
        self, session: Session, link_id: Optional[int] = None, limit: Optional[int] = None
    ) -> List[AccessLogEntry]:
        """Access logs, optionally restricted to one link, newest first."""
        raise NotImplementedError
