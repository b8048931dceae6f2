"""
DashboardManager module for the Link Dashboard.

Responsibilities:
    - Fetch link and log snapshots from the injected services
    - Enforce the two-phase load: links first, then logs resolved against them
    - Degrade service failures to empty collections plus a display message
    - Hand snapshots to the pure core (resolver, classifier, aggregator, views)

Design notes:
    - The session is explicit: it is given to the manager and forwarded on
      every service call; nothing reads ambient credential state.
    - The link cache is the resolver's only input. When it is still empty at
      resolution time the manager re-fetches links exactly once and then
      resolves with whatever it has (unresolved ids fall back to strings).
    - `now` comes from an injectable clock so reports are reproducible.
    - Create/delete failures are raised (ServiceError / ValueError) for the
      caller to show; read failures never are.
    - After a 401 no further request goes out with the rejected (or the
      cleared) token; later fetches return the 401 message until the
      session holds a new token.

LLM Prompt Example:
    "Explain how to turn an implicit 'the cache is probably loaded by now'
    dependency into an explicit load-then-resolve sequence."
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Generic, List, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel

from ..analytics.aggregator import DashboardStats, dashboard_stats, top_link, unique_visitors
from ..auth.session import Session
from ..config import settings
from ..lifecycle.resolver import SlugResolver, resolve_logs, resolve_slug
from ..schemas import AccessLogEntry, Link, ResolvedAccessLog
from ..services.base import BaseLinkService, BaseLogService, ServiceError, UnauthorizedError
from ..views.collection import build_log_table, build_view

__all__ = [
    "DashboardManager",
    "FetchResult",
    "LinksReport",
    "AnalyticsReport",
    "DashboardReport",
]

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FetchResult(Generic[T]):
    """Items from one service call, or an empty list and the failure message."""

    items: List[T] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LinksReport(BaseModel):
    links: List[Link]
    errors: List[str] = []


class AnalyticsReport(BaseModel):
    unique_visitors: int
    top_link: str
    total_logs: int
    logs: List[ResolvedAccessLog]
    errors: List[str] = []


class DashboardReport(BaseModel):
    username: Optional[str] = None
    stats: DashboardStats
    errors: List[str] = []


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _errors(*results: FetchResult) -> List[str]:
    messages: List[str] = []
    for result in results:
        if result.error and result.error not in messages:
            messages.append(result.error)
    return messages


class DashboardManager:
    """
    Coordinates service fetches and the pure dashboard core for one session.

    LLM Prompt Example:
        "Show how dependency injection of services, session and clock keeps
        a dashboard orchestrator testable without a network."
    """

    def __init__(
        self,
        link_service: BaseLinkService,
        log_service: BaseLogService,
        session: Session,
        clock: Optional[Callable[[], datetime]] = None,
        log_limit: Optional[int] = None,
        recent: Optional[int] = None,
    ):
        """
        Initialize the manager.

        Args:
            link_service (BaseLinkService): Link-storage collaborator.
            log_service (BaseLogService): Log-storage collaborator.
            session (Session): Credential context forwarded on every call.
            clock (Callable, optional): Returns the evaluation time; UTC now by default.
            log_limit (int, optional): Default log limit (settings.LOG_LIMIT).
            recent (int, optional): Links in the dashboard summary (settings.RECENT_LINKS).
        """
        self.link_service = link_service
        self.log_service = log_service
        self.session = session
        self.clock = clock or _utcnow
        self.log_limit = log_limit or settings.LOG_LIMIT
        self.recent = settings.RECENT_LINKS if recent is None else recent
        self._links: List[Link] = []
        self._links_loaded = False
        self._unauthorized: Optional[Tuple[str, Optional[str]]] = None

    # ---------------------------------------------------------------------
    # Fetching (phase one: links, phase two: logs)
    # ---------------------------------------------------------------------
    def _denied(self) -> Optional[str]:
        """Message of an earlier 401, until the session holds a different token."""
        if self._unauthorized is None:
            return None
        message, rejected = self._unauthorized
        if self.session.token not in (None, rejected):
            self._unauthorized = None
            return None
        return message

    def _reject(self, exc: UnauthorizedError, token: Optional[str]) -> None:
        log.warning("Service rejected the session token: %s", exc.message)
        self._unauthorized = (exc.message, token)

    @property
    def links(self) -> List[Link]:
        """Current link cache (a copy)."""
        return list(self._links)

    def fetch_links(self) -> FetchResult[Link]:
        """Fetch links and replace the cache; on failure the cache is emptied."""
        denied = self._denied()
        if denied:
            self._links, self._links_loaded = [], False
            return FetchResult(error=denied)
        token = self.session.token
        try:
            links = self.link_service.list_links(self.session)
        except ServiceError as exc:
            if isinstance(exc, UnauthorizedError):
                self._reject(exc, token)
            log.warning("Failed to fetch links: %s", exc.message)
            self._links, self._links_loaded = [], False
            return FetchResult(error=exc.message)
        self._links, self._links_loaded = list(links), True
        return FetchResult(items=list(links))

    def load_links(self, refresh: bool = False) -> FetchResult[Link]:
        """Return the cached links, fetching them when not loaded (or on refresh)."""
        if self._links_loaded and not refresh:
            return FetchResult(items=list(self._links))
        return self.fetch_links()

    def fetch_logs(
        self, limit: Optional[int] = None, link_id: Optional[int] = None
    ) -> FetchResult[AccessLogEntry]:
        """
        Fetch access logs; failures yield an empty list.

        Without `link_id` the logs of every link the session user owns are
        fetched, otherwise only that link's logs.
        """
        denied = self._denied()
        if denied:
            return FetchResult(error=denied)
        token = self.session.token
        limit = limit or self.log_limit
        try:
            if link_id is None:
                logs = self.log_service.list_logs_by_user(
                    self.session, self.session.user_id, limit
                )
            else:
                logs = self.log_service.list_logs(self.session, link_id, limit)
        except ServiceError as exc:
            if isinstance(exc, UnauthorizedError):
                self._reject(exc, token)
            log.warning("Failed to fetch access logs: %s", exc.message)
            return FetchResult(error=exc.message)
        return FetchResult(items=list(logs))

    def _resolver(self) -> SlugResolver:
        if not self._links:
            # Cache still empty at resolution time: one more attempt, no waiting
            self.fetch_links()
        return SlugResolver(self._links)

    def load_resolved_logs(
        self, limit: Optional[int] = None, link_id: Optional[int] = None
    ) -> FetchResult[ResolvedAccessLog]:
        """Phase two: fetch logs and join each to its slug via the link cache."""
        fetched = self.fetch_logs(limit, link_id)
        if not fetched.ok:
            return FetchResult(error=fetched.error)
        return FetchResult(items=resolve_logs(fetched.items, self._resolver()))

    def resolve_slug(self, link_id: Union[int, str]) -> str:
        """Slug for `link_id`, re-fetching links once if the cache is empty."""
        if not self._links:
            self.fetch_links()
        return resolve_slug(link_id, self._links)

    # ---------------------------------------------------------------------
    # Reports
    # ---------------------------------------------------------------------
    def links_report(
        self, search_term: str = "", filter: str = "all", sort_by: str = "recent"
    ) -> LinksReport:
        """
        Links list view.

        Raises:
            ValueError: On an unknown filter or sort key.
        """
        fetched = self.load_links(refresh=True)
        view = build_view(fetched.items, self.clock(), search_term, filter, sort_by)
        return LinksReport(links=view, errors=[fetched.error] if fetched.error else [])

    def analytics_report(
        self,
        link_filter: str = "",
        limit: Optional[int] = None,
        link_id: Optional[int] = None,
    ) -> AnalyticsReport:
        """
        Access-log analytics: visitor metrics over every fetched log, plus the
        log table filtered by slug and truncated to `limit`.

        With `link_id` only that link's logs are fetched instead of the
        session user's.
        """
        limit = limit or self.log_limit
        links = self.load_links(refresh=True)
        resolved = self.load_resolved_logs(limit, link_id)
        errors = _errors(links, resolved)

        return AnalyticsReport(
            unique_visitors=unique_visitors(resolved.items),
            top_link=top_link(resolved.items),
            total_logs=len(resolved.items),
            logs=build_log_table(resolved.items, link_filter, limit),
            errors=errors,
        )

    def dashboard_report(self) -> DashboardReport:
        """Summary cards for the dashboard landing page."""
        links = self.load_links(refresh=True)
        logs = self.fetch_logs()
        errors = _errors(links, logs)
        stats = dashboard_stats(links.items, logs.items, self.clock(), self.recent)
        return DashboardReport(username=self.session.username, stats=stats, errors=errors)

    # ---------------------------------------------------------------------
    # Mutations (delegated; errors propagate for display)
    # ---------------------------------------------------------------------
    def create_link(
        self,
        target_url: str,
        expires_at: Optional[Union[datetime, str]] = None,
        click_limit: Optional[int] = None,
    ) -> Link:
        """
        Create a link through the link service and add it to the cache.

        Raises:
            ValueError: On invalid input.
            ServiceError: When the service refuses or cannot be reached.
        """
        token = self.session.token
        try:
            link = self.link_service.create_link(
                self.session, target_url, expires_at=expires_at, click_limit=click_limit
            )
        except UnauthorizedError as exc:
            self._reject(exc, token)
            raise
        log.info("Created link %s -> %s", link.slug, link.target_url)
        self._links.append(link)
        return link

    def delete_link(self, slug: str) -> None:
        """
        Delete a link by slug and drop it from the cache.

        Raises:
            ServiceError: When the service refuses or cannot be reached.
        """
        token = self.session.token
        try:
            self.link_service.delete_link(self.session, slug)
        except UnauthorizedError as exc:
            self._reject(exc, token)
            raise
        log.info("Deleted link %s", slug)
        self._links = [link for link in self._links if link.slug != slug]
