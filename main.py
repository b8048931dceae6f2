"""
Main API module for the Link Dashboard.

Responsibilities:
    - Expose the dashboard's derived views as JSON (summary, links list, analytics)
    - Forward link creation and deletion to the link service
    - Turn the request's bearer token into an explicit Session per request
    - Close the service clients the app created itself on shutdown

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - HTTP services by default; in-memory services via LINK_DASHBOARD_BACKEND=memory
      or by injecting them directly.
    - DashboardManager orchestrates the two-phase load and error degradation;
      routes only translate exceptions to HTTP status codes.

LLM Prompt Example:
    "Explain how to structure a FastAPI backend-for-frontend with an application
    factory, injected service clients, and pure view logic kept out of the routes."
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel

from link_dashboard.auth.dependencies import get_session
from link_dashboard.auth.session import Session
from link_dashboard.config import settings
from link_dashboard.manager.dashboard_manager import (
    AnalyticsReport,
    DashboardManager,
    DashboardReport,
    LinksReport,
)
from link_dashboard.schemas import Link
from link_dashboard.services.base import BaseLinkService, BaseLogService, ServiceError
from link_dashboard.services.service_factory import close_services, get_services


class LinkRequest(BaseModel):
    """Request payload for creating a new short link."""
    target_url: str
    expires_at: Optional[str] = None
    click_limit: Optional[int] = None


def create_app(
    link_service: Optional[BaseLinkService] = None,
    log_service: Optional[BaseLogService] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        link_service: Link-storage collaborator; chosen by get_services() if omitted.
        log_service: Log-storage collaborator; chosen by get_services() if omitted.
        clock: Evaluation-time source for expiry checks (UTC now by default).

    Returns:
        FastAPI: A configured application instance with its own service clients.

    Why an app factory?
        - Enables per-test isolation in pytest.
        - Makes swapping HTTP services for in-memory doubles a constructor argument.
    """
    log = logging.getLogger("link_dashboard")

    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    # Injected services belong to the caller; only the defaults are closed here
    owned = []
    if link_service is None or log_service is None:
        default_links, default_logs = get_services()
        if link_service is None:
            link_service = default_links
            owned.append(default_links)
        else:
            close_services(default_links)
        if log_service is None:
            log_service = default_logs
            owned.append(default_logs)
        else:
            close_services(default_logs)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        close_services(*owned)
        log.info("Closed %d service client(s)", len(owned))

    app = FastAPI(
        title="Link Dashboard",
        description="Link lifecycle and access-log analytics for a short-link service",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.link_service = link_service
    app.state.log_service = log_service
    log.info(
        "Dashboard services: links=%s logs=%s",
        type(link_service).__name__,
        type(log_service).__name__,
    )

    def get_manager(session: Session = Depends(get_session)) -> DashboardManager:
        return DashboardManager(link_service, log_service, session, clock=clock)

    def _raise_for(exc: ServiceError) -> None:
        status_code = exc.status_code if exc.status_code in (401, 403, 404) else 400
        raise HTTPException(status_code=status_code, detail=exc.message)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/dashboard", response_model=DashboardReport)
    def dashboard(manager: DashboardManager = Depends(get_manager)) -> DashboardReport:
        """Summary cards: totals, active links, clicks today, recent links."""
        return manager.dashboard_report()

    @app.get("/links", response_model=LinksReport)
    def list_links(
        search: str = Query("", description="Case-insensitive slug/URL substring."),
        filter: str = Query("all", pattern="^(all|active)$"),
        sort: str = Query("recent", pattern="^(recent|clicks)$"),
        manager: DashboardManager = Depends(get_manager),
    ) -> LinksReport:
        """
        Links list view.

        Notes:
            - filter=active uses the expiry-only rule; deleted or exhausted
              links are not excluded here.
        """
        return manager.links_report(search, filter, sort)

    @app.post("/links", response_model=Link)
    def create_link(
        req: LinkRequest, manager: DashboardManager = Depends(get_manager)
    ) -> Link:
        """
        Create a short link.

        Raises:
            HTTPException: 400 on invalid input or a refused create, 401 on a
            rejected token.
        """
        try:
            return manager.create_link(req.target_url, req.expires_at, req.click_limit)
        except ServiceError as exc:
            _raise_for(exc)
        except ValueError as ve:
            raise HTTPException(status_code=400, detail=str(ve))

    @app.delete("/links/{slug}")
    def delete_link(slug: str, manager: DashboardManager = Depends(get_manager)) -> Dict[str, Any]:
        try:
            manager.delete_link(slug)
        except ServiceError as exc:
            _raise_for(exc)
        return {"message": "Link deleted successfully", "slug": slug}

    @app.get("/analytics", response_model=AnalyticsReport)
    def analytics(
        link: str = Query("", description="Case-insensitive slug substring."),
        limit: int = Query(settings.LOG_LIMIT, ge=1, le=100),
        link_id: Optional[int] = Query(None, ge=1, description="Only this link's logs."),
        manager: DashboardManager = Depends(get_manager),
    ) -> AnalyticsReport:
        """Unique visitors, top link and the access-log table."""
        return manager.analytics_report(link, limit, link_id)

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
