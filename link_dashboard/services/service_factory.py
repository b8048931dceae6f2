"""
Service factory: switch the link/log backend from config (lazy env version)
==========================================================================

Centralizes selection of the service backend (HTTP vs in-memory) so the
manager and the dashboard API stay ignorant of where data comes from.

- Reads the environment **at call time** to avoid stale values in tests.
- Imports the httpx backend **only if** the selected backend is "http".

Environment variables
---------------------
- LINK_DASHBOARD_BACKEND: "http" (default) or "memory"
- LINK_DASHBOARD_API_URL: base URL if backend=="http" (see config.py)
"""

import logging
import os
from typing import Optional, Tuple

from .base import BaseLinkService, BaseLogService
from .memory import InMemoryLinkService, InMemoryLogService

log = logging.getLogger(__name__)


def get_services(backend: Optional[str] = None, **kwargs) -> Tuple[BaseLinkService, BaseLogService]:
    """
    Return a (link_service, log_service) pair based on configuration.

    Parameters
    ----------
    backend : str, optional
        "http" (default) or "memory". If omitted, reads LINK_DASHBOARD_BACKEND.
    kwargs : dict
        Extra args for the HTTP backend: base_url=..., timeout=...

    Raises
    ------
    ValueError
        On an unknown backend name.
    """
    be = (backend or os.getenv("LINK_DASHBOARD_BACKEND", "http")).strip().lower()
    log.info("Selected service backend: %r", be)

    if be == "memory":
        links = InMemoryLinkService()
        return links, InMemoryLogService(links=links)

    if be == "http":
        from .http_client import HTTPLinkService, HTTPLogService

        return HTTPLinkService(**kwargs), HTTPLogService(**kwargs)

    raise ValueError(f"Unknown service backend: {be!r}")


def close_services(*services: object) -> None:
    """Release the HTTP clients behind `services`; in-memory services have none."""
    for service in services:
        close = getattr(service, "close", None)
        if close is not None:
            close()
