"""
Runtime configuration for the Link Dashboard
============================================

Simple settings module that reads from environment variables (only here),
and exposes a stable `settings` object for the rest of the codebase.
Avoid reading env vars anywhere else; import from this module instead.
The service factory is the one exception: it reads the backend lazily so
tests can switch it with monkeypatch.

Services
--------
- LINK_DASHBOARD_API_URL   : base URL of the link/log services (default "http://localhost:8080")
- LINK_DASHBOARD_BACKEND   : "http" (default) or "memory"
- LINK_DASHBOARD_TIMEOUT   : request timeout in seconds (default 10)

Views
-----
- LINK_DASHBOARD_DEFAULT_USER_ID : user id used when the token carries none (default "1")
- LINK_DASHBOARD_LOG_LIMIT       : default access-log limit; clamped to [1, 100] (default 50)
- LINK_DASHBOARD_RECENT_LINKS    : links listed in the dashboard summary (default 3)

Logging
-------
- LINK_DASHBOARD_LOG_LEVEL : level name passed to logging.basicConfig (default "INFO")
"""

import os


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except ValueError:
        return default


class _Settings:
    # -------- Services --------
    API_URL: str = os.getenv("LINK_DASHBOARD_API_URL", "http://localhost:8080").rstrip("/")
    BACKEND: str = os.getenv("LINK_DASHBOARD_BACKEND", "http").strip().lower()
    TIMEOUT: float = _get_float("LINK_DASHBOARD_TIMEOUT", 10.0)

    # -------- Views --------
    DEFAULT_USER_ID: str = os.getenv("LINK_DASHBOARD_DEFAULT_USER_ID", "1")

    # The log service rejects limits outside 1..100 and falls back to 50
    LOG_LIMIT: int = max(1, min(100, _get_int("LINK_DASHBOARD_LOG_LIMIT", 50)))

    RECENT_LINKS: int = max(0, _get_int("LINK_DASHBOARD_RECENT_LINKS", 3))

    # -------- Logging --------
    LOG_LEVEL: str = os.getenv("LINK_DASHBOARD_LOG_LEVEL", "INFO").strip().upper()


settings = _Settings()
