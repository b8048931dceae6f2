"""
Global pytest fixtures for the Link Dashboard test suite.

Responsibilities:
    - Provide a fixed evaluation time so expiry checks are deterministic
    - Provide a `make_link` / `make_log` factory for compact test data
    - Provide seeded in-memory link and log services
    - Provide a DashboardManager and a FastAPI TestClient wired to them

Why an app factory?
    Using `create_app(...)` with injected in-memory services gives each test
    fresh state and keeps the suite offline.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from main import create_app
from link_dashboard.auth.session import Session
from link_dashboard.manager.dashboard_manager import DashboardManager
from link_dashboard.schemas import AccessLogEntry, Link
from link_dashboard.services.memory import InMemoryLinkService, InMemoryLogService

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_link(id, slug=None, **fields) -> Link:
    data = {
        "id": id,
        "slug": slug or f"s{id}",
        "target_url": f"https://example.com/{id}",
        "created_at": NOW - timedelta(days=30 - id),
        "click_count": 0,
    }
    data.update(fields)
    return Link.model_validate(data)


def _make_log(id, link_id, ip="10.0.0.1", **fields) -> AccessLogEntry:
    data = {
        "id": id,
        "link_id": link_id,
        "accessed_at": NOW - timedelta(hours=id),
        "ip_address": ip,
        "user_agent": "pytest",
    }
    data.update(fields)
    return AccessLogEntry.model_validate(data)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation time for every expiry-sensitive test."""
    return NOW


@pytest.fixture
def make_link():
    return _make_link


@pytest.fixture
def make_log():
    return _make_log


@pytest.fixture
def token() -> str:
    """Bearer token for user 1 (signature is never checked client-side)."""
    return jwt.encode({"user_id": 1, "username": "ana"}, "test-secret", algorithm="HS256")


@pytest.fixture
def session(token) -> Session:
    return Session(token)


@pytest.fixture
def seed_links():
    """
    Three links owned by user 1:
        abc   - plain, 5 clicks
        xyz   - expired a week before NOW, 9 clicks
        promo - click limit reached (10/10), newest
    """
    return [
        _make_link(1, "abc", target_url="https://example.com/docs", click_count=5, user_id=1,
                   created_at=NOW - timedelta(days=10)),
        _make_link(2, "xyz", target_url="https://python.org", click_count=9, user_id=1,
                   created_at=NOW - timedelta(days=5), expires_at=NOW - timedelta(days=7)),
        _make_link(3, "promo", target_url="https://shop.example.com/sale", click_count=10,
                   click_limit=10, user_id=1, created_at=NOW - timedelta(days=1)),
    ]


@pytest.fixture
def seed_logs():
    """Four visits: abc twice (two IPs), xyz and promo once each."""
    return [
        _make_log(3, 1, ip="10.0.0.1"),
        _make_log(1, 2, ip="10.0.0.2"),
        _make_log(2, 1, ip="10.0.0.2"),
        _make_log(4, 3, ip="10.0.0.3", accessed_at=NOW - timedelta(days=2)),
    ]


@pytest.fixture
def link_service(seed_links) -> InMemoryLinkService:
    return InMemoryLinkService(seed_links, clock=lambda: NOW)


@pytest.fixture
def log_service(seed_logs, link_service) -> InMemoryLogService:
    return InMemoryLogService(seed_logs, links=link_service)


@pytest.fixture
def manager(link_service, log_service, session) -> DashboardManager:
    return DashboardManager(link_service, log_service, session, clock=lambda: NOW)


@pytest.fixture
def client(link_service, log_service, token) -> TestClient:
    """
    Fresh TestClient over a new app instance backed by the seeded services.

    The bearer token is attached to every request.
    """
    app = create_app(link_service, log_service, clock=lambda: NOW)
    return TestClient(app, headers={"Authorization": f"Bearer {token}"})
