import pytest

from link_dashboard.services.http_client import HTTPLinkService, HTTPLogService
from link_dashboard.services.memory import InMemoryLinkService, InMemoryLogService
from link_dashboard.services.service_factory import close_services, get_services


def test_get_services_memory(monkeypatch):
    monkeypatch.setenv("LINK_DASHBOARD_BACKEND", "memory")
    links, logs = get_services()
    assert isinstance(links, InMemoryLinkService)
    assert isinstance(logs, InMemoryLogService)
    assert logs.link_service is links


def test_get_services_http_default(monkeypatch):
    monkeypatch.delenv("LINK_DASHBOARD_BACKEND", raising=False)
    links, logs = get_services(base_url="http://links.test", timeout=1.5)
    assert isinstance(links, HTTPLinkService)
    assert isinstance(logs, HTTPLogService)
    assert str(links._client.base_url).startswith("http://links.test")
    links.close()
    logs.close()


def test_explicit_backend_beats_env(monkeypatch):
    monkeypatch.setenv("LINK_DASHBOARD_BACKEND", "http")
    links, _ = get_services("Memory")
    assert isinstance(links, InMemoryLinkService)


def test_get_services_unknown_backend(monkeypatch):
    monkeypatch.setenv("LINK_DASHBOARD_BACKEND", "nosuch")
    with pytest.raises(ValueError, match="Unknown service backend"):
        get_services()


def test_close_services_closes_http_and_skips_memory():
    http_links, http_logs = get_services("http", base_url="http://links.test")
    memory_links, memory_logs = get_services("memory")
    close_services(http_links, http_logs, memory_links, memory_logs)
    assert http_links._client.is_closed
    assert http_logs._client.is_closed
