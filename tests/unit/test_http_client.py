"""
Unit tests for the httpx-backed services, using httpx.MockTransport.

Covers:
    - request shape: paths, query params, JSON body, bearer header
    - parsing with malformed records skipped
    - error mapping: service "error" field, defaults, 401 clearing the token,
      transport failures
    - login / signup token handling
"""

import json

import httpx
import pytest

from link_dashboard.auth.session import Session
from link_dashboard.services.base import ServiceError, UnauthorizedError
from link_dashboard.services.http_client import (
    CONNECTION_ERROR,
    HTTPAuthService,
    HTTPLinkService,
    HTTPLogService,
)

BASE_URL = "http://links.test"

LINK = {
    "id": 1,
    "slug": "abc",
    "target_url": "https://example.com",
    "created_at": "2026-05-01T10:00:00Z",
    "expires_at": {"Time": "0001-01-01T00:00:00Z", "Valid": False},
    "click_limit": {"Int32": 10, "Valid": True},
    "click_count": 2,
}


def _service(cls, handler, seen=None):
    def record(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return handler(request)

    client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(record))
    return cls(client=client)


def test_list_links_sends_bearer_and_parses(session, token):
    seen = []
    service = _service(
        HTTPLinkService,
        lambda r: httpx.Response(200, json={"links": [LINK], "count": 1}),
        seen,
    )
    links = service.list_links(session)
    assert [l.slug for l in links] == ["abc"]
    assert links[0].expires_at is None and links[0].click_limit == 10
    assert seen[0].url.path == "/links"
    assert seen[0].headers["Authorization"] == f"Bearer {token}"


def test_list_links_without_token_sends_no_header():
    seen = []
    service = _service(HTTPLinkService, lambda r: httpx.Response(200, json={"links": []}), seen)
    assert service.list_links(Session()) == []
    assert "Authorization" not in seen[0].headers


def test_list_links_skips_malformed_records(session):
    body = {"links": [LINK, {"id": "x", "slug": "broken"}]}
    service = _service(HTTPLinkService, lambda r: httpx.Response(200, json=body))
    assert [l.slug for l in service.list_links(session)] == ["abc"]


@pytest.mark.parametrize("body", [{"links": None}, {}, [], "oops"])
def test_list_links_odd_bodies_are_empty(session, body):
    service = _service(HTTPLinkService, lambda r: httpx.Response(200, json=body))
    assert service.list_links(session) == []


def test_service_error_uses_error_field(session):
    service = _service(HTTPLinkService, lambda r: httpx.Response(500, json={"error": "db down"}))
    with pytest.raises(ServiceError, match="db down") as exc:
        service.list_links(session)
    assert exc.value.status_code == 500


def test_service_error_default_message(session):
    service = _service(HTTPLinkService, lambda r: httpx.Response(502, text="<html>bad gateway</html>"))
    with pytest.raises(ServiceError, match="Failed to fetch links"):
        service.list_links(session)


def test_unauthorized_clears_token(session):
    service = _service(HTTPLinkService, lambda r: httpx.Response(401, json={"error": "Invalid token"}))
    with pytest.raises(UnauthorizedError, match="Invalid token"):
        service.list_links(session)
    assert session.token is None


def test_transport_failure_maps_to_connection_message(session):
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    service = _service(HTTPLinkService, refuse)
    with pytest.raises(ServiceError, match="Unable to connect") as exc:
        service.list_links(session)
    assert exc.value.message == CONNECTION_ERROR


def test_create_link_posts_validated_payload(session):
    seen = []
    service = _service(
        HTTPLinkService,
        lambda r: httpx.Response(201, json={"link": LINK, "message": "created"}),
        seen,
    )
    link = service.create_link(session, "https://example.com", "2026-07-01T09:30", 10)
    assert link.slug == "abc"
    assert seen[0].method == "POST"
    body = json.loads(seen[0].content)
    assert body["target_url"] == "https://example.com"
    assert body["click_limit"] == 10
    assert body["expires_at"].startswith("2026-07-01T09:30:00")


def test_create_link_invalid_input_never_sent(session):
    seen = []
    service = _service(HTTPLinkService, lambda r: httpx.Response(201, json={}), seen)
    with pytest.raises(ValueError):
        service.create_link(session, "javascript:alert(1)")
    assert seen == []


def test_create_link_without_link_in_response(session):
    service = _service(HTTPLinkService, lambda r: httpx.Response(201, json={"message": "ok"}))
    with pytest.raises(ServiceError, match="Failed to create link"):
        service.create_link(session, "https://example.com")


def test_delete_link_path_and_error(session):
    seen = []
    service = _service(HTTPLinkService, lambda r: httpx.Response(200, json={"slug": "abc"}), seen)
    service.delete_link(session, "abc")
    assert (seen[0].method, seen[0].url.path) == ("DELETE", "/links/abc")

    missing = _service(
        HTTPLinkService,
        lambda r: httpx.Response(404, json={"error": "Link not found or already deleted"}),
    )
    with pytest.raises(ServiceError, match="already deleted") as exc:
        missing.delete_link(session, "abc")
    assert exc.value.status_code == 404


def test_logs_by_user_query(session):
    seen = []
    logs = [{"id": 1, "link_id": 1, "accessed_at": "2026-05-01T00:00:00Z",
             "ip_address": "1.1.1.1", "user_agent": "ua"}]
    service = _service(HTTPLogService, lambda r: httpx.Response(200, json={"logs": logs}), seen)
    entries = service.list_logs_by_user(session, "7", limit=20)
    assert [e.id for e in entries] == [1]
    assert seen[0].url.path == "/logs/user"
    assert dict(seen[0].url.params) == {"user_id": "7", "limit": "20"}


def test_logs_query_optional_params(session):
    seen = []
    service = _service(HTTPLogService, lambda r: httpx.Response(200, json={"logs": None}), seen)
    assert service.list_logs(session) == []
    assert service.list_logs(session, link_id=3, limit=5) == []
    assert dict(seen[0].url.params) == {}
    assert dict(seen[1].url.params) == {"link_id": "3", "limit": "5"}


def test_logs_error_default_message(session):
    service = _service(HTTPLogService, lambda r: httpx.Response(500))
    with pytest.raises(ServiceError, match="Failed to fetch user access logs"):
        service.list_logs_by_user(session, "1")


def test_login_stores_token():
    seen = []
    service = _service(HTTPAuthService, lambda r: httpx.Response(200, json={"token": "t0k"}), seen)
    session = Session()
    assert service.login(session, "ana@example.com", "pw") == "t0k"
    assert session.token == "t0k"
    assert json.loads(seen[0].content) == {"email": "ana@example.com", "password": "pw"}


def test_signup_without_token_fails():
    service = _service(HTTPAuthService, lambda r: httpx.Response(200, json={}))
    session = Session()
    with pytest.raises(ServiceError, match="No token received"):
        service.signup(session, "ana", "ana@example.com", "Passw0rd")
    assert session.token is None


def test_login_error_message():
    service = _service(HTTPAuthService, lambda r: httpx.Response(400, json={"message": "bad creds"}))
    with pytest.raises(ServiceError, match="bad creds"):
        service.login(Session(), "a@b.c", "x")


def test_logout_clears(session):
    service = _service(HTTPAuthService, lambda r: httpx.Response(200))
    service.logout(session)
    assert session.is_authenticated is False


def test_context_manager_closes_client():
    service = _service(HTTPLinkService, lambda r: httpx.Response(200, json={}))
    with service as s:
        assert s is service
    assert service._client.is_closed
