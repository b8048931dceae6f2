import json

import httpx
from jose import jwt

import dashboard_report
from dashboard_report import main
from link_dashboard.services.http_client import HTTPAuthService


def _auth_backed_by(handler):
    def make(base_url=None, timeout=None):
        client = httpx.Client(base_url=base_url, transport=httpx.MockTransport(handler))
        return HTTPAuthService(client=client)

    return make


def test_dashboard_view_memory_backend(capsys):
    assert main(["--backend", "memory", "dashboard"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["stats"]["total_links"] == 0
    assert data["errors"] == []


def test_links_view_options(capsys):
    assert main(["--backend", "memory", "links", "--filter", "active", "--sort", "clicks"]) == 0
    assert json.loads(capsys.readouterr().out)["links"] == []


def test_analytics_view_memory_backend(capsys):
    assert main(["--backend", "memory", "analytics", "--link", "x", "--limit", "5"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["top_link"] == "No data"


def test_analytics_view_for_one_link(capsys):
    assert main(["--backend", "memory", "analytics", "--link-id", "7"]) == 0
    assert json.loads(capsys.readouterr().out)["total_logs"] == 0


def test_login_sets_session_token(monkeypatch, capsys):
    token = jwt.encode({"user_id": 1, "username": "ana"}, "test-secret", algorithm="HS256")
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"token": token})

    monkeypatch.setattr(dashboard_report, "HTTPAuthService", _auth_backed_by(handler))
    argv = ["--backend", "memory", "--email", "ana@example.com", "--password", "pw", "dashboard"]
    assert main(argv) == 0
    assert seen == [("/login", {"email": "ana@example.com", "password": "pw"})]
    assert json.loads(capsys.readouterr().out)["username"] == "ana"


def test_login_failure_exits_nonzero(monkeypatch, capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Invalid credentials"})

    monkeypatch.setattr(dashboard_report, "HTTPAuthService", _auth_backed_by(handler))
    assert main(["--backend", "memory", "--email", "ana@example.com", "dashboard"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Invalid credentials" in captured.err


def test_signup_registers_then_reports(monkeypatch, capsys):
    token = jwt.encode({"user_id": 2, "username": "bo"}, "test-secret", algorithm="HS256")
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        assert json.loads(request.content)["username"] == "bo"
        return httpx.Response(201, json={"token": token})

    monkeypatch.setattr(dashboard_report, "HTTPAuthService", _auth_backed_by(handler))
    argv = ["--backend", "memory", "--signup", "bo", "--email", "bo@example.com", "dashboard"]
    assert main(argv) == 0
    assert paths == ["/signup"]
    assert json.loads(capsys.readouterr().out)["username"] == "bo"
