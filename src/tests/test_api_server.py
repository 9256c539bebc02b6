"""Tests for the REST API server (api_server.py).

Uses FastAPI's TestClient, which drives the ASGI app in-process. DNS calls
are patched via unittest.mock.
"""

from unittest.mock import patch

import pytest

from dmarc_inspector.exceptions import DnsAllResolversExhaustedError

from .helpers import mock_fetcher

TEST_API_KEY = "test-key-that-is-long-enough"
AUTH_HEADER = {"Authorization": f"Bearer {TEST_API_KEY}"}
DMARC = "v=DMARC1; p=reject; rua=mailto:dmarc@example.com"


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setenv("DMARC_INSPECTOR_API_KEY", TEST_API_KEY)
    from fastapi.testclient import TestClient  # noqa: PLC0415

    from dmarc_inspector import api_server  # noqa: PLC0415

    return TestClient(api_server.app, raise_server_exceptions=False)


def _patch_fetcher(mapping=None):
    return patch("dmarc_inspector.api_server.create_fetcher", return_value=mock_fetcher(mapping))


# ── Health ────────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health_ok_without_auth(self, client):
        r = client.get("/api/v1/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


# ── Auth ──────────────────────────────────────────────────────────────────────


class TestAuth:
    def test_missing_header(self, client):
        r = client.post("/api/v1/records/inspect", json={"type": "spf", "record": "v=spf1 -all"})
        assert r.status_code == 401
        assert r.json()["error"]["code"] == "AUTH_FAILED"

    def test_wrong_key(self, client):
        r = client.post(
            "/api/v1/records/inspect",
            json={"type": "spf", "record": "v=spf1 -all"},
            headers={"Authorization": "Bearer nope"},
        )
        assert r.status_code == 401


# ── Lookup ────────────────────────────────────────────────────────────────────


class TestDnsLookup:
    def test_found(self, client):
        with _patch_fetcher({"_dmarc.example.com": [DMARC]}):
            r = client.get("/api/v1/dns/lookup", params={"domain": "example.com", "type": "dmarc"}, headers=AUTH_HEADER)
        assert r.status_code == 200
        data = r.json()
        assert data["found"] is True
        assert data["record"] == DMARC
        assert data["parsed"]["policy"] == "reject"

    def test_not_found(self, client):
        with _patch_fetcher():
            r = client.get("/api/v1/dns/lookup", params={"domain": "example.com", "type": "spf"}, headers=AUTH_HEADER)
        assert r.status_code == 200
        assert r.json()["found"] is False
        assert r.json()["recommendations"]

    def test_invalid_domain(self, client):
        with _patch_fetcher():
            r = client.get("/api/v1/dns/lookup", params={"domain": "nope", "type": "spf"}, headers=AUTH_HEADER)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "INVALID_REQUEST"

    def test_dkim_without_selector(self, client):
        with _patch_fetcher():
            r = client.get("/api/v1/dns/lookup", params={"domain": "example.com", "type": "dkim"}, headers=AUTH_HEADER)
        assert r.status_code == 400

    def test_dns_failure(self, client):
        with _patch_fetcher({"example.com": DnsAllResolversExhaustedError("down")}):
            r = client.get("/api/v1/dns/lookup", params={"domain": "example.com", "type": "spf"}, headers=AUTH_HEADER)
        assert r.status_code == 503
        assert r.json()["error"]["code"] == "DNS_FAILURE"


# ── Inspect ───────────────────────────────────────────────────────────────────


class TestInspect:
    def test_inspect_spf(self, client):
        r = client.post(
            "/api/v1/records/inspect",
            json={"type": "spf", "record": "v=spf1 ip4:192.0.2.0/24 +all"},
            headers=AUTH_HEADER,
        )
        assert r.status_code == 200
        data = r.json()
        assert data["valid"] is False
        assert [t["tag"] for t in data["tags"]] == ["v", "ip4", "all"]
        assert data["tags"][1]["value"] == "192.0.2.0/24"
        assert any(i["severity"] == "error" for i in data["issues"])

    def test_missing_record_returns_guidance(self, client):
        r = client.post("/api/v1/records/inspect", json={"type": "dmarc", "domain": "example.com"}, headers=AUTH_HEADER)
        assert r.status_code == 200
        data = r.json()
        assert data["found"] is False
        assert "_dmarc.example.com" in data["recommendations"][0]

    def test_unknown_type(self, client):
        r = client.post("/api/v1/records/inspect", json={"type": "bimi", "record": "v=BIMI1"}, headers=AUTH_HEADER)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "INVALID_REQUEST"


# ── Generate ──────────────────────────────────────────────────────────────────


class TestGenerate:
    def test_generate(self, client):
        r = client.post(
            "/api/v1/dmarc/generate",
            json={"domain": "Example.com", "policy": "quarantine", "percentage": 50, "rua_emails": ["a@example.com"]},
            headers=AUTH_HEADER,
        )
        assert r.status_code == 200
        data = r.json()
        assert data["record"]["name"] == "_dmarc.example.com"
        assert data["record"]["value"] == "v=DMARC1; p=quarantine; pct=50; rua=mailto:a@example.com; adkim=r; aspf=r"
        assert [w["field"] for w in data["warnings"]] == ["pct"]

    def test_percentage_bounds_enforced_by_schema(self, client):
        r = client.post("/api/v1/dmarc/generate", json={"domain": "example.com", "percentage": 150}, headers=AUTH_HEADER)
        assert r.status_code == 422

    def test_bad_alignment(self, client):
        r = client.post("/api/v1/dmarc/generate", json={"domain": "example.com", "dkim_alignment": "x"}, headers=AUTH_HEADER)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "INVALID_CONFIG"
