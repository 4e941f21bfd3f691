"""Integration tests for the resolver HTTP API.

Uses httpx/ASGITransport against the real FastAPI app with a mocked resolver.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from simtarget.config import ResolverConfig
from simtarget.main import create_app
from simtarget.models import (
    CapabilitySet,
    ManifestError,
    ResolvedTarget,
    UdidDetectionError,
    ValidationError,
)
from simtarget.resolution.resolver import TargetResolver


@pytest.fixture
def resolver():
    r = TargetResolver(config=ResolverConfig(api_key="test-key-12345"))
    r.resolve = AsyncMock(return_value=ResolvedTarget(
        device_string="iPhone 6 (9.0)",
        device="iPhone 6 (9.0) [AAAA-1111]",
        udid="AAAA-1111",
        xcode_version="7.0",
        ios_sdk_version="9.0",
        capabilities=CapabilitySet(app="/tmp/My.app", reset=True),
    ))
    return r


@pytest.fixture
def app(resolver):
    return create_app(config=ResolverConfig(api_key="test-key-12345"), resolver=resolver)


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-key-12345"}


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


class TestAuth:
    async def test_health_is_public(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_missing_key_rejected(self, client):
        resp = await client.post("/api/v1/device/match", json={"device_string": "x"})
        assert resp.status_code == 401

    async def test_x_api_key_header(self, client):
        resp = await client.post(
            "/api/v1/device/match",
            json={"device_string": "x", "devices": []},
            headers={"X-API-Key": "test-key-12345"},
        )
        assert resp.status_code == 200


class TestNormalizeEndpoint:
    async def test_normalizes(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/capabilities/normalize",
            json={"app": "settings", "platformVersion": "8.0", "robotAddress": "1.2.3.4", "robotPort": 80},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["bundleId"] == "com.apple.Preferences"
        assert "app" not in data
        assert data["robotUrl"] == "http://1.2.3.4:80"
        assert data["initialOrientation"] == "PORTRAIT"
        assert data["localizableStringsDir"] == "en.lproj"

    async def test_validation_error_is_400(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/capabilities/normalize",
            json={"platformVersion": "9.0"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert "Please provide the 'app'" in resp.json()["detail"]

    async def test_bad_field_type_is_400(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/capabilities/normalize",
            json={"app": "/tmp/My.app", "orientation": "SIDEWAYS"},
            headers=auth_headers,
        )
        assert resp.status_code == 400


class TestDeviceStringEndpoint:
    async def test_xcode7_fixup(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/device/string",
            json={
                "xcode_version": "7.0.1",
                "ios_sdk_version": "9.0",
                "capabilities": {"deviceName": "iPad Simulator", "platformVersion": "8.0"},
            },
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json() == {"device_string": "iPad 2 (8.0)"}

    async def test_bad_xcode_version(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/device/string",
            json={"xcode_version": "beta", "ios_sdk_version": "9.0"},
            headers=auth_headers,
        )
        assert resp.status_code == 400


class TestDeviceMatchEndpoint:
    async def test_last_match_wins(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/device/match",
            json={
                "device_string": "iPhone 6 (9.0 Simulator)",
                "devices": ["iPhone 6 (9.0 Simulator) [A]", "iPhone 6 (9.0 Simulator) [B]"],
            },
            headers=auth_headers,
        )
        assert resp.json() == {"device": "iPhone 6 (9.0 Simulator) [B]", "udid": "B"}


class TestResolveEndpoint:
    async def test_success(self, client, auth_headers, resolver):
        resp = await client.post("/api/v1/resolve", json={"app": "/tmp/My.app"}, headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["udid"] == "AAAA-1111"
        assert data["device_string"] == "iPhone 6 (9.0)"
        assert data["capabilities"]["app"] == "/tmp/My.app"
        assert data["capabilities"]["reset"] is True
        resolver.resolve.assert_awaited_once()

    @pytest.mark.parametrize("error,status", [
        (ValidationError("bad caps"), 400),
        (ManifestError("bad plist"), 422),
        (UdidDetectionError("no device"), 503),
    ])
    async def test_error_mapping(self, client, auth_headers, resolver, error, status):
        resolver.resolve.side_effect = error
        resp = await client.post("/api/v1/resolve", json={"app": "/tmp/My.app"}, headers=auth_headers)
        assert resp.status_code == status
