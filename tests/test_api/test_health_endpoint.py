"""Tests for health check endpoint."""

import pytest
from http.server import BaseHTTPRequestHandler
from unittest.mock import patch

from api.health import handler, health_check
from src.utils.config import Settings
from tests.utils.helpers import MockSocket, build_raw_request, make_request, parse_raw_response


def _serve(raw_request: bytes):
    socket = MockSocket(raw_request)
    handler(socket, ("127.0.0.1", 8000), None)
    return parse_raw_response(socket.sent)


@pytest.mark.unit
def test_health_handler_class():
    assert issubclass(handler, BaseHTTPRequestHandler)
    assert handler.endpoint is health_check


@pytest.mark.unit
def test_health_get_request():
    status, headers, body = _serve(build_raw_request("GET", "/api/health"))

    assert status == 200
    assert headers["Content-Type"] == "application/json"
    assert headers["X-Correlation-ID"].startswith("req_")
    assert body["status"] == "ok"
    assert body["service"] == "listings-backend"
    assert body["environment"] == Settings.ENVIRONMENT


@pytest.mark.unit
def test_health_rejects_post():
    status, _, body = _serve(build_raw_request("POST", "/api/health", body={}))

    assert status == 405
    assert body == {"message": "Method not allowed"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_health_reports_missing_configuration():
    with patch.object(Settings, "GOOGLE_MAPS_API_KEY", None):
        response = await health_check(make_request("GET"))

    assert response.status_code == 200
    assert response.body["geocoderConfigured"] is False
    assert response.body["supabaseConfigured"] is True
