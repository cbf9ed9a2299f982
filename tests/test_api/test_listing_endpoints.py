"""Tests for the listing route handlers."""

import pytest
from http.server import BaseHTTPRequestHandler
from unittest.mock import patch

from api.projects.create import handler as create_project_handler
from api.projects.update import handler as update_project_handler
from api.projects.archive import handler as archive_project_handler
from api.properties.create import handler as create_property_handler
from api.properties.update import handler as update_property_handler
from api.properties.archive import handler as archive_property_handler
from api.properties.reactivate import handler as reactivate_property_handler
from api.properties.mark_sold import handler as mark_sold_handler
from src.models.api import ApiResponse
from src.services import listing_ingestor, listing_status
from src.utils.http import ListingRequestHandler
from tests.utils.helpers import MockSocket, build_raw_request, parse_raw_response


def _serve(handler_class, raw_request: bytes):
    socket = MockSocket(raw_request)
    handler_class(socket, ("127.0.0.1", 8000), None)
    return parse_raw_response(socket.sent)


class Recorder:
    """Async endpoint stand-in recording the ApiRequest it receives."""

    def __init__(self, response: ApiResponse):
        self.response = response
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        return self.response


@pytest.mark.unit
@pytest.mark.parametrize("handler_class,operation", [
    (create_project_handler, listing_ingestor.create_project),
    (update_project_handler, listing_ingestor.update_project),
    (archive_project_handler, listing_status.archive_project),
    (create_property_handler, listing_ingestor.create_property),
    (update_property_handler, listing_ingestor.update_property),
    (archive_property_handler, listing_status.archive_property),
    (reactivate_property_handler, listing_status.reactivate_property),
    (mark_sold_handler, listing_status.mark_property_sold),
])
def test_routes_bind_operations(handler_class, operation):
    assert issubclass(handler_class, ListingRequestHandler)
    assert issubclass(handler_class, BaseHTTPRequestHandler)
    assert handler_class.endpoint is operation


@pytest.mark.unit
def test_request_is_forwarded():
    recorder = Recorder(ApiResponse(status_code=201, body={"message": "Project created successfully"}))
    raw = build_raw_request(
        "POST",
        "/api/projects/create",
        body={"name": "Test", "builderId": "b1"},
        headers={"Authorization": "Bearer tok", "Content-Type": "application/json"},
    )

    with patch.object(create_project_handler, "endpoint", staticmethod(recorder)):
        status, headers, body = _serve(create_project_handler, raw)

    assert status == 201
    assert body == {"message": "Project created successfully"}
    assert headers["Content-Type"] == "application/json"

    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.body == {"name": "Test", "builderId": "b1"}
    assert request.header("authorization") == "Bearer tok"


@pytest.mark.unit
def test_query_string_parsed():
    recorder = Recorder(ApiResponse(status_code=200, body={}))
    raw = build_raw_request("PUT", "/api/projects/update?id=p1&id=p2", body={})

    with patch.object(update_project_handler, "endpoint", staticmethod(recorder)):
        _serve(update_project_handler, raw)

    assert recorder.requests[0].query == {"id": ["p1", "p2"]}


@pytest.mark.unit
@pytest.mark.parametrize("raw_body", ["{not json", "[1, 2, 3]", ""])
def test_malformed_body_is_empty(raw_body):
    recorder = Recorder(ApiResponse(status_code=400, body={"message": "Missing required fields"}))
    raw = build_raw_request("POST", "/api/properties/create", body=raw_body)

    with patch.object(create_property_handler, "endpoint", staticmethod(recorder)):
        status, _, _ = _serve(create_property_handler, raw)

    assert status == 400
    assert recorder.requests[0].body == {}


@pytest.mark.unit
def test_correlation_id_echoed():
    recorder = Recorder(ApiResponse(status_code=200, body={}))
    raw = build_raw_request("POST", "/api/properties/archive?id=x", headers={"X-Correlation-ID": "req_fromclient"})

    with patch.object(archive_property_handler, "endpoint", staticmethod(recorder)):
        _, headers, _ = _serve(archive_property_handler, raw)

    assert headers["X-Correlation-ID"] == "req_fromclient"


@pytest.mark.unit
def test_correlation_id_generated():
    recorder = Recorder(ApiResponse(status_code=200, body={}))
    raw = build_raw_request("POST", "/api/properties/reactivate?id=x")

    with patch.object(reactivate_property_handler, "endpoint", staticmethod(recorder)):
        _, headers, _ = _serve(reactivate_property_handler, raw)

    assert headers["X-Correlation-ID"].startswith("req_")


@pytest.mark.unit
def test_endpoint_crash_is_internal_error():
    async def crash(request):
        raise RuntimeError("unexpected")

    raw = build_raw_request("POST", "/api/properties/mark_sold?id=x")

    with patch.object(mark_sold_handler, "endpoint", staticmethod(crash)):
        status, _, body = _serve(mark_sold_handler, raw)

    assert status == 500
    assert body == {"message": "Internal server error"}


@pytest.mark.unit
@pytest.mark.parametrize("method", ["GET", "DELETE", "PATCH"])
def test_wrong_method_on_create(method):
    status, _, body = _serve(create_project_handler, build_raw_request(method, "/api/projects/create"))

    assert status == 405
    assert body == {"message": "Method not allowed"}


@pytest.mark.unit
def test_wrong_method_on_archive_project():
    status, _, body = _serve(archive_project_handler, build_raw_request("DELETE", "/api/projects/archive?id=p1"))

    assert status == 405
    assert body == {"message": "Method not allowed"}
