"""Test helper functions."""

import base64
import json
from io import BytesIO
from typing import Any, Dict, Optional

from src.models.api import ApiRequest


def make_data_url(mime_type: str = "image/png", payload: bytes = b"img") -> str:
    """Build a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def make_image_batch(count: int, mime_type: str = "image/jpeg") -> list[str]:
    """``count`` distinct image data URLs."""
    return [make_data_url(mime_type, f"image-{i}".encode()) for i in range(count)]


def make_request(
    method: str = "POST",
    body: Optional[Dict[str, Any]] = None,
    listing_id: Optional[str] = None,
    token: Optional[str] = "test-token",
    query: Optional[Dict[str, list]] = None,
) -> ApiRequest:
    """Create an ApiRequest for operation tests."""
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    if query is None:
        query = {"id": [listing_id]} if listing_id is not None else {}

    return ApiRequest(method=method, query=query, headers=headers, body=body or {})


class MockSocket:
    """Socket stand-in feeding a raw HTTP request and capturing the response."""

    def __init__(self, raw_request: bytes):
        self._raw_request = raw_request
        self.sent = b""

    def makefile(self, *args, **kwargs):
        return BytesIO(self._raw_request)

    def sendall(self, data):
        self.sent += bytes(data)

    def close(self):
        pass


def build_raw_request(
    method: str,
    path: str,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """Serialize an HTTP/1.1 request; dict bodies are JSON encoded."""
    if body is None:
        payload = b""
    elif isinstance(body, (bytes, str)):
        payload = body.encode('utf-8') if isinstance(body, str) else body
    else:
        payload = json.dumps(body).encode('utf-8')

    lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
    for key, value in (headers or {}).items():
        lines.append(f"{key}: {value}")
    lines.append(f"Content-Length: {len(payload)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode('utf-8') + payload


def parse_raw_response(raw: bytes) -> tuple[int, Dict[str, str], Any]:
    """Split a captured HTTP response into (status, headers, decoded JSON body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode('iso-8859-1').split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        key, _, value = line.partition(":")
        headers[key.strip()] = value.strip()
    return status, headers, json.loads(body.decode('utf-8')) if body else None
