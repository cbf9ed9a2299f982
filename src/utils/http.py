"""Shared Vercel request handler for the listing routes."""

from http.server import BaseHTTPRequestHandler
from urllib.parse import parse_qs, urlparse
import asyncio
import json

from src.models.api import ApiRequest, ApiResponse
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


def _run(coro):
    try:
        loop = asyncio.get_event_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    if loop.is_closed():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


class ListingRequestHandler(BaseHTTPRequestHandler):
    """
    Route every verb to ``endpoint``.

    Subclasses set ``endpoint = staticmethod(operation)`` where ``operation``
    is an async callable taking an ApiRequest and returning an ApiResponse.
    The operation itself rejects verbs it does not accept.
    """

    endpoint = None

    def do_GET(self):
        self._dispatch()

    def do_POST(self):
        self._dispatch()

    def do_PUT(self):
        self._dispatch()

    def do_PATCH(self):
        self._dispatch()

    def do_DELETE(self):
        self._dispatch()

    def _read_body(self) -> dict:
        content_length = int(self.headers.get('Content-Length', 0) or 0)
        raw_body = self.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
        try:
            body = json.loads(raw_body) if raw_body else {}
        except json.JSONDecodeError:
            body = {}
        return body if isinstance(body, dict) else {}

    def _build_request(self) -> ApiRequest:
        return ApiRequest(
            method=self.command.upper(),
            query=parse_qs(urlparse(self.path).query, keep_blank_values=True),
            headers={key: value for key, value in self.headers.items()},
            body=self._read_body(),
        )

    def _dispatch(self):
        correlation_header = LoggingConfig.LOG_CORRELATION_ID_HEADER
        with correlation_context(self.headers.get(correlation_header)) as correlation_id:
            try:
                request = self._build_request()
                response = _run(type(self).endpoint(request))
            except Exception as e:
                logger.exception("Unhandled handler error", error=str(e), error_type=type(e).__name__)
                response = ApiResponse(status_code=500, body={"message": "Internal server error"})

            logger.info(
                "Request completed",
                http_method=self.command,
                path=urlparse(self.path).path,
                status_code=response.status_code,
            )
            self._write(response, correlation_header, correlation_id)

    def _write(self, response: ApiResponse, correlation_header: str, correlation_id: str):
        self.send_response(response.status_code)
        self.send_header('Content-Type', 'application/json')
        self.send_header(correlation_header, correlation_id)
        for key, value in response.headers.items():
            self.send_header(key, value)
        self.end_headers()
        self.wfile.write(json.dumps(response.body).encode('utf-8'))

    def log_message(self, format, *args):
        # Request lines go through the structured logger instead of stderr
        return
