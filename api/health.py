"""Health check endpoint."""

from src.models.api import ApiRequest, ApiResponse
from src.utils.config import Settings
from src.utils.http import ListingRequestHandler
from src.utils.logging_config import LoggingConfig
from src.utils.responses import json_response


async def health_check(request: ApiRequest) -> ApiResponse:
    """Liveness plus whether the backing services are configured. Never touches the network."""
    if request.method != "GET":
        return json_response(405, {"message": "Method not allowed"})

    return json_response(200, {
        "status": "ok",
        "service": LoggingConfig.SERVICE_NAME,
        "environment": Settings.ENVIRONMENT,
        "supabaseConfigured": bool(Settings.SUPABASE_URL and Settings.SUPABASE_SERVICE_ROLE_KEY),
        "geocoderConfigured": bool(Settings.GOOGLE_MAPS_API_KEY),
    })


class handler(ListingRequestHandler):
    """Vercel serverless function handler: GET reports service health."""

    endpoint = staticmethod(health_check)
