"""Error handling utilities."""

from typing import Optional


class ListingsError(Exception):
    """Base exception for the listings backend.

    Carries the HTTP status and the user-facing message. ``detail`` holds the
    underlying cause and is only ever shown outside production.
    """
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class BadRequestError(ListingsError):
    """Invalid payload, id shape or reference."""
    status_code = 400
    default_message = "Bad request"


class GeocodeError(BadRequestError):
    """Geocoder returned no result for the address."""
    default_message = "Could not geocode the provided address"


class UnauthorizedError(ListingsError):
    """No session or no resolvable user id."""
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(ListingsError):
    """Authenticated caller does not own the listing."""
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ListingsError):
    """Target listing does not exist."""
    status_code = 404
    default_message = "Not found"


class MethodNotAllowedError(ListingsError):
    """HTTP verb not accepted by the route."""
    status_code = 405
    default_message = "Method not allowed"


class UploadError(ListingsError):
    """Blob upload failed. The cause is not distinguished for the caller."""
    status_code = 500
    default_message = "Failed to upload images"


class InvalidMediaError(ListingsError):
    """Payload is not a decodable data URL of the expected kind."""
    default_message = "Invalid image data"


class GeocoderError(ListingsError):
    """Geocoder unreachable or misconfigured."""
    pass


class SupabaseError(ListingsError):
    """Supabase operation error."""
    pass
