"""Response builders shared by the route operations."""

from typing import Any, Optional

from src.models.api import ApiResponse
from src.utils.config import Settings
from src.utils.errors import ListingsError
from src.utils.logging import mask_sensitive_data


def json_response(status_code: int, body: dict[str, Any]) -> ApiResponse:
    return ApiResponse(status_code=status_code, body=body)


def resolve_expose_flag(expose_internal_errors: Optional[bool]) -> bool:
    """Explicit argument wins, otherwise the environment setting."""
    if expose_internal_errors is None:
        return Settings.EXPOSE_INTERNAL_ERRORS
    return expose_internal_errors


def error_response(error: Exception, expose_internal_errors: bool) -> ApiResponse:
    """
    Format an error as ``{message}`` or ``{message, error}``.

    Client errors (4xx) carry only their message. Server errors carry the
    underlying detail in ``error`` when ``expose_internal_errors`` is set,
    masked the same way log fields are.
    Anything that is not a ListingsError is an internal error.
    """
    if isinstance(error, ListingsError):
        status_code = error.status_code
        body: dict[str, Any] = {"message": error.message}
        detail = error.detail or (str(error.__cause__) if error.__cause__ else None)
    else:
        status_code = 500
        body = {"message": "Internal server error"}
        detail = f"{type(error).__name__}: {error}"

    if status_code >= 500 and expose_internal_errors and detail:
        body["error"] = mask_sensitive_data(detail)

    return ApiResponse(status_code=status_code, body=body)
