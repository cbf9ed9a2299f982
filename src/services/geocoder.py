"""Geocoder adapter - free-text address to a normalized location via Google Maps."""

from typing import Optional
import httpx

from src.models.location import GeocodeResult
from src.utils.config import Settings
from src.utils.errors import GeocoderError
from src.utils.logging import get_structured_logger, timed

logger = get_structured_logger(__name__)

ANSWERED_STATUSES = ("OK", "ZERO_RESULTS")


def _build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=Settings.GEOCODER_TIMEOUT_SECONDS)


def _component(components: list[dict], *types: str) -> str:
    """long_name of the first component matching any of ``types``, else ''."""
    for component in components:
        if any(t in component.get("types", []) for t in types):
            return component.get("long_name", "")
    return ""


def parse_geocode_result(result: dict) -> GeocodeResult:
    """Normalize one Google geocoding result."""
    location = result["geometry"]["location"]
    components = result.get("address_components", [])

    main_locality = _component(components, "locality")
    # Areas inside a city (Gopanpally, KPHB) come back as sublocalities
    sub_locality = (
        _component(components, "sublocality_level_1")
        or _component(components, "sublocality_level_2")
        or _component(components, "sublocality")
    )

    return GeocodeResult(
        latitude=location["lat"],
        longitude=location["lng"],
        formatted_address=result.get("formatted_address"),
        city=main_locality or _component(components, "administrative_area_level_2"),
        state=_component(components, "administrative_area_level_1"),
        country=_component(components, "country") or None,
        zipcode=_component(components, "postal_code") or None,
        locality=sub_locality or main_locality or None,
        neighborhood=_component(components, "neighborhood") or sub_locality or None,
    )


@timed("geocode_address")
async def geocode_address(address: str) -> Optional[GeocodeResult]:
    """
    Geocode an address.

    Returns None when the API has no match. Missing configuration and
    transport/HTTP failures raise GeocoderError.
    """
    api_key = Settings.GOOGLE_MAPS_API_KEY
    if not api_key:
        raise GeocoderError(detail="GOOGLE_MAPS_API_KEY must be set")

    try:
        async with _build_client() as client:
            response = await client.get(
                Settings.GEOCODER_URL,
                params={"address": address, "key": api_key},
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        # httpx error text embeds the request URL, key included
        status_code = getattr(getattr(e, "response", None), "status_code", None)
        logger.error("Geocoder request failed", error_type=type(e).__name__, http_status=status_code)
        detail = f"Geocoder request failed: {type(e).__name__}"
        if status_code is not None:
            detail += f" (HTTP {status_code})"
        raise GeocoderError(detail=detail) from e

    status = data.get("status")
    results = data.get("results") or []
    if status not in ANSWERED_STATUSES:
        # REQUEST_DENIED, OVER_QUERY_LIMIT, UNKNOWN_ERROR ...
        logger.error("Geocoder rejected request", geocoder_status=status)
        raise GeocoderError(detail=f"Geocoder status {status}: {data.get('error_message', '')}")
    if status != "OK" or not results:
        logger.info("Geocoder returned no result", geocoder_status=status)
        return None

    return parse_geocode_result(results[0])
