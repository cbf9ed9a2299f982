"""Location resolver - find-or-create a deduplicated location for an address."""

from ulid import ULID

from src.models.location import GeocodeResult
from src.services.geocoder import geocode_address
from src.services.supabase_client import find_location_within_tolerance, create_location
from src.utils.config import Settings
from src.utils.errors import GeocodeError
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

# +/- degrees on each axis, roughly 11 m. An axis-aligned box, not a radius.
LOCATION_TOLERANCE_DEGREES = 0.0001


def build_location_record(geocoded: GeocodeResult) -> dict:
    """Row for a new location, defaulting the country when the geocoder omits it."""
    return {
        "city": geocoded.city,
        "state": geocoded.state,
        "country": geocoded.country or Settings.DEFAULT_COUNTRY,
        "zipcode": geocoded.zipcode,
        "locality": geocoded.locality,
        "neighborhood": geocoded.neighborhood,
        "latitude": geocoded.latitude,
        "longitude": geocoded.longitude,
        "formatted_address": geocoded.formatted_address,
    }


async def resolve_location(address: str) -> str:
    """
    Resolve an address to a location id.

    Reuses any stored location inside the tolerance box, otherwise creates
    one. Existing rows are returned untouched. The search and the insert are
    not atomic: two concurrent requests for the same spot can both insert.
    """
    geocoded = await geocode_address(address)
    if geocoded is None:
        raise GeocodeError()

    with log_timing("resolve_location", logger=logger):
        existing = await find_location_within_tolerance(
            geocoded.latitude, geocoded.longitude, LOCATION_TOLERANCE_DEGREES
        )
        if existing:
            logger.debug("Reusing existing location", location_id=existing["id"])
            return existing["id"]

        location = await create_location({"id": str(ULID()), **build_location_record(geocoded)})

    logger.info(
        "Created location",
        location_id=location["id"],
        city=geocoded.city,
        state=geocoded.state,
    )
    return location["id"]
