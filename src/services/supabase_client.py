"""Supabase client wrapper with async context manager support."""

from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.config import Settings
from src.utils.errors import SupabaseError
import logging

logger = logging.getLogger(__name__)

# Global client instance (singleton pattern, reused by warm serverless instances)
_client: Optional[Client] = None

# Relations attached to every listing returned to callers
LISTING_WITH_RELATIONS = "*, location:locations(*), builder:builders(*)"


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = Settings.SUPABASE_URL
        key = Settings.SUPABASE_SERVICE_ROLE_KEY

        if not url or not key:
            raise SupabaseError(detail="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"supabase_url": url})

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "error_type": exc_type.__name__}
            )
        return False


def _first(result) -> Optional[dict]:
    return result.data[0] if result.data and len(result.data) > 0 else None


# Builders table operations (reference data)
async def get_builder_by_id(builder_id: str) -> Optional[dict]:
    """Get builder by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table("builders").select("id, name").eq("id", builder_id).limit(1).execute()
            return _first(result)
        except Exception as e:
            raise SupabaseError(detail=f"Failed to get builder: {e}") from e


# Locations table operations
async def find_location_within_tolerance(latitude: float, longitude: float, tolerance: float) -> Optional[dict]:
    """Find any location inside the lat/lng box of +/- tolerance degrees (inclusive)."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table("locations")
                .select("*")
                .gte("latitude", latitude - tolerance)
                .lte("latitude", latitude + tolerance)
                .gte("longitude", longitude - tolerance)
                .lte("longitude", longitude + tolerance)
                .limit(1)
                .execute()
            )
            return _first(result)
        except Exception as e:
            raise SupabaseError(detail=f"Failed to search locations: {e}") from e


async def create_location(location_data: dict) -> dict:
    """Create a new location."""
    async with SupabaseClient() as client:
        try:
            result = client.table("locations").insert(location_data).execute()
        except Exception as e:
            raise SupabaseError(detail=f"Failed to create location: {e}") from e
        location = _first(result)
        if location is None:
            raise SupabaseError(detail="Failed to create location: no data returned")
        return location


# Listing tables operations (projects, properties)
async def get_listing_by_id(table: str, listing_id: str) -> Optional[dict]:
    """Get a project/property row by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).select("*").eq("id", listing_id).limit(1).execute()
            return _first(result)
        except Exception as e:
            raise SupabaseError(detail=f"Failed to get {table} row: {e}") from e


async def get_listing_with_relations(table: str, listing_id: str) -> Optional[dict]:
    """Get a project/property with its location and builder attached."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).select(LISTING_WITH_RELATIONS).eq("id", listing_id).limit(1).execute()
            return _first(result)
        except Exception as e:
            raise SupabaseError(detail=f"Failed to get {table} row: {e}") from e


async def create_listing(table: str, listing_data: dict) -> dict:
    """Insert a project/property row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).insert(listing_data).execute()
        except Exception as e:
            raise SupabaseError(detail=f"Failed to create {table} row: {e}") from e
        listing = _first(result)
        if listing is None:
            raise SupabaseError(detail=f"Failed to create {table} row: no data returned")
        return listing


async def update_listing(table: str, listing_id: str, updates: dict) -> dict:
    """Update a project/property row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).update(updates).eq("id", listing_id).execute()
        except Exception as e:
            raise SupabaseError(detail=f"Failed to update {table} row: {e}") from e
        listing = _first(result)
        if listing is None:
            raise SupabaseError(detail=f"Failed to update {table} row: {listing_id}")
        return listing
