"""Runtime settings read from environment variables."""

import os


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Centralized service configuration."""

    ENVIRONMENT = os.environ.get("ENVIRONMENT", "production").lower()

    # Error detail is echoed in 500 responses everywhere except production
    EXPOSE_INTERNAL_ERRORS = _as_bool(
        os.environ.get(
            "EXPOSE_INTERNAL_ERRORS",
            "false" if ENVIRONMENT == "production" else "true",
        )
    )

    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    STORAGE_BUCKET = os.environ.get("STORAGE_BUCKET", "listing-media")

    GOOGLE_MAPS_API_KEY = os.environ.get("GOOGLE_MAPS_API_KEY")
    GEOCODER_URL = os.environ.get(
        "GEOCODER_URL", "https://maps.googleapis.com/maps/api/geocode/json"
    )
    GEOCODER_TIMEOUT_SECONDS = float(os.environ.get("GEOCODER_TIMEOUT_SECONDS", "10"))

    DEFAULT_COUNTRY = os.environ.get("DEFAULT_COUNTRY", "India")
