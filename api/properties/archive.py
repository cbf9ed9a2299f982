"""Property archive endpoint."""

from src.services.listing_status import archive_property
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: POST ?id= archives an active property."""

    endpoint = staticmethod(archive_property)
