"""Property update endpoint."""

from src.services.listing_ingestor import update_property
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: PUT ?id= updates an owned property."""

    endpoint = staticmethod(update_property)
