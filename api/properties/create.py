"""Property create endpoint."""

from src.services.listing_ingestor import create_property
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: POST creates a property."""

    endpoint = staticmethod(create_property)
