"""Project update endpoint."""

from src.services.listing_ingestor import update_project
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: PUT ?id= updates an owned project."""

    endpoint = staticmethod(update_project)
