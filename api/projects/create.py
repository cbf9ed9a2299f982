"""Project create endpoint."""

from src.services.listing_ingestor import create_project
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: POST creates a project."""

    endpoint = staticmethod(create_project)
