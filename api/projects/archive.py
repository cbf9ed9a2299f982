"""Project archive endpoint."""

from src.services.listing_status import archive_project
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: PATCH ?id= archives or unarchives a project."""

    endpoint = staticmethod(archive_project)
