"""Property reactivate endpoint."""

from src.services.listing_status import reactivate_property
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: POST ?id= reactivates an archived property."""

    endpoint = staticmethod(reactivate_property)
