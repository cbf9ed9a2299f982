"""Property mark-sold endpoint."""

from src.services.listing_status import mark_property_sold
from src.utils.http import ListingRequestHandler


class handler(ListingRequestHandler):
    """Vercel serverless function handler: POST ?id= marks a property as sold."""

    endpoint = staticmethod(mark_property_sold)
