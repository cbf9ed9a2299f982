"""Listing models.

Projects and properties share one shape and differ in the name field, the
default type and whether they carry site layout images. Rows come back from
Supabase in snake_case; responses are serialized in camelCase.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.models.builder import Builder
from src.models.location import Location


class ProjectType(str, Enum):
    """Project type values."""
    RESIDENTIAL = "RESIDENTIAL"
    COMMERCIAL = "COMMERCIAL"


class PropertyType(str, Enum):
    """Property type values."""
    APARTMENT = "APARTMENT"
    VILLA = "VILLA"
    INDEPENDENT_HOUSE = "INDEPENDENT_HOUSE"
    LAND_RESIDENTIAL = "LAND_RESIDENTIAL"
    COMMERCIAL = "COMMERCIAL"


class ListingType(str, Enum):
    """Property listing type values."""
    SALE = "SALE"
    RENT = "RENT"


class ListingStatus(str, Enum):
    """Property listing lifecycle."""
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    SOLD = "SOLD"


class Listing(BaseModel):
    """Fields shared by projects and properties."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(None, description="Listing ID (text)")
    description: Optional[str] = None
    type: Optional[str] = None
    builder_id: Optional[str] = Field(None, description="Builder ID (text FK)")
    location_id: Optional[str] = Field(None, description="Location ID (text FK)")
    posted_by_user_id: Optional[str] = Field(None, description="Owner, set once at creation")
    banner_image_url: Optional[str] = None
    floorplan_image_urls: list[str] = Field(default_factory=list)
    clubhouse_image_urls: list[str] = Field(default_factory=list)
    gallery_image_urls: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list, description="Floorplans, clubhouse, gallery (and site layout for projects) in that order")
    thumbnail_url: Optional[str] = None
    builder_website_link: Optional[str] = None
    brochure_url: Optional[str] = None
    walkthrough_video_url: Optional[str] = None
    highlights: Optional[list[str]] = None
    amenities: Optional[list[str]] = None
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    location: Optional[Location] = None
    builder: Optional[Builder] = None

    @field_validator(
        "floorplan_image_urls", "clubhouse_image_urls", "gallery_image_urls", "image_urls",
        mode="before",
    )
    @classmethod
    def _null_list(cls, value):
        # Older rows store NULL for empty image arrays
        return [] if value is None else value


class Project(Listing):
    """Builder project (multi-unit)."""
    name: str = Field(..., description="Project name")
    site_layout_image_urls: list[str] = Field(default_factory=list)

    @field_validator("site_layout_image_urls", mode="before")
    @classmethod
    def _null_site_layout(cls, value):
        return [] if value is None else value


class Property(Listing):
    """Standalone property."""
    title: str = Field(..., description="Property title")
    listing_type: Optional[str] = Field(default=ListingType.SALE.value)
    listing_status: str = Field(default=ListingStatus.ACTIVE.value)
    price: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    property_size: Optional[float] = None
    property_size_unit: Optional[str] = None
    sq_ft: Optional[float] = Field(None, description="Size normalized to square feet for search")
    facing: Optional[str] = None
    project_id: Optional[str] = None
    sold_to: Optional[str] = None
    sold_to_user_id: Optional[str] = None
    sold_date: Optional[str] = None
