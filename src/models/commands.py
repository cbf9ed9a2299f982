"""Typed request commands validated once at the route boundary.

Request bodies arrive in camelCase (``builderId``, ``floorplanImagesBase64``,
``keepExistingImages``). Each command is either fully valid or rejected with a
single ``BadRequestError``.
"""

from abc import abstractmethod
from typing import Any, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from src.utils.errors import BadRequestError

MISSING_FIELDS_MESSAGE = "Missing required fields"
INVALID_BODY_MESSAGE = "Invalid request body"


class _Command(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class KeepExistingImages(_Command):
    """Per-category "keep existing" flags sent with update requests.

    A flag left out of the payload is ``None``, which is different from an
    explicit ``False``: only explicit flags mark a category as touched.
    """
    banner: Optional[bool] = None
    floorplans: Optional[bool] = None
    clubhouse: Optional[bool] = None
    gallery: Optional[bool] = None
    site_layout: Optional[bool] = None

    def flag_for(self, category: str) -> Optional[bool]:
        return getattr(self, category, None)


class ListingPayload(_Command):
    """Fields shared by every project/property request."""
    description: str = Field(..., min_length=1)
    builder_id: str = Field(..., min_length=1)
    type: Optional[str] = None
    location_address: Optional[str] = None
    builder_website_link: Optional[str] = None
    brochure_url: Optional[str] = None
    brochure_pdf_base64: Optional[str] = None
    walkthrough_video_url: Optional[str] = None
    highlights: Optional[list[str]] = None
    amenities: Optional[list[str]] = None
    banner_image_base64: Optional[str] = None
    floorplan_images_base64: Optional[list[str]] = None
    clubhouse_images_base64: Optional[list[str]] = None
    gallery_images_base64: Optional[list[str]] = None

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Name or title of the listing; blob paths are derived from it."""

    def provided(self, field_name: str) -> bool:
        """True when the caller sent the field, even as null or empty."""
        return field_name in self.model_fields_set


class ProjectPayload(ListingPayload):
    name: str = Field(..., min_length=1)
    site_layout_images_base64: Optional[list[str]] = None

    @property
    def display_name(self) -> str:
        return self.name


class ProjectCreateCommand(ProjectPayload):
    location_address: str = Field(..., min_length=1)


class ProjectUpdateCommand(ProjectPayload):
    keep_existing_images: Optional[KeepExistingImages] = None


class PropertyPayload(ListingPayload):
    title: str = Field(..., min_length=1)
    listing_type: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    property_size: Optional[float] = Field(None, ge=0)
    property_size_unit: Optional[str] = None
    facing: Optional[str] = None
    project_id: Optional[str] = None

    @field_validator("price", "bedrooms", "bathrooms", "property_size", "project_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Form posts send "" for untouched optional inputs
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def display_name(self) -> str:
        return self.title


class PropertyCreateCommand(PropertyPayload):
    location_address: str = Field(..., min_length=1)


class PropertyUpdateCommand(PropertyPayload):
    keep_existing_images: Optional[KeepExistingImages] = None


C = TypeVar("C", bound=_Command)


def parse_command(model: type[C], body: Any) -> C:
    """Validate a request body into ``model`` or raise ``BadRequestError``.

    Any problem with a required field is reported as missing required fields;
    everything else is an invalid body.
    """
    if not isinstance(body, dict):
        raise BadRequestError(INVALID_BODY_MESSAGE)

    try:
        return model.model_validate(body)
    except ValidationError as e:
        required = {
            field.alias or name
            for name, field in model.model_fields.items()
            if field.is_required()
        }
        errors = e.errors(include_url=False, include_input=False)
        if any(err["loc"] and err["loc"][0] in required for err in errors):
            raise BadRequestError(MISSING_FIELDS_MESSAGE, detail=str(e)) from e
        raise BadRequestError(INVALID_BODY_MESSAGE, detail=str(e)) from e
