"""Location models."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GeocodeResult(BaseModel):
    """Normalized geocoder output for a free-text address."""
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = Field(None, description="Empty when the geocoder omits it")
    zipcode: Optional[str] = None
    locality: Optional[str] = None
    neighborhood: Optional[str] = None


class Location(BaseModel):
    """Deduplicated geographic point. Never mutated once created."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(None, description="Location ID (text)")
    city: Optional[str] = None
    state: Optional[str] = None
    country: str = Field(default="India", description="Country, India when the geocoder omits it")
    zipcode: Optional[str] = None
    locality: Optional[str] = None
    neighborhood: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None
    created_at: Optional[str] = None
