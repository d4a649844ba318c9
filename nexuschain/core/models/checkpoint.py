"""
Checkpoint models: one custody or inspection event in a product's journey.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .product import ProductStatus


class Checkpoint(BaseModel):
    """
    A recorded checkpoint as returned by the record store.

    Attributes:
        checkpoint_id: System-assigned identifier (wire name "id")
        product_record_id: Owning product's record id (wire name "productId")
        timestamp: Event time, the sole ordering key
        location: Where the event happened
        latitude/longitude: Optional coordinates, given as a pair
        status: Status tag carried by the event
        temperature: Optional reading in degrees Celsius
        notes: Free text
        handled_by: Who handled the product at this point
    """

    checkpoint_id: str = Field(..., min_length=1, alias="id")
    product_record_id: str = Field(..., min_length=1, alias="productId")
    timestamp: datetime
    location: str
    latitude: float | None = None
    longitude: float | None = None
    status: ProductStatus
    temperature: float | None = None
    notes: str | None = None
    handled_by: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def sort_key(self) -> datetime:
        """Timestamp normalized to UTC; naive timestamps are read as UTC."""
        if self.timestamp.tzinfo is None:
            return self.timestamp.replace(tzinfo=timezone.utc)
        return self.timestamp.astimezone(timezone.utc)


class CheckpointInput(BaseModel):
    """Input for recording a new checkpoint against a product."""

    product_record_id: str = Field(..., alias="productId")
    location: str
    status: ProductStatus
    timestamp: datetime | None = None
    latitude: float | None = None
    longitude: float | None = None
    temperature: float | None = None
    notes: str | None = None
    handled_by: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "productId": "65f1c2e4a9",
                "location": "Memphis Distribution Hub",
                "status": "IN_TRANSIT",
                "latitude": 35.1495,
                "longitude": -90.049,
                "temperature": -70.5,
                "handledBy": "FedEx Cold Chain",
            }
        }

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
