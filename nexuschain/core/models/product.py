"""
Product models: the stored product record and the registration input.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class ProductCategory(str, Enum):
    PHARMACEUTICALS = "PHARMACEUTICALS"
    ELECTRONICS = "ELECTRONICS"
    LUXURY_GOODS = "LUXURY_GOODS"
    FOOD_BEVERAGE = "FOOD_BEVERAGE"
    AUTOMOTIVE = "AUTOMOTIVE"
    OTHER = "OTHER"


class ProductStatus(str, Enum):
    CREATED = "CREATED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    FLAGGED = "FLAGGED"

    @property
    def is_terminal(self) -> bool:
        return self in (ProductStatus.DELIVERED, ProductStatus.FLAGGED)


def coerce_date(value: Any) -> Any:
    """Accept full ISO timestamps where a calendar date is expected."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


class ProductRegistration(BaseModel):
    """
    Input for registering a product.

    Field names follow Python conventions; the camelCase names used by the
    record store (productId, manufacturingDate, ...) are accepted as well.
    """

    product_key: str = Field(..., alias="productId")
    name: str
    category: ProductCategory
    description: str
    manufacturing_date: date
    expiry_date: date | None = None
    origin_location: str
    min_temperature: float | None = None
    max_temperature: float | None = None

    @field_validator("manufacturing_date", "expiry_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return coerce_date(value)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "productId": "PFZ-CV19-001",
                "name": "Vaccine X",
                "category": "PHARMACEUTICALS",
                "description": "mRNA vaccine, cold chain required",
                "manufacturingDate": "2024-01-01",
                "expiryDate": "2024-07-01",
                "originLocation": "New York",
                "minTemperature": -80.0,
                "maxTemperature": -60.0,
            }
        }

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the record store's JSON body."""
        return self.model_dump(by_alias=True, mode="json")


class Product(BaseModel):
    """
    A product record as held by the record store.

    Attributes:
        record_id: System-assigned identifier (wire name "id")
        product_key: Manufacturer SKU, unique (wire name "productId")
        status: Lifecycle status as stored
        anchor_reference: Blockchain transaction id, absent until anchored
            (wire name "blockchainHash")
        current_location: Location reported by the store, if any; the
            timeline derives its own from checkpoints
        created_at: When the record was created, if the store reports it
    """

    record_id: str = Field(..., min_length=1, alias="id")
    product_key: str = Field(..., min_length=1, alias="productId")
    name: str
    category: ProductCategory
    description: str = ""
    manufacturing_date: date
    expiry_date: date | None = None
    origin_location: str
    min_temperature: float | None = None
    max_temperature: float | None = None
    status: ProductStatus = ProductStatus.CREATED
    anchor_reference: str | None = Field(None, alias="blockchainHash")
    current_location: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("manufacturing_date", "expiry_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return coerce_date(value)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @property
    def temperature_range(self) -> tuple[float, float] | None:
        if self.min_temperature is None or self.max_temperature is None:
            return None
        return (self.min_temperature, self.max_temperature)

    @property
    def is_anchored(self) -> bool:
        return bool(self.anchor_reference)
