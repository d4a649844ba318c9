"""
Timeline model: the read model of a product's provenance.
"""

from pydantic import BaseModel, Field

from .checkpoint import Checkpoint
from .product import Product, ProductStatus


class Timeline(BaseModel):
    """
    Product plus its ordered checkpoints and derived statistics.

    Attributes:
        product: The product as stored
        checkpoints: Checkpoints ordered by timestamp ascending (stable on ties)
        checkpoint_count: Number of checkpoints
        days_in_transit: Whole UTC days since the product was created, >= 0
        current_location: Last checkpoint's location, or the origin location
        status: Status folded from the checkpoint sequence
    """

    product: Product
    checkpoints: tuple[Checkpoint, ...] = ()
    checkpoint_count: int = Field(..., ge=0)
    days_in_transit: int = Field(..., ge=0)
    current_location: str
    status: ProductStatus

    class Config:
        frozen = True

    @property
    def latest_checkpoint(self) -> Checkpoint | None:
        return self.checkpoints[-1] if self.checkpoints else None
