"""
Registration result models (ephemeral, returned to the caller).
"""

import base64
from enum import Enum

from pydantic import BaseModel, Field

from .product import Product


class AnchorStatus(str, Enum):
    ANCHORED = "anchored"   # on-chain and linked to the record
    UNLINKED = "unlinked"   # on-chain, but persisting the reference failed
    FAILED = "failed"       # anchor submission failed
    SKIPPED = "skipped"     # no signing identity, or anchoring not configured


class AnchorOutcome(BaseModel):
    """
    Outcome of the best-effort anchoring step.

    Attributes:
        status: What happened (see AnchorStatus)
        reference: Transaction id, present for ANCHORED and UNLINKED
        error: Public error message for FAILED and UNLINKED
    """

    status: AnchorStatus
    reference: str | None = None
    error: str | None = None

    class Config:
        frozen = True

    @property
    def succeeded(self) -> bool:
        return self.status in (AnchorStatus.ANCHORED, AnchorStatus.UNLINKED)


class IdentifierImage(BaseModel):
    """Rendered scannable identifier for physical attachment."""

    payload: str = Field(..., min_length=1)
    content: bytes
    mime_type: str = "image/png"
    filename: str

    class Config:
        frozen = True

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class RegisteredProduct(BaseModel):
    """
    Result of a registration.

    product.anchor_reference is set only when the anchor was linked to the
    record; an UNLINKED anchor keeps its transaction id on anchor.reference.
    identifier is None when rendering failed, with render_error explaining why.
    """

    product: Product
    anchor: AnchorOutcome
    identifier: IdentifierImage | None = None
    render_error: str | None = None

    class Config:
        frozen = True

    @property
    def anchor_reference(self) -> str | None:
        return self.product.anchor_reference
