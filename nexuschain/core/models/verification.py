"""
Verification outcome models: exactly one of Verified or NotVerified.
"""

from typing import Literal, Union

from pydantic import BaseModel

from .product import Product


class Verified(BaseModel):
    """The identifier resolved to a registered product."""

    verified: Literal[True] = True
    product: Product

    class Config:
        frozen = True


class NotVerified(BaseModel):
    """
    The identifier did not resolve to a product.

    Carries no cause: a missing product and a failed lookup look the same.
    """

    verified: Literal[False] = False
    message: str = "This product could not be verified as authentic"

    class Config:
        frozen = True


VerificationOutcome = Union[Verified, NotVerified]
