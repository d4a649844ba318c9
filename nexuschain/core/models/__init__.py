"""
Core data models for the provenance workflow.

All models use Pydantic for runtime validation and type safety.
"""

from .checkpoint import Checkpoint, CheckpointInput
from .identity import AuthenticatedIdentity
from .product import Product, ProductCategory, ProductRegistration, ProductStatus
from .registration import AnchorOutcome, AnchorStatus, IdentifierImage, RegisteredProduct
from .timeline import Timeline
from .validation_result import ValidationResult
from .verification import NotVerified, VerificationOutcome, Verified

__all__ = [
    "Product",
    "ProductCategory",
    "ProductStatus",
    "ProductRegistration",
    "Checkpoint",
    "CheckpointInput",
    "AuthenticatedIdentity",
    "AnchorStatus",
    "AnchorOutcome",
    "IdentifierImage",
    "RegisteredProduct",
    "Timeline",
    "ValidationResult",
    "Verified",
    "NotVerified",
    "VerificationOutcome",
]
