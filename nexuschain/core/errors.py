"""
Error taxonomy for the provenance workflow.

Every failure raised by the core derives from ProvenanceError. Each error
carries a public_message that is safe to show to end users; collaborator
details (HTTP bodies, RPC errors) stay on the exception for logging only.
"""

from typing import Any


class ProvenanceError(Exception):
    """Base class for all provenance workflow errors."""

    public_message = "The request could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.public_message
        super().__init__(self.message)


class ValidationError(ProvenanceError):
    """
    Raised when input fails a validation rule, before any network call.

    Attributes:
        rule_name: Rule that failed (e.g. "min_length")
        field_name: Field the first violation is tagged with
        message: Human readable message for that field
        violations: Every violation found, keyed by field name
    """

    def __init__(
        self,
        rule_name: str,
        field_name: str,
        message: str,
        violations: dict[str, list[str]] | None = None,
    ):
        self.rule_name = rule_name
        self.field_name = field_name
        self.violations = violations or {field_name: [message]}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.rule_name}] {self.field_name}: {self.message}"

    @property
    def public_message(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "validation_error",
            "field": self.field_name,
            "message": self.message,
            "violations": self.violations,
        }


class DuplicateError(ProvenanceError):
    """Raised when a product key is already registered."""

    public_message = "A product with this identifier is already registered"

    def __init__(self, product_key: str | None = None):
        self.product_key = product_key
        super().__init__(
            f"Product '{product_key}' is already registered" if product_key else None
        )


class NotFoundError(ProvenanceError):
    """Raised when no product or record matches the identifier."""

    public_message = "Product not found"

    def __init__(self, identifier: str | None = None):
        self.identifier = identifier
        super().__init__(f"No record found for '{identifier}'" if identifier else None)


class InvalidInputError(ProvenanceError):
    """Raised for structurally unusable verification input (empty or blank)."""

    public_message = "Please enter a product identifier"


class RecordStoreError(ProvenanceError):
    """
    Raised when the record store is unreachable or rejects a request.

    The status code and raw detail are kept for logs; str() and
    public_message never include the collaborator's response body.
    """

    public_message = "The record store could not process the request"

    def __init__(
        self,
        operation: str,
        status_code: int | None = None,
        detail: str | None = None,
    ):
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        suffix = f" (HTTP {status_code})" if status_code else ""
        super().__init__(f"Record store failed during {operation}{suffix}")


class AnchorError(ProvenanceError):
    """Raised when blockchain anchoring fails."""

    public_message = "Blockchain anchoring failed"


class RenderError(ProvenanceError):
    """Raised when the identifier image cannot be generated."""

    public_message = "QR code generation failed"
