"""
Input validation utilities for the provenance workflow.

Provides reusable checks for identifiers and query parameters that come
from untrusted callers (scanned codes, URLs, CLI arguments) before they
are used to build record store requests.
"""

import re
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel

from nexuschain.core.errors import InvalidInputError, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

MAX_IDENTIFIER_LENGTH = 512

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def is_encodable(value: str) -> bool:
    """Whether value survives UTF-8 encoding (no lone surrogates)."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def validate_record_id(record_id: Any, field_name: str = "record_id") -> str:
    """
    Validate a record ID.

    Record IDs must be non-empty strings without control characters.

    Args:
        record_id: The record ID to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated record ID (stripped of whitespace)

    Raises:
        InvalidInputError: If validation fails

    Examples:
        >>> validate_record_id(" 65f1c2e4a9 ")
        '65f1c2e4a9'
        >>> validate_record_id("   ")  # doctest: +SKIP
        InvalidInputError: record_id cannot be empty or whitespace-only
    """
    if not isinstance(record_id, str):
        raise InvalidInputError(f"{field_name} must be a string")

    record_id = record_id.strip()

    if not record_id:
        raise InvalidInputError(f"{field_name} cannot be empty or whitespace-only")

    if _CONTROL_CHARS.search(record_id):
        raise InvalidInputError(f"{field_name} contains control characters")

    if not is_encodable(record_id):
        raise InvalidInputError(f"{field_name} contains characters that cannot be encoded")

    if len(record_id) > MAX_IDENTIFIER_LENGTH:
        raise InvalidInputError(
            f"{field_name} exceeds maximum length of {MAX_IDENTIFIER_LENGTH} characters"
        )

    return record_id


def is_safe_identifier(value: str) -> bool:
    """
    Whether a non-blank identifier is worth sending to the record store.

    Over-long values, values with control characters and text that is not
    valid Unicode can never match a product, so callers can answer them
    without a network call.
    """
    return (
        len(value) <= MAX_IDENTIFIER_LENGTH
        and not _CONTROL_CHARS.search(value)
        and is_encodable(value)
    )


def validate_limit(limit: int, field_name: str = "limit", max_limit: int = 1000) -> int:
    """
    Validate a page size for list queries.

    Examples:
        >>> validate_limit(50)
        50
        >>> validate_limit(0)  # doctest: +SKIP
        InvalidInputError: limit must be a positive integer
    """
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise InvalidInputError(f"{field_name} must be an integer, got {type(limit).__name__}")

    if limit <= 0:
        raise InvalidInputError(f"{field_name} must be a positive integer, got {limit}")

    if limit > max_limit:
        raise InvalidInputError(f"{field_name} exceeds maximum of {max_limit}")

    return limit


def validate_page(page: int, field_name: str = "page") -> int:
    """Validate a 1-based page number."""
    if not isinstance(page, int) or isinstance(page, bool):
        raise InvalidInputError(f"{field_name} must be an integer, got {type(page).__name__}")

    if page < 1:
        raise InvalidInputError(f"{field_name} must be 1 or greater, got {page}")

    return page


def normalize_payload_keys(data: Any, model: type[BaseModel]) -> dict[str, Any]:
    """
    Map wire (camelCase) keys of an input mapping onto the model's field names.

    Unknown keys are kept as they are, so validation rules can still see them.

    Examples:
        >>> from nexuschain.core.models import ProductRegistration
        >>> normalize_payload_keys({"productId": "SKU-1"}, ProductRegistration)
        {'product_key': 'SKU-1'}
    """
    if isinstance(data, BaseModel):
        data = data.model_dump()

    if not isinstance(data, dict):
        raise InvalidInputError("Input must be a mapping of field names to values")

    alias_to_name = {
        field.alias: name
        for name, field in model.model_fields.items()
        if field.alias
    }
    return {alias_to_name.get(key, key): value for key, value in data.items()}


def parse_input(model: type[ModelT], payload: dict[str, Any]) -> ModelT:
    """
    Construct a typed input model from a rule-checked payload.

    Type errors the rules do not cover (e.g. an unparsable date) are
    reported as a field-tagged ValidationError.
    """
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        violations: dict[str, list[str]] = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "__root__"
            violations.setdefault(field, []).append(error["msg"])
        field_name, messages = next(iter(violations.items()))
        raise ValidationError(
            rule_name="type_check",
            field_name=field_name,
            message=messages[0],
            violations=violations,
        ) from e
