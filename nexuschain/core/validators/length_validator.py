"""
MinLengthValidator - validates a string has at least a minimum number of characters.
"""

from typing import Any

from .base_validator import BaseValidator


class MinLengthValidator(BaseValidator):
    """
    Validates that a string field has at least min_length characters.

    Surrounding whitespace does not count. Missing values fail too, so a
    min_length rule doubles as a required rule.

    Parameters:
    - min_length: Minimum number of characters (required)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.min_length = self.parameters.get("min_length")
        if not isinstance(self.min_length, int) or self.min_length < 1:
            raise ValueError("MinLengthValidator requires a positive integer 'min_length'")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            raise self.fail(f"Must be at least {self.min_length} characters")

        if not isinstance(value, str):
            raise self.fail(f"Value must be text, got {type(value).__name__}")

        if len(value.strip()) < self.min_length:
            raise self.fail(f"Must be at least {self.min_length} characters")

    @property
    def rule_type(self) -> str:
        return "min_length"
