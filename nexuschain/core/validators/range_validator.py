"""
RangeValidator - validates numeric values are within a specified range.
"""

from typing import Any

from .base_validator import BaseValidator, to_number


class RangeValidator(BaseValidator):
    """
    Validates that a numeric field is within a specified range.

    Blank values are skipped (required_field handles presence). Numeric
    strings are accepted, as submitted by forms.

    Parameters:
    - min: Minimum value (inclusive)
    - max: Maximum value (inclusive)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.min_value = self.parameters.get("min")
        self.max_value = self.parameters.get("max")

        if self.min_value is None and self.max_value is None:
            raise ValueError("RangeValidator requires at least one of: min, max")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        try:
            number = to_number(value)
        except ValueError:
            raise self.fail(f"Value must be numeric, got {value!r}")

        if number is None:
            return

        if self.min_value is not None and number < self.min_value:
            raise self.fail(f"Value {number} is less than minimum {self.min_value}")

        if self.max_value is not None and number > self.max_value:
            raise self.fail(f"Value {number} exceeds maximum {self.max_value}")

    @property
    def rule_type(self) -> str:
        return "range"
