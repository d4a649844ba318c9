"""
ChoiceValidator - validates a value is one of a fixed set of choices.
"""

from enum import Enum
from typing import Any

from .base_validator import BaseValidator, is_blank


class ChoiceValidator(BaseValidator):
    """
    Validates that a field value is one of the allowed choices.

    Parameters:
    - choices: Iterable of allowed values (required). Enum members are
      compared by value.
    - required: Whether a missing value fails (default True)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        choices = self.parameters.get("choices")
        if not choices:
            raise ValueError("ChoiceValidator requires 'choices' parameter")
        self.choices = [c.value if isinstance(c, Enum) else c for c in choices]
        self.required = self.parameters.get("required", True)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if is_blank(value):
            if self.required:
                raise self.fail("Please select a value")
            return

        if isinstance(value, Enum):
            value = value.value

        if value not in self.choices:
            raise self.fail(f"Value '{value}' is not one of: {', '.join(map(str, self.choices))}")

    @property
    def rule_type(self) -> str:
        return "choice"
