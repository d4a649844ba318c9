"""
Base validator interface for all input validation rules.

All validators must inherit from BaseValidator and implement the validate() method.
"""

from abc import ABC, abstractmethod
from typing import Any

from nexuschain.core.errors import ValidationError


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Each validator implements a specific validation rule type
    (required_field, min_length, choice, range, date_after, less_than, paired).

    Every validator accepts an optional "message" parameter that replaces
    its default error message.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        """
        Initialize validator.

        Args:
            field_name: Name of the field to validate
            parameters: Rule-specific parameters (e.g., min_length for min_length)
        """
        self.field_name = field_name
        self.parameters = parameters or {}
        self.message = self.parameters.get("message")

    @abstractmethod
    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Validate a value against this rule.

        Args:
            value: The field value to validate
            record: The entire input (for cross-field rules)

        Raises:
            ValidationError: If validation fails
        """
        pass

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule type identifier."""
        pass

    def fail(self, default_message: str) -> ValidationError:
        """Build the ValidationError for this rule, honoring a configured message."""
        return ValidationError(
            rule_name=self.rule_type,
            field_name=self.field_name,
            message=self.message or default_message,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    return value is None or (isinstance(value, str) and value.strip() == "")


def to_number(value: Any) -> float | None:
    """
    Coerce form input to a float.

    Returns None for blank input; raises ValueError for non-numeric input.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, int | float):
        return float(value)
    return float(str(value).strip())
