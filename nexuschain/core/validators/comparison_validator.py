"""
Cross-field validators: ordering between two fields of the same input.
"""

from datetime import date, datetime
from typing import Any

from .base_validator import BaseValidator, is_blank, to_number


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


class DateAfterValidator(BaseValidator):
    """
    Validates that a date field is strictly after another date field.

    Skipped when either date is absent.

    Parameters:
    - other_field: Name of the field that must come first (required)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.other_field = self.parameters.get("other_field")
        if not self.other_field:
            raise ValueError("DateAfterValidator requires 'other_field' parameter")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        other = record.get(self.other_field)
        if is_blank(value):
            return

        try:
            this_date = _to_date(value)
        except ValueError:
            raise self.fail(f"Value {value!r} is not a valid date")

        if is_blank(other):
            return

        try:
            other_date = _to_date(other)
        except ValueError:
            # the other field's own rule reports it
            return

        if this_date <= other_date:
            raise self.fail(f"Must be after {self.other_field}")

    @property
    def rule_type(self) -> str:
        return "date_after"


class LessThanValidator(BaseValidator):
    """
    Validates that a numeric field is strictly less than another field.

    Only enforced when both values are present, so either bound alone
    is accepted.

    Parameters:
    - other_field: Name of the field that must be greater (required)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.other_field = self.parameters.get("other_field")
        if not self.other_field:
            raise ValueError("LessThanValidator requires 'other_field' parameter")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        try:
            this_number = to_number(value)
            other_number = to_number(record.get(self.other_field))
        except ValueError:
            raise self.fail(f"{self.field_name} and {self.other_field} must be numeric")

        if this_number is None or other_number is None:
            return

        if not this_number < other_number:
            raise self.fail(f"Must be less than {self.other_field}")

    @property
    def rule_type(self) -> str:
        return "less_than"


class PairedFieldValidator(BaseValidator):
    """
    Validates that two optional fields are given together or not at all.

    Parameters:
    - other_field: Name of the companion field (required)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.other_field = self.parameters.get("other_field")
        if not self.other_field:
            raise ValueError("PairedFieldValidator requires 'other_field' parameter")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if is_blank(value) != is_blank(record.get(self.other_field)):
            raise self.fail(f"{self.field_name} and {self.other_field} must be given together")

    @property
    def rule_type(self) -> str:
        return "paired"
