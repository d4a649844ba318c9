"""
Validation rule implementations.

Provides validators for required fields, minimum lengths, fixed choices,
numeric ranges and cross-field ordering.
"""

from nexuschain.core.errors import ValidationError

from .base_validator import BaseValidator
from .choice_validator import ChoiceValidator
from .comparison_validator import DateAfterValidator, LessThanValidator, PairedFieldValidator
from .length_validator import MinLengthValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "MinLengthValidator",
    "ChoiceValidator",
    "RangeValidator",
    "DateAfterValidator",
    "LessThanValidator",
    "PairedFieldValidator",
]
