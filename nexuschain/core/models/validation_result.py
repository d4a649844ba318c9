"""
ValidationResult model representing the outcome of validating an input (ephemeral).
"""

from typing import List

from pydantic import BaseModel, Field, field_validator


class ValidationResult(BaseModel):
    """
    Outcome of running the rule engine over one input.

    Attributes:
        passed: Overall validation status
        passed_rules: Rules that succeeded
        failed_rules: Rules that failed with severity "error"
        warnings: Rules that failed with severity "warning" (non-blocking)
        field_errors: Error messages keyed by field name, in rule order
    """

    passed: bool
    passed_rules: List[str] = Field(default_factory=list)
    failed_rules: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    field_errors: dict[str, List[str]] = Field(default_factory=dict)

    @field_validator('failed_rules')
    @classmethod
    def check_passed_consistency(cls, v, info):
        """Validate that passed=True implies failed_rules is empty."""
        if info.data.get('passed') and len(v) > 0:
            raise ValueError("passed=True but failed_rules is not empty")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "passed": False,
                "passed_rules": ["name_min_length", "category_choice"],
                "failed_rules": ["product_key_min_length"],
                "warnings": [],
                "field_errors": {
                    "product_key": ["Product ID must be at least 3 characters"]
                }
            }
        }
