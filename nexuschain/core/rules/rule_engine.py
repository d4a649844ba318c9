"""
Rule engine for orchestrating validation rules on input payloads.

The rule engine loads validation rules, applies them to an input mapping,
and produces validation results or raises a field-tagged ValidationError.
"""

from typing import Any

from nexuschain.core.models import ValidationResult
from nexuschain.core.validators import (
    BaseValidator,
    ChoiceValidator,
    DateAfterValidator,
    LessThanValidator,
    MinLengthValidator,
    PairedFieldValidator,
    RangeValidator,
    RequiredFieldValidator,
    ValidationError,
)


class RuleEngine:
    """
    Orchestrates validation rules on input payloads.

    Loads rules from configuration and applies them in order, collecting
    every failure rather than stopping at the first, so callers can show
    all field messages at once.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "min_length": MinLengthValidator,
        "choice": ChoiceValidator,
        "range": RangeValidator,
        "date_after": DateAfterValidator,
        "less_than": LessThanValidator,
        "paired": PairedFieldValidator,
    }

    def __init__(self, rules: list[dict[str, Any]]):
        """
        Initialize the rule engine with validation rules.

        Args:
            rules: List of rule configurations, each containing:
                   - rule_name: str
                   - rule_type: str (a key of VALIDATOR_REGISTRY)
                   - field_name: str
                   - parameters: Dict[str, Any] (optional)
                   - severity: str (error or warning)
                   - enabled: bool (default True)
        """
        self.rules = rules
        self.validators: list[tuple[str, str, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        """Build validator instances from rule configurations."""
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]
            field_name = rule["field_name"]
            parameters = rule.get("parameters", {})
            severity = rule.get("severity", "error")

            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule_type}")

            try:
                validator = validator_class(field_name, parameters)
            except ValueError as e:
                raise ValueError(f"Failed to create validator for rule '{rule_name}': {e}") from e
            self.validators.append((rule_name, severity, validator))

    def validate(self, payload: dict[str, Any]) -> ValidationResult:
        """
        Validate an input mapping against all rules.

        Args:
            payload: Field name to value mapping

        Returns:
            ValidationResult containing pass/fail status and per-field messages
        """
        passed_rules = []
        failed_rules = []
        warnings = []
        field_errors: dict[str, list[str]] = {}

        for rule_name, severity, validator in self.validators:
            value = payload.get(validator.field_name)

            try:
                validator.validate(value, payload)
                passed_rules.append(rule_name)

            except ValidationError as e:
                if severity == "error":
                    failed_rules.append(rule_name)
                    field_errors.setdefault(e.field_name, []).append(e.message)
                else:
                    warnings.append(rule_name)

        return ValidationResult(
            passed=len(failed_rules) == 0,
            passed_rules=passed_rules,
            failed_rules=failed_rules,
            warnings=warnings,
            field_errors=field_errors,
        )

    def enforce(self, payload: dict[str, Any]) -> ValidationResult:
        """
        Validate and raise on failure.

        Raises:
            ValidationError: Tagged with the first failing field and rule,
                carrying every field's messages in `violations`
        """
        result = self.validate(payload)
        if result.passed:
            return result

        first_rule = result.failed_rules[0]
        rule_type = next(v.rule_type for name, _, v in self.validators if name == first_rule)
        field_name, messages = next(iter(result.field_errors.items()))
        raise ValidationError(
            rule_name=rule_type,
            field_name=field_name,
            message=messages[0],
            violations=result.field_errors,
        )

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule counts and types
        """
        return {
            "total_rules": len(self.validators),
            "rules_by_type": self._count_by_type(),
            "rules_by_severity": self._count_by_severity(),
        }

    def _count_by_type(self) -> dict[str, int]:
        """Count validators by rule type."""
        counts: dict[str, int] = {}
        for _, _, validator in self.validators:
            rule_type = validator.rule_type
            counts[rule_type] = counts.get(rule_type, 0) + 1
        return counts

    def _count_by_severity(self) -> dict[str, int]:
        """Count validators by severity."""
        counts: dict[str, int] = {}
        for _, severity, _ in self.validators:
            counts[severity] = counts.get(severity, 0) + 1
        return counts
