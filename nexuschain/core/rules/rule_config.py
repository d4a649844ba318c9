"""
Rule configuration management.

Registration and checkpoint rules are plain data: one dictionary per
(field, validator) pair. They are either built in code with
RuleConfigBuilder or read from a deployment's YAML file with
RuleConfigLoader.
"""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from .rule_engine import RuleEngine

SEVERITIES = ("error", "warning")


def make_rule(
    rule_type: str,
    field_name: str,
    parameters: dict[str, Any] | None = None,
    rule_name: str | None = None,
    severity: str = "error",
    enabled: bool = True,
) -> dict[str, Any]:
    """Assemble one rule dictionary in the shape RuleEngine expects."""
    if rule_type not in RuleEngine.VALIDATOR_REGISTRY:
        known = ", ".join(sorted(RuleEngine.VALIDATOR_REGISTRY))
        raise ValueError(f"Unknown rule type '{rule_type}' for field '{field_name}' (known: {known})")
    if severity not in SEVERITIES:
        raise ValueError(
            f"Invalid severity '{severity}' for rule '{rule_name or field_name}'. Must be 'error' or 'warning'"
        )
    return {
        "rule_name": rule_name or f"{field_name}_{rule_type}",
        "rule_type": rule_type,
        "field_name": field_name,
        "parameters": dict(parameters or {}),
        "severity": severity,
        "enabled": enabled,
    }


class RuleConfigLoader:
    """
    Loads validation rules from a YAML file.

    Field names may be written the way the record store spells them
    (``productId``, ``originLocation``) when a model is given; they are
    mapped onto the model's field names.

    Expected YAML format:
    ```yaml
    rules:
      productId:
        - type: min_length
          params:
            min_length: 3
            message: "Product ID must be at least 3 characters"

      min_temperature:
        - type: less_than
          params:
            other_field: max_temperature

      max_temperature:
        - type: required_field
          name: max_temperature_recommended
          severity: warning
    ```
    """

    def __init__(self, config_path: str | Path, model: type[BaseModel] | None = None):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")
        self.model = model

    def _field_name(self, name: str) -> str:
        if self.model is None:
            return name
        for field_name, field in self.model.model_fields.items():
            if name == field.alias:
                return field_name
        return name

    def load_rules(self) -> list[dict[str, Any]]:
        """
        Parse the file into rule dictionaries, in file order.

        Raises:
            ValueError: If the file has no 'rules' mapping or a rule is malformed
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict) or not isinstance(config.get("rules"), dict):
            raise ValueError(f"{self.config_path}: configuration file must contain 'rules' section")

        rules = []
        for raw_field, field_rule_list in config["rules"].items():
            if not isinstance(field_rule_list, list):
                raise ValueError(f"Rules for field '{raw_field}' must be a list")

            field_name = self._field_name(raw_field)
            for idx, rule_def in enumerate(field_rule_list):
                if not isinstance(rule_def, dict) or "type" not in rule_def:
                    raise ValueError(f"Rule for field '{raw_field}' is missing 'type'")

                rules.append(make_rule(
                    rule_def["type"],
                    field_name,
                    rule_def.get("params", rule_def.get("parameters")),
                    rule_name=rule_def.get("name", f"{field_name}_{rule_def['type']}_{idx}"),
                    severity=rule_def.get("severity", "error"),
                    enabled=rule_def.get("enabled", True),
                ))

        return rules


class RuleConfigBuilder:
    """
    Chainable builder for rule lists, used by the built-in rule sets.

    Example:
        rules = RuleConfigBuilder().add_min_length("name", 3).add_required_field("manufacturing_date").build()
    """

    def __init__(self):
        self.rules: list[dict[str, Any]] = []

    def add(
        self,
        rule_type: str,
        field_name: str,
        message: str | None = None,
        severity: str = "error",
        **parameters: Any,
    ) -> "RuleConfigBuilder":
        """Add a rule of any registered type; keyword arguments become its parameters."""
        if message:
            parameters["message"] = message
        self.rules.append(make_rule(rule_type, field_name, parameters, severity=severity))
        return self

    def add_required_field(self, field_name: str, message: str | None = None) -> "RuleConfigBuilder":
        return self.add("required_field", field_name, message)

    def add_min_length(self, field_name: str, min_length: int, message: str | None = None) -> "RuleConfigBuilder":
        return self.add("min_length", field_name, message, min_length=min_length)

    def add_choice(
        self,
        field_name: str,
        choices: list[Any] | type[Enum],
        message: str | None = None,
        required: bool = True,
    ) -> "RuleConfigBuilder":
        """Add a fixed-choice rule; an Enum class contributes its values."""
        values = [c.value if isinstance(c, Enum) else c for c in choices]
        return self.add("choice", field_name, message, choices=values, required=required)

    def add_range(
        self,
        field_name: str,
        min_value: float | None = None,
        max_value: float | None = None,
        message: str | None = None,
    ) -> "RuleConfigBuilder":
        bounds = {"min": min_value, "max": max_value}
        return self.add("range", field_name, message, **{k: v for k, v in bounds.items() if v is not None})

    def add_date_after(self, field_name: str, other_field: str, message: str | None = None) -> "RuleConfigBuilder":
        """field_name must be a date strictly after other_field."""
        return self.add("date_after", field_name, message, other_field=other_field)

    def add_less_than(self, field_name: str, other_field: str, message: str | None = None) -> "RuleConfigBuilder":
        """field_name must be below other_field when both are given."""
        return self.add("less_than", field_name, message, other_field=other_field)

    def add_paired(self, field_name: str, other_field: str, message: str | None = None) -> "RuleConfigBuilder":
        """field_name and other_field are given together or not at all."""
        return self.add("paired", field_name, message, other_field=other_field)

    def build(self) -> list[dict[str, Any]]:
        return list(self.rules)
