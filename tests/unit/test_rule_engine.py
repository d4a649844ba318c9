"""
Unit tests for rule engine and rule configuration.
"""

import tempfile
from pathlib import Path

import pytest

from nexuschain.core.errors import ValidationError
from nexuschain.core.rules import (
    RuleConfigBuilder,
    RuleConfigLoader,
    RuleEngine,
    checkpoint_rules,
    registration_rules,
)

RULES_FILE = Path(__file__).resolve().parents[2] / "config" / "registration_rules.yaml"


class TestRuleEngine:
    """Tests for RuleEngine"""

    def test_validate_all_pass(self, registration_data):
        """Test validation passes when all rules pass"""
        engine = RuleEngine(registration_rules())

        result = engine.validate(registration_data)

        assert result.passed is True
        assert len(result.failed_rules) == 0
        assert len(result.passed_rules) > 0

    def test_validate_collects_every_failure(self, registration_data):
        """Test every failing field is reported, not just the first"""
        engine = RuleEngine(registration_rules())
        registration_data.update(name="X", description="short")

        result = engine.validate(registration_data)

        assert result.passed is False
        assert result.field_errors == {
            "name": ["Product name must be at least 3 characters"],
            "description": ["Description must be at least 10 characters"],
        }

    def test_enforce_tags_first_failing_field(self, registration_data):
        engine = RuleEngine(registration_rules())
        registration_data.update(min_temperature=-60, max_temperature=-80)

        with pytest.raises(ValidationError) as exc_info:
            engine.enforce(registration_data)

        error = exc_info.value
        assert error.field_name == "min_temperature"
        assert error.rule_name == "less_than"
        assert error.message == "Min temperature must be less than max temperature"

    def test_enforce_returns_result_when_valid(self, registration_data):
        result = RuleEngine(registration_rules()).enforce(registration_data)
        assert result.passed is True

    def test_expiry_before_manufacturing(self, registration_data):
        registration_data["expiry_date"] = "2023-12-31"

        with pytest.raises(ValidationError) as exc_info:
            RuleEngine(registration_rules()).enforce(registration_data)

        assert exc_info.value.field_name == "expiry_date"
        assert exc_info.value.message == "Expiry date must be after manufacturing date"

    def test_missing_category(self, registration_data):
        del registration_data["category"]

        with pytest.raises(ValidationError) as exc_info:
            RuleEngine(registration_rules()).enforce(registration_data)

        assert exc_info.value.field_name == "category"
        assert exc_info.value.message == "Please select a category"

    def test_warning_rules_do_not_fail(self):
        rules = RuleConfigBuilder().add_required_field("name").build()
        rules[0]["severity"] = "warning"

        result = RuleEngine(rules).validate({})

        assert result.passed is True
        assert result.warnings == ["name_required_field"]

    def test_disabled_rules_are_skipped(self):
        rules = RuleConfigBuilder().add_required_field("name").build()
        rules[0]["enabled"] = False

        engine = RuleEngine(rules)

        assert engine.validate({}).passed is True
        assert engine.get_rule_summary()["total_rules"] == 0

    def test_unknown_rule_type(self):
        """Test that unknown rule type raises error"""
        rules = [{
            "rule_name": "bad",
            "rule_type": "regex",
            "field_name": "name",
        }]

        with pytest.raises(ValueError, match="Unknown rule type"):
            RuleEngine(rules)

    def test_bad_parameters_name_the_rule(self):
        rules = [{
            "rule_name": "name_too_short",
            "rule_type": "min_length",
            "field_name": "name",
            "parameters": {},
        }]

        with pytest.raises(ValueError, match="name_too_short"):
            RuleEngine(rules)

    def test_get_rule_summary(self):
        """Test rule summary generation"""
        engine = RuleEngine(registration_rules())

        summary = engine.get_rule_summary()

        assert summary["total_rules"] == 10
        assert summary["rules_by_type"]["min_length"] == 4
        assert summary["rules_by_type"]["range"] == 2
        assert summary["rules_by_severity"] == {"error": 10}


class TestCheckpointRules:
    """Tests for the built-in checkpoint rule set"""

    def _checkpoint(self, **overrides):
        data = {"product_record_id": "prd0001", "location": "Memphis", "status": "IN_TRANSIT"}
        data.update(overrides)
        return data

    def test_valid_checkpoint(self):
        assert RuleEngine(checkpoint_rules()).validate(self._checkpoint(latitude=35.1, longitude=-90.0)).passed

    def test_short_location(self):
        result = RuleEngine(checkpoint_rules()).validate(self._checkpoint(location="AB"))
        assert result.field_errors == {"location": ["Location must be at least 3 characters"]}

    def test_unknown_status(self):
        result = RuleEngine(checkpoint_rules()).validate(self._checkpoint(status="LOST"))
        assert result.field_errors == {"status": ["Please select a status"]}

    def test_unpaired_coordinates(self):
        result = RuleEngine(checkpoint_rules()).validate(self._checkpoint(latitude=35.1))
        assert "latitude" in result.field_errors

    def test_latitude_out_of_range(self):
        result = RuleEngine(checkpoint_rules()).validate(self._checkpoint(latitude=91, longitude=0))
        assert result.field_errors == {"latitude": ["Latitude must be between -90 and 90"]}


class TestRuleConfigLoader:
    """Tests for RuleConfigLoader"""

    def test_load_shipped_registration_rules(self, registration_data):
        """The shipped YAML behaves like the built-in rule set"""
        rules = RuleConfigLoader(RULES_FILE).load_rules()
        engine = RuleEngine(rules)

        assert engine.validate(registration_data).passed is True

        registration_data["product_key"] = "AB"
        with pytest.raises(ValidationError) as exc_info:
            engine.enforce(registration_data)
        assert exc_info.value.message == "Product ID must be at least 3 characters"

    def test_shipped_rules_warn_on_missing_upper_bound(self, registration_data):
        del registration_data["max_temperature"]

        result = RuleEngine(RuleConfigLoader(RULES_FILE).load_rules()).validate(registration_data)

        assert result.passed is True
        assert result.warnings == ["max_temperature_recommended"]

    def test_load_rules_from_yaml(self):
        """Test loading rules from YAML file"""
        yaml_content = """
rules:
  name:
    - type: min_length
      params:
        min_length: 5
  origin_location:
    - type: required_field
      name: origin_required
      severity: warning
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            temp_path = f.name

        try:
            rules = RuleConfigLoader(temp_path).load_rules()

            assert len(rules) == 2
            assert rules[0]["rule_name"] == "name_min_length_0"
            assert rules[0]["parameters"] == {"min_length": 5}
            assert rules[1]["rule_name"] == "origin_required"
            assert rules[1]["severity"] == "warning"
        finally:
            Path(temp_path).unlink()

    def test_missing_file(self):
        """Test error when config file doesn't exist"""
        with pytest.raises(FileNotFoundError):
            RuleConfigLoader("/nonexistent/rules.yaml")

    def test_missing_rules_section(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("other: {}\n")

        with pytest.raises(ValueError, match="'rules' section"):
            RuleConfigLoader(path).load_rules()

    def test_invalid_severity(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rules:\n  name:\n    - type: required_field\n      severity: fatal\n")

        with pytest.raises(ValueError, match="Invalid severity"):
            RuleConfigLoader(path).load_rules()

    def test_unknown_type_names_the_field(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("rules:\n  name:\n    - type: regex\n")

        with pytest.raises(ValueError, match="Unknown rule type 'regex' for field 'name'"):
            RuleConfigLoader(path).load_rules()

    def test_wire_field_names_mapped_to_model(self, tmp_path):
        from nexuschain.core.models import ProductRegistration

        path = tmp_path / "rules.yaml"
        path.write_text("rules:\n  productId:\n    - type: min_length\n      params:\n        min_length: 8\n")

        rules = RuleConfigLoader(path, model=ProductRegistration).load_rules()

        assert rules[0]["field_name"] == "product_key"
        assert rules[0]["rule_name"] == "product_key_min_length_0"


class TestRuleConfigBuilder:
    """Tests for RuleConfigBuilder"""

    def test_builder_chain(self):
        rules = RuleConfigBuilder() \
            .add_required_field("manufacturing_date") \
            .add_min_length("name", 3, "Too short") \
            .add_range("latitude", min_value=-90, max_value=90) \
            .build()

        assert [r["rule_name"] for r in rules] == [
            "manufacturing_date_required_field",
            "name_min_length",
            "latitude_range",
        ]
        assert rules[1]["parameters"] == {"min_length": 3, "message": "Too short"}
        assert rules[2]["parameters"] == {"min": -90, "max": 90}

    def test_choice_from_enum(self):
        from nexuschain.core.models import ProductStatus

        rules = RuleConfigBuilder().add_choice("status", ProductStatus).build()

        assert rules[0]["parameters"]["choices"] == ["CREATED", "IN_TRANSIT", "DELIVERED", "FLAGGED"]
