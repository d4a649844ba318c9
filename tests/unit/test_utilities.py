"""
Unit tests for shared utilities.

This module tests:
- Input validation utilities
- Payload key normalization and typed input parsing
- Structured logging setup
- Metrics helpers
"""

import json
import logging

import pytest

from nexuschain.core.errors import AnchorError, InvalidInputError, ValidationError
from nexuschain.core.models import CheckpointInput, ProductRegistration
from nexuschain.observability import metrics
from nexuschain.observability.logger import log_operation, setup_logger
from nexuschain.utils.validation import (
    MAX_IDENTIFIER_LENGTH,
    is_safe_identifier,
    normalize_payload_keys,
    parse_input,
    validate_limit,
    validate_page,
    validate_record_id,
)


# =======================
# VALIDATION UTILITIES TESTS
# =======================

class TestValidationUtilities:
    """Test the input validation utilities."""

    def test_validate_record_id_valid(self):
        """Test valid record IDs."""
        assert validate_record_id("65f1c2e4a9") == "65f1c2e4a9"
        assert validate_record_id("  spaces  ") == "spaces"  # Strips whitespace

    def test_validate_record_id_invalid(self):
        """Test invalid record IDs."""
        with pytest.raises(InvalidInputError, match="must be a string"):
            validate_record_id(None)

        with pytest.raises(InvalidInputError, match="cannot be empty"):
            validate_record_id("   ")

        with pytest.raises(InvalidInputError, match="control characters"):
            validate_record_id("abc\x00")

        with pytest.raises(InvalidInputError, match="cannot be encoded"):
            validate_record_id("prd\ud800")

        with pytest.raises(InvalidInputError, match="maximum length"):
            validate_record_id("a" * (MAX_IDENTIFIER_LENGTH + 1))

    def test_is_safe_identifier(self):
        assert is_safe_identifier("PFZ-CV19-001")
        assert is_safe_identifier("a" * MAX_IDENTIFIER_LENGTH)
        assert not is_safe_identifier("a" * (MAX_IDENTIFIER_LENGTH + 1))
        assert not is_safe_identifier("line\nbreak")
        assert not is_safe_identifier("PFZ-\ud800")

    def test_validate_limit(self):
        assert validate_limit(50) == 50
        with pytest.raises(InvalidInputError):
            validate_limit(0)
        with pytest.raises(InvalidInputError):
            validate_limit(5000)
        with pytest.raises(InvalidInputError):
            validate_limit(True)

    def test_validate_page(self):
        assert validate_page(1) == 1
        with pytest.raises(InvalidInputError):
            validate_page(0)
        with pytest.raises(InvalidInputError):
            validate_page("2")


class TestPayloadHandling:
    """Test key normalization and typed parsing"""

    def test_normalize_maps_wire_names(self):
        payload = normalize_payload_keys(
            {"productId": "SKU-1", "originLocation": "Lyon", "name": "Widget", "extra": 1},
            ProductRegistration,
        )
        assert payload == {"product_key": "SKU-1", "origin_location": "Lyon", "name": "Widget", "extra": 1}

    def test_normalize_accepts_model(self):
        checkpoint_input = CheckpointInput(product_record_id="prd1", location="Memphis", status="IN_TRANSIT")
        payload = normalize_payload_keys(checkpoint_input, CheckpointInput)
        assert payload["product_record_id"] == "prd1"

    def test_normalize_rejects_non_mapping(self):
        with pytest.raises(InvalidInputError):
            normalize_payload_keys(["productId", "SKU-1"], ProductRegistration)

    def test_parse_input_tags_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(CheckpointInput, {"product_record_id": "prd1", "location": "Memphis", "status": "LOST"})

        assert exc_info.value.field_name == "status"
        assert exc_info.value.rule_name == "type_check"
        assert "status" in exc_info.value.violations


# =======================
# OBSERVABILITY TESTS
# =======================

class TestLogging:
    """Test structured logging"""

    def test_json_format(self, capsys):
        logger = setup_logger("nexuschain.test_json", level="INFO", format_type="json")

        logger.info("Product registered", extra={"product_key": "SKU-1"})

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["message"] == "Product registered"
        assert record["level"] == "INFO"
        assert record["service"] == "nexuschain"
        assert record["product_key"] == "SKU-1"
        assert record["component"] == "test_json"

    def test_secrets_masked(self, capsys):
        logger = setup_logger("nexuschain.test_secrets", level="INFO", format_type="json")
        text_logger = setup_logger("nexuschain.test_secrets_text", level="INFO", format_type="text")

        logger.info("Signing", extra={"private_key": "0xdeadbeef", "wallet": "0x90F8"})
        text_logger.info("Calling store", extra={"api_token": "s3cret"})

        err = capsys.readouterr().err
        assert "0xdeadbeef" not in err
        assert "s3cret" not in err
        assert "api_token=***" in err
        assert json.loads(err.splitlines()[0])["wallet"] == "0x90F8"

    def test_logs_go_to_stderr(self, capsys):
        logger = setup_logger("nexuschain.test_stderr", level="INFO", format_type="text")

        logger.info("hello")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "hello" in captured.err

    def test_log_operation_failure(self):
        logger = setup_logger("nexuschain.test_operation", level="DEBUG", format_type="text")
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        logger.addHandler(handler)

        with pytest.raises(RuntimeError):
            with log_operation("create_product", logger=logger, product_key="SKU-1"):
                raise RuntimeError("boom")

        failure = records[-1]
        assert failure.levelno == logging.WARNING
        assert failure.error_type == "RuntimeError"
        assert failure.product_key == "SKU-1"


class TestMetrics:
    """Test metrics helpers"""

    def test_metric_names(self):
        output = metrics.generate_metrics().decode("utf-8")
        assert "nexus_registrations_total" in output
        assert "nexus_collaborator_request_duration_seconds" in output

    def test_record_error(self, metric_value):
        before = metric_value("nexus_errors_total", error_type="AnchorError", component="unit_test")

        metrics.record_error(RuntimeError(), "unit_test")
        metrics.record_error(AnchorError(), "unit_test")

        assert metric_value("nexus_errors_total", error_type="AnchorError", component="unit_test") == before + 1

    def test_collaborator_call_observes_duration(self, metric_value):
        before = metric_value(
            "nexus_collaborator_request_duration_seconds_count",
            collaborator="qr",
            operation="unit_test",
        )

        with metrics.collaborator_call("qr", "unit_test"):
            pass

        after = metric_value(
            "nexus_collaborator_request_duration_seconds_count",
            collaborator="qr",
            operation="unit_test",
        )
        assert after == before + 1

    def test_content_type(self):
        assert metrics.get_content_type().startswith("text/plain")
