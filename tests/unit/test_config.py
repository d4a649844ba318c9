"""
Unit tests for runtime settings.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from nexuschain.config import Settings


class TestFromEnv:
    """Tests for Settings.from_env"""

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.api_url == "http://localhost:3000"
        assert settings.api_timeout == 30.0
        assert settings.api_token is None
        assert settings.anchoring_enabled is False
        assert (settings.qr_box_size, settings.qr_border) == (10, 4)
        assert settings.log_format == "json"

    def test_reads_environment(self):
        settings = Settings.from_env({
            "NEXUS_API_URL": "https://records.example.com/",
            "NEXUS_API_TIMEOUT": "5",
            "NEXUS_API_TOKEN": "s3cret",
            "BLOCKCHAIN_RPC_URL": "http://127.0.0.1:8545",
            "CONTRACT_ADDRESS": "0x5FbDB2315678afecb367f032d93F642f64180aa3",
            "LOG_FORMAT": "TEXT",
        })

        assert settings.api_url == "https://records.example.com"
        assert settings.api_timeout == 5.0
        assert settings.api_token.get_secret_value() == "s3cret"
        assert settings.anchoring_enabled is True
        assert settings.log_format == "text"

    def test_blank_variables_ignored(self):
        assert Settings.from_env({"NEXUS_API_URL": ""}).api_url == "http://localhost:3000"

    def test_overrides_win(self):
        settings = Settings.from_env({"QR_BOX_SIZE": "8"}, qr_box_size=12)
        assert settings.qr_box_size == 12

    def test_token_hidden(self):
        settings = Settings.from_env({"NEXUS_API_TOKEN": "s3cret"})
        assert "s3cret" not in repr(settings)

    @pytest.mark.parametrize("env", [
        {"NEXUS_API_TIMEOUT": "0"},
        {"QR_BOX_SIZE": "zero"},
        {"LOG_FORMAT": "xml"},
    ])
    def test_invalid_values(self, env):
        with pytest.raises(ValidationError):
            Settings.from_env(env)

    def test_settings_are_frozen(self):
        settings = Settings.from_env({})
        with pytest.raises(ValidationError):
            settings.api_url = "http://elsewhere"


class TestFromYaml:
    """Tests for Settings.from_yaml"""

    def test_yaml_with_env_fallback(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("api_url: http://records.internal:3000\nregistration_rules_path: config/rules.yaml\n")

        settings = Settings.from_yaml(path, environ={"NEXUS_API_TIMEOUT": "12"})

        assert settings.api_url == "http://records.internal:3000"
        assert settings.api_timeout == 12.0
        assert settings.registration_rules_path == Path("config/rules.yaml")

    def test_unknown_keys_rejected(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("api_ulr: http://typo\n")

        with pytest.raises(ValueError, match="api_ulr"):
            Settings.from_yaml(path, environ={})

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            Settings.from_yaml(path, environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "absent.yaml")
