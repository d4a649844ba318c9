"""
Runtime configuration for nexuschain.

Settings come from environment variables with sensible local defaults,
optionally overlaid by a YAML file whose keys are the setting names.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator

# Setting name -> environment variable
ENV_VARS = {
    "api_url": "NEXUS_API_URL",
    "api_timeout": "NEXUS_API_TIMEOUT",
    "api_token": "NEXUS_API_TOKEN",
    "blockchain_rpc_url": "BLOCKCHAIN_RPC_URL",
    "contract_address": "CONTRACT_ADDRESS",
    "anchor_timeout": "ANCHOR_TIMEOUT",
    "qr_box_size": "QR_BOX_SIZE",
    "qr_border": "QR_BORDER",
    "log_level": "LOG_LEVEL",
    "log_format": "LOG_FORMAT",
    "registration_rules_path": "REGISTRATION_RULES_PATH",
}


class Settings(BaseModel):
    """
    Connection and behaviour settings for the provenance workflow.

    Attributes:
        api_url: Base URL of the record store
        api_timeout: Per-request timeout for record store calls, in seconds
        api_token: Bearer token sent to the record store, if any
        blockchain_rpc_url: JSON-RPC endpoint; anchoring is disabled without it
        contract_address: Address of the product registry contract
        anchor_timeout: Timeout for submitting and confirming an anchor, in seconds
        qr_box_size: Pixels per QR module
        qr_border: QR quiet zone width, in modules
        log_level: Log level name
        log_format: "json" or "text"
        registration_rules_path: YAML rule file replacing the built-in registration rules
    """

    api_url: str = "http://localhost:3000"
    api_timeout: float = Field(30.0, gt=0)
    api_token: SecretStr | None = None
    blockchain_rpc_url: str | None = None
    contract_address: str | None = None
    anchor_timeout: float = Field(120.0, gt=0)
    qr_box_size: int = Field(10, ge=1)
    qr_border: int = Field(4, ge=0)
    log_level: str = "INFO"
    log_format: str = "json"
    registration_rules_path: Path | None = None

    class Config:
        frozen = True

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v.lower()

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def anchoring_enabled(self) -> bool:
        return bool(self.blockchain_rpc_url and self.contract_address)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests)
            **overrides: Values taking precedence over the environment
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {
            name: environ[var]
            for name, var in ENV_VARS.items()
            if environ.get(var) not in (None, "")
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @classmethod
    def from_yaml(cls, config_path: str | Path, environ: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from a YAML file; the environment fills missing keys.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a mapping
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping of setting names")

        unknown = set(config) - set(cls.model_fields)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        return cls.from_env(environ, **config)
