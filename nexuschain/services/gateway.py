"""
Provenance gateway: one object wiring settings to every workflow.

Entry points (the CLI, a web layer) build a gateway from Settings and call
its four operations; the services underneath stay independently testable.
"""

from typing import Any

import httpx

from nexuschain.clients.anchor_client import AnchorClient, Web3AnchorClient
from nexuschain.clients.qr_renderer import IdentifierRenderer, QRCodeRenderer
from nexuschain.clients.record_client import RecordClient
from nexuschain.config import Settings
from nexuschain.core.models import (
    AuthenticatedIdentity,
    Checkpoint,
    CheckpointInput,
    Product,
    ProductRegistration,
    RegisteredProduct,
    Timeline,
    VerificationOutcome,
)
from nexuschain.core.rules import RuleConfigLoader, RuleEngine, registration_rules
from nexuschain.observability.logger import get_logger
from nexuschain.services.checkpoints import CheckpointRecorder
from nexuschain.services.identifier import IdentifierEncoder
from nexuschain.services.registration import RegistrationOrchestrator
from nexuschain.services.timeline import StatusPolicy, TimelineBuilder
from nexuschain.services.verification import VerificationService

logger = get_logger(__name__)


class ProvenanceGateway:
    """
    Facade over registration, verification, timeline and checkpoint services.

    Usage:
        with ProvenanceGateway.from_settings(Settings.from_env()) as gateway:
            outcome = gateway.verify("PFZ-CV19-001")
    """

    def __init__(
        self,
        record_client: RecordClient,
        renderer: IdentifierRenderer,
        anchor_client: AnchorClient | None = None,
        registration_engine: RuleEngine | None = None,
        status_policy: StatusPolicy | None = None,
    ):
        self.record_client = record_client
        self.registration = RegistrationOrchestrator(
            record_client,
            IdentifierEncoder(renderer),
            anchor_client=anchor_client,
            rule_engine=registration_engine,
        )
        self.verification = VerificationService(record_client)
        self.timelines = TimelineBuilder(record_client, status_policy=status_policy)
        self.checkpoints = CheckpointRecorder(record_client, status_policy=status_policy)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> "ProvenanceGateway":
        """
        Build a gateway from settings.

        Anchoring is enabled only when both the RPC URL and the contract
        address are configured; a rules file replaces the built-in
        registration rules.
        """
        anchor_client = None
        if settings.anchoring_enabled:
            anchor_client = Web3AnchorClient.from_settings(settings)
        else:
            logger.info("Blockchain anchoring disabled: RPC URL or contract address not configured")

        if settings.registration_rules_path:
            rules = RuleConfigLoader(settings.registration_rules_path, model=ProductRegistration).load_rules()
        else:
            rules = registration_rules()

        return cls(
            RecordClient.from_settings(settings, transport=transport),
            QRCodeRenderer.from_settings(settings),
            anchor_client=anchor_client,
            registration_engine=RuleEngine(rules),
        )

    def close(self) -> None:
        self.record_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def register_product(
        self,
        data: dict[str, Any] | ProductRegistration,
        identity: AuthenticatedIdentity | None = None,
    ) -> RegisteredProduct:
        return self.registration.register_product(data, identity)

    def verify(self, raw_input: str) -> VerificationOutcome:
        return self.verification.verify(raw_input)

    def get_timeline(self, record_id: str) -> Timeline:
        return self.timelines.get_timeline(record_id)

    def record_checkpoint(self, data: dict[str, Any] | CheckpointInput) -> Checkpoint:
        return self.checkpoints.record_checkpoint(data)

    def list_products(
        self,
        status: str | None = None,
        search: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Product]:
        return self.record_client.list_products(status=status, search=search, page=page, limit=limit)
