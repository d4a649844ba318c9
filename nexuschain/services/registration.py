"""
Product registration orchestration.

Registration is three steps with different failure policies:

1. Create the record (mandatory). Any failure aborts and propagates.
2. Anchor on-chain and link the reference (best-effort). Failures are
   captured in the returned AnchorOutcome; the product stays registered.
3. Render the QR identifier (cosmetic). Failure leaves the image absent.

Input is validated by the rule engine before step 1, so invalid input never
reaches the network.
"""

from typing import Any

from nexuschain.clients.anchor_client import AnchorClient
from nexuschain.clients.record_client import RecordClient
from nexuschain.core.errors import (
    AnchorError,
    DuplicateError,
    ProvenanceError,
    RenderError,
)
from nexuschain.core.models import (
    AnchorOutcome,
    AnchorStatus,
    AuthenticatedIdentity,
    IdentifierImage,
    Product,
    ProductRegistration,
    RegisteredProduct,
)
from nexuschain.core.rules import RuleEngine, registration_rules
from nexuschain.observability import metrics
from nexuschain.observability.logger import get_logger, log_operation
from nexuschain.services.identifier import IdentifierEncoder
from nexuschain.utils.validation import normalize_payload_keys, parse_input

logger = get_logger(__name__)


class RegistrationOrchestrator:
    """
    Drives product registration across record store, blockchain and renderer.

    Holds no state between calls; every invocation works on its own input
    and returns a fresh RegisteredProduct.
    """

    def __init__(
        self,
        record_client: RecordClient,
        encoder: IdentifierEncoder,
        anchor_client: AnchorClient | None = None,
        rule_engine: RuleEngine | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            record_client: Gateway to the record store
            encoder: Identifier encoder with its renderer
            anchor_client: Blockchain anchoring; None disables anchoring
            rule_engine: Registration rules (defaults to the built-in set)
        """
        self.record_client = record_client
        self.encoder = encoder
        self.anchor_client = anchor_client
        self.rule_engine = rule_engine or RuleEngine(registration_rules())

    def register_product(
        self,
        data: dict[str, Any] | ProductRegistration,
        identity: AuthenticatedIdentity | None = None,
    ) -> RegisteredProduct:
        """
        Register a product.

        Args:
            data: Registration fields (snake_case or the store's camelCase)
            identity: Authenticated caller; a wallet enables anchoring

        Returns:
            RegisteredProduct with the stored product, the anchor outcome
            and, when rendering succeeded, the identifier image

        Raises:
            ValidationError: Input failed validation (no network call made)
            DuplicateError: The product key is already registered
            RecordStoreError: The record could not be created
        """
        try:
            payload = normalize_payload_keys(data, ProductRegistration)
            self.rule_engine.enforce(payload)
            registration = parse_input(ProductRegistration, payload)
        except ProvenanceError as e:
            metrics.increment_counter(metrics.registrations_total, outcome="validation_error")
            logger.info(
                "Registration rejected by validation",
                extra={"field_name": getattr(e, "field_name", None), "error_type": type(e).__name__},
            )
            raise

        with log_operation("register_product", logger=logger, product_key=registration.product_key):
            try:
                product = self.record_client.create_product(registration)
            except DuplicateError:
                metrics.increment_counter(metrics.registrations_total, outcome="duplicate")
                raise
            except ProvenanceError as e:
                metrics.increment_counter(metrics.registrations_total, outcome="record_store_error")
                metrics.record_error(e, "registration")
                raise

            product, anchor = self._anchor(product, identity)
            identifier, render_error = self._render(product)

        metrics.increment_counter(metrics.registrations_total, outcome="success")
        logger.info(
            "Product registered",
            extra={
                "product_key": product.product_key,
                "record_id": product.record_id,
                "anchor_status": anchor.status.value,
                "identifier_rendered": identifier is not None,
            },
        )
        return RegisteredProduct(
            product=product,
            anchor=anchor,
            identifier=identifier,
            render_error=render_error,
        )

    def _anchor(
        self,
        product: Product,
        identity: AuthenticatedIdentity | None,
    ) -> tuple[Product, AnchorOutcome]:
        """Best-effort anchoring; never raises."""
        if self.anchor_client is None or identity is None or not identity.can_sign:
            metrics.increment_counter(metrics.anchor_attempts_total, outcome="skipped")
            return product, AnchorOutcome(status=AnchorStatus.SKIPPED)

        try:
            reference = self.anchor_client.anchor(product.product_key, product.name, identity)
        except Exception as e:
            # the record already exists, so no anchor failure may escape
            error = e if isinstance(e, AnchorError) else AnchorError(f"Anchoring failed: {type(e).__name__}: {e}")
            metrics.increment_counter(metrics.anchor_attempts_total, outcome="failed")
            metrics.record_error(error, "registration")
            logger.warning(
                "Blockchain anchoring failed; product remains registered unanchored",
                extra={"record_id": product.record_id, "error_message": str(error)},
            )
            return product, AnchorOutcome(status=AnchorStatus.FAILED, error=error.public_message)

        try:
            self.record_client.update_anchor_reference(product.record_id, reference)
        except ProvenanceError as e:
            metrics.increment_counter(metrics.anchor_attempts_total, outcome="unlinked")
            metrics.record_error(e, "registration")
            logger.warning(
                "Anchor reference could not be linked to the record",
                extra={
                    "record_id": product.record_id,
                    "anchor_reference": reference,
                    "error_type": type(e).__name__,
                },
            )
            return product, AnchorOutcome(
                status=AnchorStatus.UNLINKED,
                reference=reference,
                error=e.public_message,
            )

        metrics.increment_counter(metrics.anchor_attempts_total, outcome="anchored")
        anchored = product.model_copy(update={"anchor_reference": reference})
        return anchored, AnchorOutcome(status=AnchorStatus.ANCHORED, reference=reference)

    def _render(self, product: Product) -> tuple[IdentifierImage | None, str | None]:
        """Cosmetic identifier rendering; never raises."""
        try:
            image = self.encoder.encode(product)
        except RenderError as e:
            metrics.increment_counter(metrics.identifier_renders_total, outcome="failed")
            metrics.record_error(e, "registration")
            logger.warning(
                "Identifier rendering failed",
                extra={"record_id": product.record_id, "error_message": str(e)},
            )
            return None, e.public_message

        metrics.increment_counter(metrics.identifier_renders_total, outcome="success")
        return image, None
