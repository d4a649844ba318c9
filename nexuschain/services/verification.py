"""
Product verification.

Resolves untrusted user text (typed product key, record id, scanned QR
payload or legacy "NEXUS-" label) to Verified(product) or NotVerified.

Every lookup failure, whether the product is missing, the store is down
or the input is unusable, collapses to the same NotVerified outcome.
Distinguishing them would let a caller discover which identifiers exist.
Only empty input is rejected separately, before any network call.
"""

from nexuschain.clients.record_client import RecordClient
from nexuschain.core.errors import InvalidInputError, NotFoundError, ProvenanceError
from nexuschain.core.models import NotVerified, Product, VerificationOutcome, Verified
from nexuschain.observability import metrics
from nexuschain.observability.logger import get_logger
from nexuschain.services.identifier import LEGACY_LABEL_PREFIX, decode_payload
from nexuschain.utils.validation import is_safe_identifier

logger = get_logger(__name__)


class VerificationService:
    """Verifies product authenticity against the record store."""

    def __init__(self, record_client: RecordClient):
        self.record_client = record_client

    def verify(self, raw_input: str) -> VerificationOutcome:
        """
        Verify an identifier.

        Args:
            raw_input: Decoded text from a scan or typed by a user

        Returns:
            Verified with the product, or NotVerified

        Raises:
            InvalidInputError: If the input is empty or whitespace-only
        """
        if not isinstance(raw_input, str) or not raw_input.strip():
            metrics.increment_counter(metrics.verifications_total, outcome="invalid_input")
            raise InvalidInputError("Verification input is empty")

        text = raw_input.strip()
        if not is_safe_identifier(text):
            logger.info("Verification input rejected without lookup", extra={"input_length": len(text)})
            return self._not_verified()

        payload = decode_payload(text)
        lookup_key = payload.product_key if payload is not None else text
        if not is_safe_identifier(lookup_key):
            logger.info("Scanned payload rejected without lookup", extra={"input_length": len(text)})
            return self._not_verified()

        try:
            product = self._lookup(lookup_key, legacy_label=payload is None)
        except ProvenanceError as e:
            # Cause stays in the logs only
            logger.info(
                "Verification lookup did not resolve",
                extra={"error_type": type(e).__name__},
            )
            return self._not_verified()

        if payload is not None and product.record_id != payload.record_id:
            logger.warning(
                "Scanned payload does not match the registered record",
                extra={"product_key": payload.product_key},
            )
            return self._not_verified()

        metrics.increment_counter(metrics.verifications_total, outcome="verified")
        logger.info(
            "Product verified",
            extra={"product_key": product.product_key, "record_id": product.record_id},
        )
        return Verified(product=product)

    def _lookup(self, identifier: str, legacy_label: bool) -> Product:
        """
        Resolve an identifier exactly as given.

        Only when nothing matches and the text is a "NEXUS-" label is the
        bare id behind the prefix tried, so a product key that itself starts
        with the prefix always wins.
        """
        try:
            return self.record_client.verify_by_identifier(identifier)
        except NotFoundError:
            is_label = legacy_label and identifier.upper().startswith(LEGACY_LABEL_PREFIX)
            label_id = identifier[len(LEGACY_LABEL_PREFIX):]
            if not is_label or not label_id.strip():
                raise
            logger.debug("Resolving legacy label", extra={"lookup": "legacy_label"})
            return self.record_client.verify_by_identifier(label_id)

    @staticmethod
    def _not_verified() -> NotVerified:
        metrics.increment_counter(metrics.verifications_total, outcome="not_verified")
        return NotVerified()
