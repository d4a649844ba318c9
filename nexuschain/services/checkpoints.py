"""
Checkpoint recording.

A checkpoint is validated locally, checked against the product's current
status (folded from its existing checkpoints) and then written through
the record store. Products in a terminal state accept no new checkpoints.
"""

from typing import Any

from nexuschain.clients.record_client import RecordClient
from nexuschain.core.errors import ProvenanceError, ValidationError
from nexuschain.core.models import Checkpoint, CheckpointInput
from nexuschain.core.rules import RuleEngine, checkpoint_rules
from nexuschain.observability import metrics
from nexuschain.observability.logger import get_logger, log_operation
from nexuschain.services.timeline import StatusPolicy, TimelineBuilder
from nexuschain.utils.validation import normalize_payload_keys, parse_input

logger = get_logger(__name__)


class CheckpointRecorder:
    """Records custody and inspection events against existing products."""

    def __init__(
        self,
        record_client: RecordClient,
        status_policy: StatusPolicy | None = None,
        rule_engine: RuleEngine | None = None,
    ):
        self.record_client = record_client
        self.timeline_builder = TimelineBuilder(record_client, status_policy=status_policy)
        self.rule_engine = rule_engine or RuleEngine(checkpoint_rules())

    @property
    def status_policy(self) -> StatusPolicy:
        return self.timeline_builder.status_policy

    def record_checkpoint(self, data: dict[str, Any] | CheckpointInput) -> Checkpoint:
        """
        Record a checkpoint.

        Args:
            data: Checkpoint fields (snake_case or the store's camelCase)

        Returns:
            The checkpoint as stored

        Raises:
            ValidationError: Input failed validation, or the product is in
                a terminal state (tagged on "status")
            NotFoundError: The product does not exist
            RecordStoreError: The store failed
        """
        payload = normalize_payload_keys(data, CheckpointInput)
        self.rule_engine.enforce(payload)
        checkpoint_input = parse_input(CheckpointInput, payload)

        timeline = self.timeline_builder.get_timeline(checkpoint_input.product_record_id)
        if not self.status_policy.can_accept(timeline.status, checkpoint_input.status):
            logger.info(
                "Checkpoint rejected for product in terminal state",
                extra={"record_id": timeline.product.record_id, "status": timeline.status.value},
            )
            raise ValidationError(
                rule_name="status_transition",
                field_name="status",
                message=f"Product is {timeline.status.value}; no further checkpoints can be recorded",
            )

        with log_operation(
            "record_checkpoint",
            logger=logger,
            record_id=checkpoint_input.product_record_id,
            checkpoint_status=checkpoint_input.status.value,
        ):
            try:
                checkpoint = self.record_client.create_checkpoint(checkpoint_input)
            except ProvenanceError as e:
                metrics.record_error(e, "checkpoints")
                raise

        metrics.increment_counter(metrics.checkpoints_recorded_total, status=checkpoint.status.value)
        return checkpoint
