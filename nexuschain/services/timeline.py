"""
Provenance timeline assembly.

Fetches a product and its checkpoints, orders the checkpoints by
timestamp and folds them into derived values (current location, status,
checkpoint count, days in transit). Derived values are computed on every
read rather than stored, so they always agree with the checkpoint history.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from nexuschain.clients.record_client import RecordClient
from nexuschain.core.errors import NotFoundError
from nexuschain.core.models import Checkpoint, Product, ProductStatus, Timeline
from nexuschain.observability import metrics
from nexuschain.observability.logger import get_logger
from nexuschain.utils.validation import validate_record_id

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def order_checkpoints(checkpoints: Sequence[Checkpoint]) -> tuple[Checkpoint, ...]:
    """Order by timestamp ascending; equal timestamps keep their input order."""
    return tuple(sorted(checkpoints, key=lambda c: c.sort_key))


def days_between(start: datetime | None, now: datetime) -> int:
    """
    Whole UTC days from start to now, floored and clamped at zero.

    Naive datetimes are read as UTC. Unknown start yields 0.
    """
    if start is None:
        return 0
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0, (now - start).days)


class StatusPolicy(ABC):
    """Decides a product's status from its ordered checkpoints."""

    @abstractmethod
    def fold(self, product: Product, checkpoints: Sequence[Checkpoint]) -> ProductStatus:
        pass

    def can_accept(self, current: ProductStatus, checkpoint_status: ProductStatus) -> bool:
        """Whether a new checkpoint may be recorded against a product in `current`."""
        return not current.is_terminal


class CheckpointStatusPolicy(StatusPolicy):
    """
    Default transition rule, driven by each checkpoint's status tag.

    CREATED until the first checkpoint; a DELIVERED tag delivers, a FLAGGED
    tag flags, any other tag means IN_TRANSIT. DELIVERED and FLAGGED are
    terminal: later checkpoints do not move the status. A terminal status
    stored on the product (set by an operator) overrides the fold.
    """

    def fold(self, product: Product, checkpoints: Sequence[Checkpoint]) -> ProductStatus:
        if product.status.is_terminal:
            return product.status

        status = ProductStatus.CREATED
        for checkpoint in checkpoints:
            if status.is_terminal:
                break
            if checkpoint.status in (ProductStatus.DELIVERED, ProductStatus.FLAGGED):
                status = checkpoint.status
            else:
                status = ProductStatus.IN_TRANSIT
        return status


class TimelineBuilder:
    """Builds the provenance read model for one product."""

    def __init__(
        self,
        record_client: RecordClient,
        status_policy: StatusPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the builder.

        Args:
            record_client: Gateway to the record store
            status_policy: Transition rule (defaults to CheckpointStatusPolicy)
            clock: Returns "now"; injectable for tests
        """
        self.record_client = record_client
        self.status_policy = status_policy or CheckpointStatusPolicy()
        self.clock = clock

    def get_timeline(self, record_id: str) -> Timeline:
        """
        Build a product's timeline.

        Raises:
            InvalidInputError: If record_id is blank
            NotFoundError: If the product does not exist
            RecordStoreError: If the store fails
        """
        record_id = validate_record_id(record_id)
        product = self.record_client.get_product(record_id)
        try:
            checkpoints = self.record_client.get_checkpoints(product.record_id)
        except NotFoundError:
            # the product exists, so a missing checkpoint list is an empty one
            checkpoints = []

        timeline = self.build(product, checkpoints)
        metrics.increment_counter(metrics.timelines_built_total)
        logger.debug(
            "Timeline built",
            extra={"record_id": product.record_id, "checkpoint_count": timeline.checkpoint_count},
        )
        return timeline

    def build(self, product: Product, checkpoints: Sequence[Checkpoint]) -> Timeline:
        """Fold already-fetched checkpoints into a Timeline (no I/O)."""
        ordered = order_checkpoints(checkpoints)
        current_location = ordered[-1].location if ordered else product.origin_location

        return Timeline(
            product=product,
            checkpoints=ordered,
            checkpoint_count=len(ordered),
            days_in_transit=days_between(product.created_at, self.clock()),
            current_location=current_location,
            status=self.status_policy.fold(product, ordered),
        )
